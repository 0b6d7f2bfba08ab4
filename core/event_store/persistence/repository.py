"""
Custody Event Store — Django Audit Log Repository
====================================================
AuditEventLog backed by the Django ORM.

The next sequence and the previous hash are read from the log head
under select_for_update() inside the caller's transaction. The unique
constraints on sequence and previous_event_hash are the backstop when
two processes race for the same head: the loser gets an IntegrityError,
surfaced as SequenceConflictError, and its transaction rolls back.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Q

from core.event_store.errors import SequenceConflictError, UnknownEventTypeError
from core.event_store.hashing.hasher import GENESIS_HASH
from core.event_store.hashing.verifier import verify_chain
from core.event_store.log import AuditEvent, seal_event
from core.event_store.models import AuditEventRecord
from core.event_store.validators.errors import ValidationResult
from core.event_store.validators.registry import EventTypeRegistry

logger = logging.getLogger("custody.event_store")


def _to_event(row: AuditEventRecord) -> AuditEvent:
    return AuditEvent(
        sequence=row.sequence,
        event_id=row.event_id,
        event_type=row.event_type,
        product_id=row.product_id,
        actor_id=row.actor_id,
        command_id=row.command_id,
        correlation_id=row.correlation_id,
        payload=row.payload,
        created_at=row.created_at,
        from_party=row.from_party,
        to_party=row.to_party,
        previous_event_hash=row.previous_event_hash,
        event_hash=row.event_hash,
    )


class DjangoAuditEventLog:
    """Audit log persisted in the custody_audit_event table."""

    def __init__(self, registry: EventTypeRegistry):
        self._registry = registry

    @property
    def registry(self) -> EventTypeRegistry:
        return self._registry

    def append(
        self,
        *,
        event_type: str,
        product_id: str,
        actor_id: str,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        payload: dict,
        created_at: datetime,
        from_party: Optional[str] = None,
        to_party: Optional[str] = None,
    ) -> AuditEvent:
        if not self._registry.is_registered(event_type):
            raise UnknownEventTypeError(event_type)

        with transaction.atomic():
            head = (
                AuditEventRecord.objects.select_for_update()
                .order_by("-sequence")
                .first()
            )
            event = seal_event(
                sequence=(head.sequence + 1) if head else 1,
                previous_event_hash=head.event_hash if head else GENESIS_HASH,
                event_type=event_type,
                product_id=product_id,
                actor_id=actor_id,
                command_id=command_id,
                correlation_id=correlation_id,
                payload=payload,
                created_at=created_at,
                from_party=from_party,
                to_party=to_party,
            )
            try:
                with transaction.atomic():
                    AuditEventRecord.objects.create(
                        sequence=event.sequence,
                        event_id=event.event_id,
                        event_type=event.event_type,
                        product_id=event.product_id,
                        actor_id=event.actor_id,
                        command_id=event.command_id,
                        correlation_id=event.correlation_id,
                        payload=event.payload,
                        created_at=event.created_at,
                        from_party=event.from_party,
                        to_party=event.to_party,
                        previous_event_hash=event.previous_event_hash,
                        event_hash=event.event_hash,
                    )
            except IntegrityError as exc:
                raise SequenceConflictError(event.sequence) from exc

        logger.debug(
            f"Appended #{event.sequence} {event_type} for {product_id}"
        )
        return event

    def events(self, after_sequence: int = 0) -> tuple[AuditEvent, ...]:
        rows = AuditEventRecord.objects.filter(
            sequence__gt=after_sequence
        ).order_by("sequence")
        return tuple(_to_event(row) for row in rows)

    def events_for_product(self, product_id: str) -> tuple[AuditEvent, ...]:
        rows = AuditEventRecord.objects.filter(
            product_id=product_id
        ).order_by("sequence")
        return tuple(_to_event(row) for row in rows)

    def events_by_owner(self, identity: str) -> tuple[AuditEvent, ...]:
        rows = AuditEventRecord.objects.filter(
            Q(from_party=identity) | Q(to_party=identity)
        ).order_by("sequence")
        return tuple(_to_event(row) for row in rows)

    def last_event(self) -> Optional[AuditEvent]:
        row = AuditEventRecord.objects.order_by("-sequence").first()
        return _to_event(row) if row is not None else None

    def count(self) -> int:
        return AuditEventRecord.objects.count()

    def verify(self) -> ValidationResult:
        return verify_chain(self.events())
