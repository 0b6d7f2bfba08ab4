"""
Custody Event Store — Audit Event Log
========================================
The append-only, strictly ordered record of everything that happened.

The product store keeps only the latest snapshot; this log is the sole
source of full history. Each product costs O(1) in the store however
many times it changes hands; the history cost lives here and with the
external indexers that replay it.

Rules:
- Append only. No update, no delete, no truncate.
- Global, gap-free sequence: 1, 2, 3, …
- Each event is hash-chained to its predecessor
- Only registered event types are accepted
- Queries only see events whose unit of work has committed
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from threading import Lock
from typing import Optional, Protocol

from core.event_store.errors import UnknownEventTypeError
from core.event_store.hashing.hasher import GENESIS_HASH, compute_audit_event_hash
from core.event_store.hashing.verifier import verify_chain
from core.event_store.validators.errors import ValidationResult
from core.event_store.validators.registry import EventTypeRegistry
from core.transactions import InMemoryTransactionManager

logger = logging.getLogger("custody.event_store")


# ══════════════════════════════════════════════════════════════
# EVENT ENVELOPE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AuditEvent:
    """
    One sealed entry of the audit log.

    Fields:
        sequence:            Position in the global commit order (1-based).
        event_id:            Unique identifier.
        event_type:          Registered type (e.g. custody.product.registered.v1).
        product_id:          Product the event is about (index key).
        actor_id:            Identity that authored the command.
        command_id:          Command that produced the event.
        correlation_id:      Story the command belongs to.
        payload:             JSON-native event body, keys in schema order.
        created_at:          When the event happened (command issued_at).
        from_party:          Custody giver (None on registration).
        to_party:            Custody receiver.
        previous_event_hash: Hash of the preceding event, or GENESIS_HASH.
        event_hash:          SHA-256 over type + sequence + payload + link.
    """

    sequence: int
    event_id: uuid.UUID
    event_type: str
    product_id: str
    actor_id: str
    command_id: uuid.UUID
    correlation_id: uuid.UUID
    payload: dict
    created_at: datetime
    from_party: Optional[str]
    to_party: Optional[str]
    previous_event_hash: str
    event_hash: str


def seal_event(
    *,
    sequence: int,
    previous_event_hash: str,
    event_type: str,
    product_id: str,
    actor_id: str,
    command_id: uuid.UUID,
    correlation_id: uuid.UUID,
    payload: dict,
    created_at: datetime,
    from_party: Optional[str] = None,
    to_party: Optional[str] = None,
    event_id: Optional[uuid.UUID] = None,
) -> AuditEvent:
    """Build the next chained event. Pure: assigns nothing global."""
    sealed_payload = copy.deepcopy(payload)
    return AuditEvent(
        sequence=sequence,
        event_id=event_id or uuid.uuid4(),
        event_type=event_type,
        product_id=product_id,
        actor_id=actor_id,
        command_id=command_id,
        correlation_id=correlation_id,
        payload=sealed_payload,
        created_at=created_at,
        from_party=from_party,
        to_party=to_party,
        previous_event_hash=previous_event_hash,
        event_hash=compute_audit_event_hash(
            event_type=event_type,
            sequence=sequence,
            payload=sealed_payload,
            previous_event_hash=previous_event_hash,
        ),
    )


# ══════════════════════════════════════════════════════════════
# LOG PROTOCOL
# ══════════════════════════════════════════════════════════════

class AuditEventLog(Protocol):
    """What services write to and observers read from."""

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
        ...

    def events(self, after_sequence: int = 0) -> tuple[AuditEvent, ...]:
        ...

    def events_for_product(self, product_id: str) -> tuple[AuditEvent, ...]:
        ...

    def events_by_owner(self, identity: str) -> tuple[AuditEvent, ...]:
        ...

    def last_event(self) -> Optional[AuditEvent]:
        ...

    def count(self) -> int:
        ...

    def verify(self) -> ValidationResult:
        ...


# ══════════════════════════════════════════════════════════════
# IN-MEMORY LOG
# ══════════════════════════════════════════════════════════════

class InMemoryAuditEventLog:
    """
    Thread-safe in-memory audit log with per-product and
    per-party indexes.

    Appends are staged in the unit of work they were made in and become
    readable only when it commits. Sharing the product store's
    transaction manager makes the snapshot and its event publish at the
    same commit point, snapshot first.
    """

    def __init__(
        self,
        registry: EventTypeRegistry,
        transactions: InMemoryTransactionManager | None = None,
    ):
        self._registry = registry
        self._tx = transactions or InMemoryTransactionManager()
        self._events: list[AuditEvent] = []
        self._by_product: dict[str, list[AuditEvent]] = {}
        self._by_party: dict[str, list[AuditEvent]] = {}
        self._pending: Optional[list[AuditEvent]] = None
        self._lock = Lock()

    @property
    def registry(self) -> EventTypeRegistry:
        return self._registry

    def _stage(self) -> list[AuditEvent]:
        if self._tx.enlist(self, publish=self._publish, discard=self._discard):
            self._pending = []
        return self._pending

    def _publish(self) -> None:
        pending, self._pending = self._pending, None
        with self._lock:
            for event in pending:
                self._events.append(event)
                self._by_product.setdefault(event.product_id, []).append(event)
                for party in {event.from_party, event.to_party}:
                    if party is not None:
                        self._by_party.setdefault(party, []).append(event)

    def _discard(self) -> None:
        self._pending = None

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

        with self._tx.atomic():
            pending = self._stage()
            if pending:
                previous = pending[-1]
            else:
                with self._lock:
                    previous = self._events[-1] if self._events else None
            event = seal_event(
                sequence=(previous.sequence + 1) if previous else 1,
                previous_event_hash=(
                    previous.event_hash if previous else GENESIS_HASH
                ),
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
            pending.append(event)

        logger.debug(
            f"Appended #{event.sequence} {event_type} for {product_id}"
        )
        return event

    def events(self, after_sequence: int = 0) -> tuple[AuditEvent, ...]:
        with self._lock:
            # sequence n lives at index n - 1
            return tuple(self._events[max(after_sequence, 0):])

    def events_for_product(self, product_id: str) -> tuple[AuditEvent, ...]:
        with self._lock:
            return tuple(self._by_product.get(product_id, ()))

    def events_by_owner(self, identity: str) -> tuple[AuditEvent, ...]:
        with self._lock:
            return tuple(self._by_party.get(identity, ()))

    def last_event(self) -> Optional[AuditEvent]:
        with self._lock:
            return self._events[-1] if self._events else None

    def count(self) -> int:
        with self._lock:
            return len(self._events)

    def verify(self) -> ValidationResult:
        return verify_chain(self.events())
