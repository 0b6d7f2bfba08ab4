"""
Custody Engine — Application Services
========================================
RegistrationService and CustodyTransferService turn requests into
commands and hand them to the command bus. The bus runs the guard
policies and, only on ACCEPTED, calls back into the service, which
writes the new snapshot and appends the audit event as one unit:

    re-check on the locked row            # inside the bus's unit
    with store.atomic():
        store.insert / store.update
        event_log.append
    store.on_commit(notify observers)

If anything inside the unit raises, neither the snapshot nor the
event survives. A re-check that fails raises CommandRejected before
anything is written. VerificationService is a plain read; it takes
no lock and consults no guard.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from core.commands.base import Command
from core.commands.bus import CommandResult
from core.commands.rejection import CommandRejected, ReasonCode, RejectionReason
from core.event_store.log import AuditEvent, AuditEventLog
from core.events.dispatcher import dispatch
from core.events.registry import SubscriberRegistry
from core.time.clock import Clock, get_default_clock
from engines.custody.commands import (
    CUSTODY_PRODUCT_REGISTER_REQUEST,
    CUSTODY_PRODUCT_TRANSFER_REQUEST,
    ProductRegisterRequest,
    ProductTransferRequest,
)
from engines.custody.config import INITIAL_STATUS, RegistryConfig
from engines.custody.errors import DuplicateProductError, ProductNotFoundError
from engines.custody.events import ProductRegistered, StatusUpdated
from engines.custody.policies import recheck_current_owner
from engines.custody.store import Product, ProductStore

logger = logging.getLogger("custody.engine")


def _actor(caller_id) -> str:
    # Guards decide on the empty identity; Command only takes strings.
    return caller_id if isinstance(caller_id, str) else ""


# ══════════════════════════════════════════════════════════════
# EXECUTION RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CustodyExecutionResult:
    """What an accepted register/transfer committed."""

    product: Product
    event: AuditEvent


class _CustodyCommandHandler:
    def __init__(self, execute: Callable[[Command], CustodyExecutionResult]):
        self._execute = execute

    def execute(self, command: Command) -> CustodyExecutionResult:
        return self._execute(command)


class _CustodyWriter:
    """Shared wiring of the two mutating services."""

    def __init__(
        self,
        *,
        command_bus,
        store: ProductStore,
        event_log: AuditEventLog,
        clock: Clock | None = None,
        subscriber_registry: SubscriberRegistry | None = None,
    ):
        self._command_bus = command_bus
        self._store = store
        self._event_log = event_log
        self._clock = clock
        self._subscriber_registry = subscriber_registry

    def _now(self) -> datetime:
        return (self._clock or get_default_clock()).now_utc()

    def _submit(self, build: Callable[[datetime], Command]) -> CommandResult:
        # issued_at is taken inside the serialized step so that event
        # timestamps never go backwards along the sequence.
        with self._command_bus.serialized():
            return self._command_bus.handle(build(self._now()))

    def _publish(self, event: AuditEvent) -> None:
        registry = self._subscriber_registry
        if registry is None:
            return
        self._store.on_commit(lambda: dispatch(event, registry))


# ══════════════════════════════════════════════════════════════
# REGISTRATION
# ══════════════════════════════════════════════════════════════

class RegistrationService(_CustodyWriter):
    """
    Creates product records. Only the configured authority may call it,
    and the authority becomes the first custodian of every product.
    """

    def __init__(self, *, config: RegistryConfig, **kwargs):
        super().__init__(**kwargs)
        self._config = config
        self._command_bus.register_handler(
            CUSTODY_PRODUCT_REGISTER_REQUEST,
            _CustodyCommandHandler(self._execute_register),
        )

    def register(
        self,
        caller_id: str,
        product_id: str,
        details_uri: str,
        *,
        correlation_id: Optional[uuid.UUID] = None,
    ) -> CommandResult:
        request = ProductRegisterRequest(
            product_id=product_id,
            details_uri=details_uri,
        )
        return self._submit(lambda now: request.to_command(
            actor_id=_actor(caller_id),
            command_id=uuid.uuid4(),
            correlation_id=correlation_id or uuid.uuid4(),
            issued_at=now,
        ))

    def _execute_register(self, command: Command) -> CustodyExecutionResult:
        product_id = command.payload["product_id"]
        authority_id = self._config.authority_id

        product = Product(
            product_id=product_id,
            current_owner=authority_id,
            registration_timestamp=command.issued_at,
            is_genuine=True,
            status=INITIAL_STATUS,
            details_uri=command.payload["details_uri"],
        )
        registered = ProductRegistered(
            product_id=product_id,
            authority_id=authority_id,
            timestamp=command.issued_at,
            details_uri=product.details_uri,
        )

        duplicate = RejectionReason(
            code=ReasonCode.DUPLICATE_ID,
            message=f"Product '{product_id}' is already registered.",
            policy_name="unique_product_policy",
        )
        if self._store.exists(product_id):
            raise CommandRejected(duplicate)

        with self._store.atomic():
            try:
                self._store.insert(product_id, product)
            except DuplicateProductError as exc:
                # another process won the race on the primary key
                raise CommandRejected(duplicate) from exc
            event = self._event_log.append(
                event_type=registered.event_type,
                product_id=product_id,
                actor_id=command.actor_id,
                command_id=command.command_id,
                correlation_id=command.correlation_id,
                payload=registered.to_payload(),
                created_at=command.issued_at,
                from_party=None,
                to_party=authority_id,
            )
            self._publish(event)

        logger.info(
            f"Product {product_id} registered by {authority_id} "
            f"(event #{event.sequence})"
        )
        return CustodyExecutionResult(product=product, event=event)


# ══════════════════════════════════════════════════════════════
# CUSTODY TRANSFER
# ══════════════════════════════════════════════════════════════

class CustodyTransferService(_CustodyWriter):
    """
    Hands custody of a product to a new owner with a new status.
    Only the current holder may do so; afterwards only the new
    holder can author the next transfer.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._command_bus.register_handler(
            CUSTODY_PRODUCT_TRANSFER_REQUEST,
            _CustodyCommandHandler(self._execute_transfer),
        )

    def transfer(
        self,
        caller_id: str,
        product_id: str,
        new_status: str,
        new_owner_id: Optional[str],
        *,
        correlation_id: Optional[uuid.UUID] = None,
    ) -> CommandResult:
        request = ProductTransferRequest(
            product_id=product_id,
            new_status=new_status,
            new_owner_id=new_owner_id,
        )
        return self._submit(lambda now: request.to_command(
            actor_id=_actor(caller_id),
            command_id=uuid.uuid4(),
            correlation_id=correlation_id or uuid.uuid4(),
            issued_at=now,
        ))

    def _execute_transfer(self, command: Command) -> CustodyExecutionResult:
        product_id = command.payload["product_id"]
        new_status = command.payload["new_status"]
        new_owner = command.payload["new_owner_id"]

        # The row lock lives as long as the bus's unit of work.
        current = self._store.get(product_id, for_update=True)
        rejection = recheck_current_owner(command, current)
        if rejection is not None:
            raise CommandRejected(rejection)

        with self._store.atomic():
            updated = self._store.update(product_id, new_status, new_owner)
            status_updated = StatusUpdated(
                product_id=product_id,
                old_owner=current.current_owner,
                new_owner=new_owner,
                new_status=new_status,
                timestamp=command.issued_at,
            )
            event = self._event_log.append(
                event_type=status_updated.event_type,
                product_id=product_id,
                actor_id=command.actor_id,
                command_id=command.command_id,
                correlation_id=command.correlation_id,
                payload=status_updated.to_payload(),
                created_at=command.issued_at,
                from_party=current.current_owner,
                to_party=new_owner,
            )
            self._publish(event)

        logger.info(
            f"Product {product_id} custody {current.current_owner} → "
            f"{new_owner} ({new_status!r}, event #{event.sequence})"
        )
        return CustodyExecutionResult(product=updated, event=event)


# ══════════════════════════════════════════════════════════════
# VERIFICATION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VerificationResult:
    """Latest snapshot as seen by any party. No history."""

    is_genuine: bool
    status: str
    current_owner: str
    details_uri: str
    registration_timestamp: datetime

    def as_tuple(self) -> tuple:
        return (
            self.is_genuine,
            self.status,
            self.current_owner,
            self.details_uri,
            self.registration_timestamp,
        )


class VerificationService:
    """Public, side-effect-free lookup of the current snapshot."""

    def __init__(self, *, store: ProductStore):
        self._store = store

    def exists(self, product_id: str) -> bool:
        return bool(product_id) and self._store.exists(product_id)

    def verify(self, product_id: str) -> VerificationResult:
        product = self._store.get(product_id) if product_id else None
        if product is None:
            raise ProductNotFoundError(product_id)
        return VerificationResult(
            is_genuine=product.is_genuine,
            status=product.status,
            current_owner=product.current_owner,
            details_uri=product.details_uri,
            registration_timestamp=product.registration_timestamp,
        )
