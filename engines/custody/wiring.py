"""
Custody Engine — Registry Wiring
===================================
Assembles the registry from its parts and exposes one facade:

    EventTypeRegistry ─┐
    ProductStore ──────┼─ AccessControlGuard ─ CommandDispatcher (policies)
    AuditEventLog ─────┘                             │
                                                CommandBus
                                                     │
          RegistrationService / CustodyTransferService / VerificationService
                                                     │
                                              CustodyRegistry

Two backends:
    build_in_memory_registry()  — process-local, for tests and tooling
    build_django_registry()     — custody_product + custody_audit_event tables
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from core.commands.bus import CommandBus, CommandResult
from core.commands.dispatcher import CommandDispatcher
from core.event_store.log import AuditEvent, AuditEventLog, InMemoryAuditEventLog
from core.event_store.validators.errors import ValidationResult
from core.event_store.validators.registry import EventTypeRegistry
from core.events.registry import SubscriberRegistry
from core.time.clock import Clock
from core.transactions import InMemoryTransactionManager
from engines.custody.config import RegistryConfig, load_registry_config
from engines.custody.events import register_custody_event_types
from engines.custody.history import CustodyStep, reconstruct_custody_chain
from engines.custody.policies import (
    AccessControlGuard,
    CustodyContext,
    register_custody_policies,
)
from engines.custody.services import (
    CustodyTransferService,
    RegistrationService,
    VerificationResult,
    VerificationService,
)
from engines.custody.store import InMemoryProductStore, ProductStore

logger = logging.getLogger("custody.engine")


class CustodyRegistry:
    """
    Facade over one assembled registry.

    Mutations return a CommandResult; reads return values or raise.
    """

    def __init__(
        self,
        *,
        config: RegistryConfig,
        store: ProductStore,
        event_log: AuditEventLog,
        clock: Clock | None = None,
    ):
        self._config = config
        self._store = store
        self._event_log = event_log
        self._subscribers = SubscriberRegistry()

        self._guard = AccessControlGuard(config.authority_id, store)
        dispatcher = CommandDispatcher(
            context=CustodyContext(guard=self._guard, store=store),
            clock=clock,
        )
        register_custody_policies(dispatcher)
        self._command_bus = CommandBus(dispatcher=dispatcher, atomic=store.atomic)

        writer_kwargs = dict(
            command_bus=self._command_bus,
            store=store,
            event_log=event_log,
            clock=clock,
            subscriber_registry=self._subscribers,
        )
        self._registration = RegistrationService(config=config, **writer_kwargs)
        self._transfers = CustodyTransferService(**writer_kwargs)
        self._verification = VerificationService(store=store)

    # ── Properties ────────────────────────────────────────────

    @property
    def authority_id(self) -> str:
        return self._config.authority_id

    @property
    def guard(self) -> AccessControlGuard:
        return self._guard

    @property
    def store(self) -> ProductStore:
        return self._store

    @property
    def event_log(self) -> AuditEventLog:
        return self._event_log

    @property
    def command_bus(self) -> CommandBus:
        return self._command_bus

    # ── Mutations ─────────────────────────────────────────────

    def register(
        self, caller_id: str, product_id: str, details_uri: str
    ) -> CommandResult:
        return self._registration.register(caller_id, product_id, details_uri)

    def transfer(
        self,
        caller_id: str,
        product_id: str,
        new_status: str,
        new_owner_id: Optional[str],
    ) -> CommandResult:
        return self._transfers.transfer(
            caller_id, product_id, new_status, new_owner_id
        )

    # ── Reads ─────────────────────────────────────────────────

    def verify(self, product_id: str) -> VerificationResult:
        return self._verification.verify(product_id)

    def exists(self, product_id: str) -> bool:
        return self._verification.exists(product_id)

    def history(self, product_id: str) -> tuple[CustodyStep, ...]:
        return reconstruct_custody_chain(
            self._event_log.events_for_product(product_id), product_id
        )

    def events(self, after_sequence: int = 0) -> tuple[AuditEvent, ...]:
        return self._event_log.events(after_sequence)

    def events_for_product(self, product_id: str) -> tuple[AuditEvent, ...]:
        return self._event_log.events_for_product(product_id)

    def events_by_owner(self, identity: str) -> tuple[AuditEvent, ...]:
        return self._event_log.events_by_owner(identity)

    def verify_log_integrity(self) -> ValidationResult:
        return self._event_log.verify()

    # ── Observers ─────────────────────────────────────────────

    def subscribe(
        self,
        event_type: str,
        handler: Callable[[AuditEvent], None],
        subscriber_name: str,
    ) -> None:
        """Receive committed events of a type (or "*" for all)."""
        self._subscribers.register_subscriber(
            event_type, handler, subscriber_name=subscriber_name
        )


# ══════════════════════════════════════════════════════════════
# BUILDERS
# ══════════════════════════════════════════════════════════════

def _custody_event_registry() -> EventTypeRegistry:
    registry = EventTypeRegistry()
    register_custody_event_types(registry)
    return registry


def build_in_memory_registry(
    config: RegistryConfig,
    clock: Clock | None = None,
) -> CustodyRegistry:
    transactions = InMemoryTransactionManager()
    registry = CustodyRegistry(
        config=config,
        store=InMemoryProductStore(transactions),
        event_log=InMemoryAuditEventLog(_custody_event_registry(), transactions),
        clock=clock,
    )
    logger.info(f"In-memory custody registry ready (authority {config.authority_id})")
    return registry


def build_django_registry(
    config: RegistryConfig | None = None,
    clock: Clock | None = None,
) -> CustodyRegistry:
    """
    Registry persisted through the Django ORM.

    Requires django.setup() with core.event_store and engines.custody
    installed. Observers run on transaction.on_commit.
    """
    from core.event_store.persistence import DjangoAuditEventLog
    from engines.custody.persistence import DjangoProductStore

    config = config or load_registry_config()
    registry = CustodyRegistry(
        config=config,
        store=DjangoProductStore(),
        event_log=DjangoAuditEventLog(_custody_event_registry()),
        clock=clock,
    )
    logger.info(f"Django custody registry ready (authority {config.authority_id})")
    return registry
