"""
Custody Event Store — Public API
===================================
Append-only audit log, hash chain and event type registry.

Django-backed persistence lives in core.event_store.persistence and
is imported separately, once Django is configured.
"""

from core.event_store.errors import (
    EventStoreError,
    SequenceConflictError,
    UnknownEventTypeError,
)
from core.event_store.hashing import GENESIS_HASH, verify_chain
from core.event_store.log import (
    AuditEvent,
    AuditEventLog,
    InMemoryAuditEventLog,
    seal_event,
)
from core.event_store.validators import EventTypeRegistry, ValidationResult

__all__ = [
    "AuditEvent",
    "AuditEventLog",
    "InMemoryAuditEventLog",
    "seal_event",
    "EventTypeRegistry",
    "ValidationResult",
    "GENESIS_HASH",
    "verify_chain",
    "EventStoreError",
    "UnknownEventTypeError",
    "SequenceConflictError",
]
