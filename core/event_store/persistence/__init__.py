"""
Custody Event Store — Django persistence public API.
Import only after Django is configured.
"""

from core.event_store.persistence.repository import DjangoAuditEventLog

__all__ = ["DjangoAuditEventLog"]
