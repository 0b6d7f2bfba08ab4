"""
Custody Event Store — Validators Public API
"""

from core.event_store.validators.errors import (
    Rejection,
    RejectionCode,
    ValidationResult,
    ViolatedRule,
)
from core.event_store.validators.registry import EventTypeRegistry

__all__ = [
    "EventTypeRegistry",
    "Rejection",
    "RejectionCode",
    "ValidationResult",
    "ViolatedRule",
]
