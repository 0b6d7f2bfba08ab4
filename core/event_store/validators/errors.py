"""
Custody Event Store — Validation Errors & Results
====================================================
Every integrity finding is deterministic, explicit and auditable.
"""

from dataclasses import dataclass
from typing import Optional


class RejectionCode:
    """Integrity rejection codes for the audit log."""

    # ── Ordering ──────────────────────────────────────────────
    SEQUENCE_GAP = "SEQUENCE_GAP"

    # ── Event Type Registry ───────────────────────────────────
    EVENT_TYPE_UNKNOWN = "EVENT_TYPE_UNKNOWN"


class ViolatedRule:
    """Rule identifiers used in the audit trail: which law was broken?"""

    STRICT_ORDERING = "STRICT_ORDERING"
    EVENT_TYPE_REGISTRY = "EVENT_TYPE_REGISTRY"


@dataclass(frozen=True)
class Rejection:
    """One explicit reason for rejecting a log or an event."""

    code: str
    message: str
    violated_rule: str


@dataclass(frozen=True)
class ValidationResult:
    """
    accepted=True  → the log (or event) is sound
    accepted=False → rejected with explicit reason

    checked: number of events examined before the verdict.
    """

    accepted: bool
    rejection: Optional[Rejection] = None
    checked: int = 0
