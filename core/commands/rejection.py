"""
Custody Command Layer — Rejection Model
==========================================
Structured reasons for denied commands.

A rejection is NOT an event. Rejected commands leave the store
and the audit log untouched; the reason is returned to the caller.

Every rejection is:
- Deterministic (same state + same input → same rejection)
- Machine-readable (code)
- Human-readable (message)
- Attributable (policy_name)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for command rejection.

    Fields:
        code:        Machine-readable code (see ReasonCode).
        message:     Human-readable explanation.
        policy_name: Name of the guard that rejected the command.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Every way a custody command can be refused.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Access control ────────────────────────────────────────
    UNAUTHORIZED = "UNAUTHORIZED"

    # ── Identity / uniqueness ─────────────────────────────────
    EMPTY_ID = "EMPTY_ID"
    DUPLICATE_ID = "DUPLICATE_ID"
    NOT_FOUND = "NOT_FOUND"

    # ── Transfer inputs ───────────────────────────────────────
    INVALID_OWNER = "INVALID_OWNER"
    EMPTY_STATUS = "EMPTY_STATUS"


ALL_REASON_CODES = frozenset({
    ReasonCode.UNAUTHORIZED,
    ReasonCode.EMPTY_ID,
    ReasonCode.DUPLICATE_ID,
    ReasonCode.NOT_FOUND,
    ReasonCode.INVALID_OWNER,
    ReasonCode.EMPTY_STATUS,
})


# ══════════════════════════════════════════════════════════════
# LATE REJECTION
# ══════════════════════════════════════════════════════════════

class CommandRejected(Exception):
    """
    Raised by a handler that re-checks a guard under its write lock
    and finds it no longer holds. It must be raised before the handler
    writes anything; the command bus turns it into a REJECTED outcome.
    """

    def __init__(self, reason: RejectionReason):
        self.reason = reason
        super().__init__(f"[{reason.code}] {reason.message}")
