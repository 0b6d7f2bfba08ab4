"""
Custody Command Layer — Command Base Contract
================================================
Every mutation of the custody registry begins as a Command.

A Command is a frozen, auditable declaration of intent.
It carries identity, correlation and payload — nothing else.

Rules:
- Immutable once created (frozen dataclass)
- No business logic inside
- No store interaction
- No event emission
- command_type must end with '.request'
- command_type follows engine.domain.action.request format

A Command is NOT an event. It is intent awaiting judgment.
Caller identity is carried as given; whether it is allowed to act
is decided by the guard policies, not here.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime


# ══════════════════════════════════════════════════════════════
# CANONICAL COMMAND
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Command:
    """
    Canonical custody Command — declaration of intent.

    Fields:
        command_id:     Unique identifier (UUID).
        command_type:   Namespaced type ending in '.request'
                        (e.g. 'custody.product.transfer.request').
        actor_id:       Identity of the caller (may be empty; guards decide).
        payload:        Intent data (dict).
        issued_at:      When the command was issued (timezone-aware).
        correlation_id: Groups related commands/events in a story.
        source_engine:  Engine that owns this command.

    Example:
        Command(
            command_id=uuid.uuid4(),
            command_type="custody.product.register.request",
            actor_id="manufacturer-1",
            payload={"product_id": "SN-001", "details_uri": "ipfs://x"},
            issued_at=datetime.now(timezone.utc),
            correlation_id=uuid.uuid4(),
            source_engine="custody",
        )
    """

    command_id: uuid.UUID
    command_type: str
    actor_id: str
    payload: dict
    issued_at: datetime
    correlation_id: uuid.UUID
    source_engine: str

    def __post_init__(self):
        # ── command_id must be UUID ───────────────────────────
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError(
                f"command_id must be UUID, got {type(self.command_id).__name__}"
            )

        # ── command_type must end with .request ───────────────
        if not self.command_type or not isinstance(self.command_type, str):
            raise ValueError("command_type must be a non-empty string.")

        if not self.command_type.endswith(".request"):
            raise ValueError(
                f"command_type '{self.command_type}' must end with "
                f"'.request' (e.g. 'custody.product.register.request')."
            )

        # ── command_type minimum 4 segments ───────────────────
        parts = self.command_type.split(".")
        if len(parts) < 4:
            raise ValueError(
                f"command_type '{self.command_type}' must follow "
                f"engine.domain.action.request format (minimum 4 segments)."
            )

        # ── source_engine must match first segment ────────────
        if parts[0] != self.source_engine:
            raise ValueError(
                f"command_type namespace '{parts[0]}' does not match "
                f"source_engine '{self.source_engine}'."
            )

        # ── actor_id must be a string ─────────────────────────
        if not isinstance(self.actor_id, str):
            raise TypeError(
                f"actor_id must be a string, got {type(self.actor_id).__name__}."
            )

        # ── payload must be dict ──────────────────────────────
        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")

        # ── issued_at must be timezone-aware ──────────────────
        if not isinstance(self.issued_at, datetime):
            raise ValueError("issued_at must be a datetime.")
        if self.issued_at.tzinfo is None:
            raise ValueError("issued_at must be timezone-aware.")

        # ── correlation_id must be UUID ───────────────────────
        if not isinstance(self.correlation_id, uuid.UUID):
            raise ValueError("correlation_id must be UUID.")


# ══════════════════════════════════════════════════════════════
# NAMING HELPERS
# ══════════════════════════════════════════════════════════════

def derive_source_engine(command_type: str) -> str:
    """
    Extract source engine from command type.

    custody.product.register.request → custody
    """
    return command_type.split(".")[0]
