"""
Custody Command Layer
========================
Every mutation begins as a Command.
Every Command produces exactly one Outcome.
A REJECTED command writes nothing.
"""

from core.commands.base import Command, derive_source_engine
from core.commands.outcomes import CommandOutcome, CommandStatus
from core.commands.rejection import (
    ALL_REASON_CODES,
    CommandRejected,
    ReasonCode,
    RejectionReason,
)
from core.commands.dispatcher import CommandDispatcher, PolicyEvaluator
from core.commands.bus import (
    CommandBus,
    CommandBusError,
    CommandResult,
    NoHandlerRegistered,
)

__all__ = [
    # ── Base ──────────────────────────────────────────────────
    "Command",
    "derive_source_engine",
    # ── Outcomes ──────────────────────────────────────────────
    "CommandOutcome",
    "CommandStatus",
    # ── Rejection ─────────────────────────────────────────────
    "RejectionReason",
    "ReasonCode",
    "ALL_REASON_CODES",
    "CommandRejected",
    # ── Dispatcher ────────────────────────────────────────────
    "CommandDispatcher",
    "PolicyEvaluator",
    # ── Bus ────────────────────────────────────────────────────
    "CommandBus",
    "CommandBusError",
    "CommandResult",
    "NoHandlerRegistered",
]
