"""
Custody Command Layer — Command Bus
======================================
High-level orchestration of the command lifecycle.

Flow:
    1. Acquire the global command lock
    2. Open the unit of work (atomic)
    3. Dispatch command → Outcome (guards evaluated against current state)
    4. ACCEPTED → engine handler mutates store + appends to the log
    5. REJECTED → return the reason; nothing is written
    6. Commit, release the lock

The lock spans both the guard evaluation and the mutation, so the
state a guard judged is exactly the state the handler mutates.
Every mutating call is one serialized step; no two interleave.

The lock only orders callers of one process. Against writers in other
processes the handler re-checks its guard on the locked row and raises
CommandRejected, which the bus reports as REJECTED.

The CommandBus does NOT:
- Decide (the dispatcher decides)
- Write to the store or the log itself
- Contain engine-specific logic
"""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import Any, Callable, ContextManager, Dict, Optional, Protocol

from core.commands.base import Command
from core.commands.dispatcher import CommandDispatcher
from core.commands.outcomes import CommandOutcome
from core.commands.rejection import CommandRejected, RejectionReason

logger = logging.getLogger("custody.commands")


class EngineServiceProtocol(Protocol):
    """
    Handler for accepted commands.

    The handler owns the atomic store-update + log-append unit.
    """

    def execute(self, command: Command) -> Any:
        ...


# ══════════════════════════════════════════════════════════════
# COMMAND BUS ERRORS
# ══════════════════════════════════════════════════════════════

class CommandBusError(Exception):
    """Base error for command bus operations."""
    pass


class NoHandlerRegistered(CommandBusError):
    """No engine handler registered for command type."""

    def __init__(self, command_type: str):
        self.command_type = command_type
        super().__init__(
            f"No engine service handler registered for "
            f"command type '{command_type}'."
        )


# ══════════════════════════════════════════════════════════════
# COMMAND BUS RESULT
# ══════════════════════════════════════════════════════════════

class CommandResult:
    """Result of CommandBus.handle() — outcome + execution result."""

    def __init__(
        self,
        outcome: CommandOutcome,
        execution_result: Any = None,
    ):
        self.outcome = outcome
        self.execution_result = execution_result

    @property
    def is_accepted(self) -> bool:
        return self.outcome.is_accepted

    @property
    def is_rejected(self) -> bool:
        return self.outcome.is_rejected

    @property
    def reason(self) -> Optional[RejectionReason]:
        return self.outcome.reason

    @property
    def reason_code(self) -> Optional[str]:
        if self.outcome.reason is None:
            return None
        return self.outcome.reason.code

    def __repr__(self) -> str:
        if self.is_accepted:
            return f"CommandResult(ACCEPTED, {self.execution_result!r})"
        return f"CommandResult(REJECTED, {self.reason_code})"


# ══════════════════════════════════════════════════════════════
# COMMAND BUS
# ══════════════════════════════════════════════════════════════

class CommandBus:
    """
    Serialized orchestration layer for mutating commands.

    Usage:
        bus = CommandBus(dispatcher=dispatcher, atomic=store.atomic)
        bus.register_handler("custody.product.register.request", handler)
        result = bus.handle(command)

    atomic is a factory for the unit of work that guard evaluation and
    execution share. Without one the bus only serializes.
    """

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        atomic: Callable[[], ContextManager[Any]] | None = None,
    ):
        self._dispatcher = dispatcher
        self._atomic = atomic or contextlib.nullcontext
        self._handlers: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def register_handler(self, command_type: str, handler: Any) -> None:
        """Register the handler for a command type (must have .execute())."""
        if not command_type.endswith(".request"):
            raise ValueError(
                f"command_type '{command_type}' must end with '.request'."
            )

        if not hasattr(handler, "execute") or not callable(handler.execute):
            raise TypeError("Handler must have callable .execute() method.")

        self._handlers[command_type] = handler
        logger.info(f"Handler registered: {command_type}")

    def has_handler(self, command_type: str) -> bool:
        return command_type in self._handlers

    def get_handler(self, command_type: str) -> Any:
        handler = self._handlers.get(command_type)
        if handler is None:
            raise NoHandlerRegistered(command_type)
        return handler

    def serialized(self) -> ContextManager[Any]:
        """
        The global command lock. Callers that stamp a command (issued_at)
        hold it across stamping and handle() so time follows sequence.
        """
        return self._lock

    def handle(self, command: Command) -> CommandResult:
        """
        Full command lifecycle as one serialized step.

        Raises NoHandlerRegistered before any guard runs if the
        command type is not routable.
        """
        handler = self.get_handler(command.command_type)

        with self._lock, self._atomic():
            outcome = self._dispatcher.dispatch(command)
            if outcome.is_rejected:
                return CommandResult(outcome=outcome)

            logger.info(
                f"Executing accepted command {command.command_id} "
                f"({command.command_type})"
            )
            try:
                execution_result = handler.execute(command)
            except CommandRejected as rejected:
                outcome = self._dispatcher.reject(command, rejected.reason)
                return CommandResult(outcome=outcome)

        return CommandResult(outcome=outcome, execution_result=execution_result)
