"""
Custody Command Layer — Command Dispatcher
=============================================
Accept Command → Evaluate guard policies → Produce Outcome.

The Dispatcher is the DECISION MAKER. It decides ACCEPTED or REJECTED.

The Dispatcher DOES NOT:
- Touch the product store
- Append to the audit log
- Notify observers

Policies are registered per command type as callables returning
Optional[RejectionReason]. They run in registration order and the
first rejection wins, so registration order IS the precondition order.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from core.commands.base import Command
from core.commands.outcomes import CommandOutcome
from core.commands.rejection import RejectionReason
from core.time.clock import Clock, get_default_clock

logger = logging.getLogger("custody.commands")


# A policy is a callable:
#   (Command, context) → Optional[RejectionReason]
#   Returns None if the guard passes, RejectionReason if it rejects.
PolicyEvaluator = Callable[[Command, Any], Optional[RejectionReason]]


class CommandDispatcher:
    """
    Evaluate a command through its guard policies.

    Usage:
        dispatcher = CommandDispatcher(context=custody_context)
        dispatcher.register_policy(REGISTER_REQUEST, authority_policy)
        dispatcher.register_policy(REGISTER_REQUEST, product_id_policy)

        outcome = dispatcher.dispatch(command)

    Commands with no registered policies are ACCEPTED.
    """

    def __init__(self, context: Any, clock: Clock | None = None):
        self._context = context
        self._clock = clock
        self._policies: Dict[str, List[PolicyEvaluator]] = {}

    def register_policy(self, command_type: str, policy: PolicyEvaluator) -> None:
        """Append a policy to the ordered guard chain of a command type."""
        if not callable(policy):
            raise TypeError(
                f"Policy must be callable, got {type(policy).__name__}."
            )
        self._policies.setdefault(command_type, []).append(policy)

        policy_name = getattr(policy, "__qualname__", str(policy))
        logger.debug(f"Policy registered: {command_type} → {policy_name}")

    def policies_for(self, command_type: str) -> tuple[PolicyEvaluator, ...]:
        return tuple(self._policies.get(command_type, ()))

    def dispatch(self, command: Command) -> CommandOutcome:
        """
        Evaluate command and produce its outcome.

        Never None, never ambiguous. Policies must not mutate state.
        """
        clock = self._clock or get_default_clock()
        now = clock.now_utc()

        for policy in self._policies.get(command.command_type, ()):
            rejection = policy(command, self._context)
            if rejection is None:
                continue

            if not isinstance(rejection, RejectionReason):
                raise TypeError(
                    f"Policy must return RejectionReason or None, "
                    f"got {type(rejection).__name__}."
                )

            return self._rejected(command, rejection, now)

        logger.info(f"Command {command.command_id} ACCEPTED")
        return CommandOutcome.accepted(command.command_id, now)

    def reject(
        self, command: Command, reason: RejectionReason
    ) -> CommandOutcome:
        """REJECTED outcome for a guard that failed after dispatch."""
        clock = self._clock or get_default_clock()
        return self._rejected(command, reason, clock.now_utc())

    def _rejected(self, command, reason, now) -> CommandOutcome:
        logger.info(
            f"Command {command.command_id} rejected by "
            f"policy '{reason.policy_name}': "
            f"[{reason.code}] {reason.message}"
        )
        return CommandOutcome.rejected(command.command_id, reason, now)
