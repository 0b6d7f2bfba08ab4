"""
Custody Event Store — Hash-Chain Verifier
============================================
Verifies a full audit log, in commit order, from its first event.

For each event:
1. sequence is exactly one more than its predecessor (first is 1)
2. previous_event_hash equals the predecessor's event_hash
   (GENESIS_HASH for the first event)
3. event_hash equals the recomputed hash

The first failing check decides. Nothing is corrected, reordered
or skipped. The verifier prefers failure over silent corruption.
"""

from typing import Iterable

from core.event_store.hashing.errors import HashRejectionCode, HashViolatedRule
from core.event_store.hashing.hasher import GENESIS_HASH, compute_audit_event_hash
from core.event_store.validators.errors import (
    Rejection,
    RejectionCode,
    ValidationResult,
    ViolatedRule,
)


def verify_chain(events: Iterable) -> ValidationResult:
    """
    Verify hash-chain integrity of an ordered event sequence.

    Args:
        events: Audit events in commit order (objects exposing
                sequence, event_type, payload, previous_event_hash,
                event_hash).

    Returns:
        ValidationResult — accepted=True, or the first violation.
    """
    expected_previous = GENESIS_HASH
    expected_sequence = 1
    checked = 0

    for event in events:
        if event.sequence != expected_sequence:
            return ValidationResult(
                accepted=False,
                rejection=Rejection(
                    code=RejectionCode.SEQUENCE_GAP,
                    message=(
                        f"Expected sequence {expected_sequence}, "
                        f"found {event.sequence}."
                    ),
                    violated_rule=ViolatedRule.STRICT_ORDERING,
                ),
                checked=checked,
            )

        if event.previous_event_hash != expected_previous:
            return ValidationResult(
                accepted=False,
                rejection=Rejection(
                    code=HashRejectionCode.HASH_CHAIN_BROKEN,
                    message=(
                        f"Event {event.sequence} links to "
                        f"'{event.previous_event_hash}', "
                        f"expected '{expected_previous}'."
                    ),
                    violated_rule=HashViolatedRule.EVENT_HASH_CHAIN,
                ),
                checked=checked,
            )

        recomputed = compute_audit_event_hash(
            event_type=event.event_type,
            sequence=event.sequence,
            payload=event.payload,
            previous_event_hash=event.previous_event_hash,
        )
        if event.event_hash != recomputed:
            return ValidationResult(
                accepted=False,
                rejection=Rejection(
                    code=HashRejectionCode.HASH_COMPUTATION_MISMATCH,
                    message=(
                        f"Event {event.sequence} hash does not match its "
                        f"content. Stored: '{event.event_hash}', "
                        f"computed: '{recomputed}'."
                    ),
                    violated_rule=HashViolatedRule.EVENT_HASH_CHAIN,
                ),
                checked=checked,
            )

        checked += 1
        expected_previous = event.event_hash
        expected_sequence += 1

    return ValidationResult(accepted=True, checked=checked)
