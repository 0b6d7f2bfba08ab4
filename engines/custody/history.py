"""
Custody Engine — History Replay
==================================
The store only keeps the latest snapshot. Full custody history is
reconstructed here from the audit log, the way an external indexer
would do it:

    ProductRegistered        → step 0: (authority, initial status)
    StatusUpdated (ordered)  → step n: (new_owner, new_status)

Each StatusUpdated must name the holder of the previous step as its
old_owner; a chain that does not link up is reported, never repaired.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from core.event_store.log import AuditEvent
from engines.custody.config import INITIAL_STATUS
from engines.custody.errors import HistoryReplayError
from engines.custody.events import (
    ProductRegistered,
    decode_event,
)
from engines.custody.store import Product


@dataclass(frozen=True)
class CustodyStep:
    """One link of a product's chain of custody."""

    owner: str
    status: str
    timestamp: datetime
    sequence: int


def reconstruct_custody_chain(
    events: Iterable[AuditEvent],
    product_id: str,
) -> tuple[CustodyStep, ...]:
    """
    Replay the events of one product into its ordered custody steps.

    Events of other products are ignored. An empty result means the
    product was never registered.
    """
    steps: list[CustodyStep] = []
    last_sequence = 0

    relevant = [e for e in events if e.product_id == product_id]
    for event in sorted(relevant, key=lambda e: e.sequence):
        if event.sequence <= last_sequence:
            raise HistoryReplayError(
                product_id, event.sequence, "duplicate sequence"
            )
        last_sequence = event.sequence

        body = decode_event(event)

        if isinstance(body, ProductRegistered):
            if steps:
                raise HistoryReplayError(
                    product_id, event.sequence, "registered twice"
                )
            steps.append(CustodyStep(
                owner=body.authority_id,
                status=INITIAL_STATUS,
                timestamp=body.timestamp,
                sequence=event.sequence,
            ))
            continue

        if not steps:
            raise HistoryReplayError(
                product_id, event.sequence,
                "status update before registration",
            )
        if body.old_owner != steps[-1].owner:
            raise HistoryReplayError(
                product_id, event.sequence,
                f"old_owner '{body.old_owner}' does not match holder "
                f"'{steps[-1].owner}'",
            )
        steps.append(CustodyStep(
            owner=body.new_owner,
            status=body.new_status,
            timestamp=body.timestamp,
            sequence=event.sequence,
        ))

    return tuple(steps)


def replay_snapshot(
    events: Iterable[AuditEvent],
    product_id: str,
) -> Optional[Product]:
    """Rebuild the latest snapshot of a product from the log alone."""
    events = tuple(events)
    registered: Optional[ProductRegistered] = None
    steps = reconstruct_custody_chain(events, product_id)
    if not steps:
        return None

    for event in events:
        if event.product_id == product_id and event.sequence == steps[0].sequence:
            registered = decode_event(event)
            break

    last = steps[-1]
    return Product(
        product_id=product_id,
        current_owner=last.owner,
        registration_timestamp=steps[0].timestamp,
        is_genuine=True,
        status=last.status,
        details_uri=registered.details_uri,
    )
