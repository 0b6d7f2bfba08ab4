"""
Custody Engine — Event Types and Payloads
============================================
The two kinds of audit event and their persisted payload shape.

Payload keys appear in schema order:
    ProductRegistered: product_id, authority_id, timestamp, details_uri
    StatusUpdated:     product_id, old_owner, new_owner, new_status, timestamp

Timestamps are ISO-8601 strings in the payload so that it stays
JSON-native and hashes identically wherever it is stored.
The envelope (sequence, hashes) is owned by core.event_store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union

from core.event_store.log import AuditEvent


CUSTODY_PRODUCT_REGISTERED_V1 = "custody.product.registered.v1"
CUSTODY_PRODUCT_STATUS_UPDATED_V1 = "custody.product.status_updated.v1"

CUSTODY_EVENT_TYPES = (
    CUSTODY_PRODUCT_REGISTERED_V1,
    CUSTODY_PRODUCT_STATUS_UPDATED_V1,
)


def register_custody_event_types(event_type_registry) -> None:
    for event_type in sorted(CUSTODY_EVENT_TYPES):
        event_type_registry.register(event_type)


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    return datetime.fromisoformat(text)


# ══════════════════════════════════════════════════════════════
# TYPED EVENTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProductRegistered:
    product_id: str
    authority_id: str
    timestamp: datetime
    details_uri: str

    event_type = CUSTODY_PRODUCT_REGISTERED_V1

    def to_payload(self) -> dict:
        return {
            "product_id": self.product_id,
            "authority_id": self.authority_id,
            "timestamp": self.timestamp.isoformat(),
            "details_uri": self.details_uri,
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "ProductRegistered":
        return cls(
            product_id=str(payload["product_id"]),
            authority_id=str(payload["authority_id"]),
            timestamp=_parse_timestamp(payload["timestamp"]),
            details_uri=str(payload["details_uri"]),
        )


@dataclass(frozen=True)
class StatusUpdated:
    product_id: str
    old_owner: str
    new_owner: str
    new_status: str
    timestamp: datetime

    event_type = CUSTODY_PRODUCT_STATUS_UPDATED_V1

    def to_payload(self) -> dict:
        return {
            "product_id": self.product_id,
            "old_owner": self.old_owner,
            "new_owner": self.new_owner,
            "new_status": self.new_status,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "StatusUpdated":
        return cls(
            product_id=str(payload["product_id"]),
            old_owner=str(payload["old_owner"]),
            new_owner=str(payload["new_owner"]),
            new_status=str(payload["new_status"]),
            timestamp=_parse_timestamp(payload["timestamp"]),
        )


CustodyEvent = Union[ProductRegistered, StatusUpdated]

_DECODERS = {
    CUSTODY_PRODUCT_REGISTERED_V1: ProductRegistered.from_payload,
    CUSTODY_PRODUCT_STATUS_UPDATED_V1: StatusUpdated.from_payload,
}


def decode_event(event: AuditEvent) -> CustodyEvent:
    """Typed view of a sealed custody event."""
    decoder = _DECODERS.get(event.event_type)
    if decoder is None:
        raise ValueError(f"Not a custody event type: {event.event_type}")
    return decoder(event.payload)
