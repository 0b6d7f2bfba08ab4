"""
Custody Engine — Request Commands
====================================
Typed custody requests that convert into canonical Command objects.

Requests carry caller input as given. Ids, statuses and owners of the
wrong type, emptiness, uniqueness and authority are all judged by the
guard policies, so every failure comes back as a specific, ordered
rejection rather than an exception. Only details_uri, which no guard
inspects, is type-checked here.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.commands.base import Command


CUSTODY_ENGINE = "custody"

CUSTODY_PRODUCT_REGISTER_REQUEST = "custody.product.register.request"
CUSTODY_PRODUCT_TRANSFER_REQUEST = "custody.product.transfer.request"


def _require_str(name: str, value) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string, got {type(value).__name__}.")


@dataclass(frozen=True)
class ProductRegisterRequest:
    """Request to register a new product under the authority's custody."""
    product_id: str
    details_uri: str

    def __post_init__(self):
        _require_str("details_uri", self.details_uri)

    def to_command(
        self,
        *,
        actor_id: str,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return Command(
            command_id=command_id,
            command_type=CUSTODY_PRODUCT_REGISTER_REQUEST,
            actor_id=actor_id,
            payload={
                "product_id": self.product_id,
                "details_uri": self.details_uri,
            },
            issued_at=issued_at,
            correlation_id=correlation_id,
            source_engine=CUSTODY_ENGINE,
        )


@dataclass(frozen=True)
class ProductTransferRequest:
    """
    Request to hand custody of a product to a new owner with a new status.

    new_owner_id may be None or any other null identity; the guard
    turns that into INVALID_OWNER.
    """
    product_id: str
    new_status: str
    new_owner_id: Optional[str]

    def to_command(
        self,
        *,
        actor_id: str,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return Command(
            command_id=command_id,
            command_type=CUSTODY_PRODUCT_TRANSFER_REQUEST,
            actor_id=actor_id,
            payload={
                "product_id": self.product_id,
                "new_status": self.new_status,
                "new_owner_id": self.new_owner_id,
            },
            issued_at=issued_at,
            correlation_id=correlation_id,
            source_engine=CUSTODY_ENGINE,
        )
