"""
Custody Engine — Access Control Guard and Policies
=====================================================
Every precondition of register and transfer is a policy:
    (command, context) → Optional[RejectionReason]

Policies are pure reads. They never raise for a business failure;
they return the reason, and the dispatcher stops at the first one.
The order below is the precondition order callers can rely on.

register:  UNAUTHORIZED → EMPTY_ID → DUPLICATE_ID
transfer:  NOT_FOUND → UNAUTHORIZED → INVALID_OWNER → EMPTY_STATUS
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason
from core.identity.identities import is_null_identity, same_identity
from engines.custody.commands import (
    CUSTODY_PRODUCT_REGISTER_REQUEST,
    CUSTODY_PRODUCT_TRANSFER_REQUEST,
)
from engines.custody.store import Product, ProductStore


# ══════════════════════════════════════════════════════════════
# ACCESS CONTROL GUARD
# ══════════════════════════════════════════════════════════════

class AccessControlGuard:
    """
    Capability checks against the two roles:
    the registering authority and the current holder of a product.
    """

    def __init__(self, authority_id: str, store: ProductStore):
        self._authority_id = authority_id
        self._store = store

    @property
    def authority_id(self) -> str:
        return self._authority_id

    def is_authority(self, caller_id: str) -> bool:
        return same_identity(caller_id, self._authority_id)

    def is_current_owner(self, product_id: str, caller_id: str) -> bool:
        product = self._store.get(product_id)
        if product is None:
            return False
        return same_identity(caller_id, product.current_owner)


@dataclass(frozen=True)
class CustodyContext:
    """What the policies may consult: the guard and the store."""

    guard: AccessControlGuard
    store: ProductStore


# ══════════════════════════════════════════════════════════════
# REGISTER POLICIES
# ══════════════════════════════════════════════════════════════

def authority_policy(
    command: Command, context: CustodyContext
) -> Optional[RejectionReason]:
    """Only the configured authority may register products."""
    if context.guard.is_authority(command.actor_id):
        return None
    return RejectionReason(
        code=ReasonCode.UNAUTHORIZED,
        message=(
            f"Caller '{command.actor_id}' is not the registering authority."
        ),
        policy_name="authority_policy",
    )


def product_id_policy(
    command: Command, context: CustodyContext
) -> Optional[RejectionReason]:
    product_id = command.payload.get("product_id")
    if isinstance(product_id, str) and product_id:
        return None
    return RejectionReason(
        code=ReasonCode.EMPTY_ID,
        message="Product id must be a non-empty string.",
        policy_name="product_id_policy",
    )


def unique_product_policy(
    command: Command, context: CustodyContext
) -> Optional[RejectionReason]:
    product_id = command.payload["product_id"]
    if not context.store.exists(product_id):
        return None
    return RejectionReason(
        code=ReasonCode.DUPLICATE_ID,
        message=f"Product '{product_id}' is already registered.",
        policy_name="unique_product_policy",
    )


# ══════════════════════════════════════════════════════════════
# TRANSFER POLICIES
# ══════════════════════════════════════════════════════════════

def product_exists_policy(
    command: Command, context: CustodyContext
) -> Optional[RejectionReason]:
    product_id = command.payload.get("product_id")
    if (
        isinstance(product_id, str)
        and product_id
        and context.store.exists(product_id)
    ):
        return None
    return RejectionReason(
        code=ReasonCode.NOT_FOUND,
        message=f"Product '{product_id}' is not registered.",
        policy_name="product_exists_policy",
    )


def current_owner_policy(
    command: Command, context: CustodyContext
) -> Optional[RejectionReason]:
    """Only the current holder may hand custody on."""
    product_id = command.payload["product_id"]
    if context.guard.is_current_owner(product_id, command.actor_id):
        return None
    return RejectionReason(
        code=ReasonCode.UNAUTHORIZED,
        message=(
            f"Caller '{command.actor_id}' does not hold custody "
            f"of product '{product_id}'."
        ),
        policy_name="current_owner_policy",
    )


def recheck_current_owner(
    command: Command, product: Optional[Product]
) -> Optional[RejectionReason]:
    """
    current_owner_policy against a row the handler has locked. Another
    writer may have moved custody between dispatch and the lock.
    """
    product_id = command.payload["product_id"]
    if product is None:
        return RejectionReason(
            code=ReasonCode.NOT_FOUND,
            message=f"Product '{product_id}' is not registered.",
            policy_name="product_exists_policy",
        )
    if same_identity(command.actor_id, product.current_owner):
        return None
    return RejectionReason(
        code=ReasonCode.UNAUTHORIZED,
        message=(
            f"Caller '{command.actor_id}' no longer holds custody "
            f"of product '{product_id}'."
        ),
        policy_name="current_owner_policy",
    )


def new_owner_policy(
    command: Command, context: CustodyContext
) -> Optional[RejectionReason]:
    if not is_null_identity(command.payload.get("new_owner_id")):
        return None
    return RejectionReason(
        code=ReasonCode.INVALID_OWNER,
        message="Custody cannot be transferred to the null identity.",
        policy_name="new_owner_policy",
    )


def status_policy(
    command: Command, context: CustodyContext
) -> Optional[RejectionReason]:
    new_status = command.payload.get("new_status")
    if isinstance(new_status, str) and new_status:
        return None
    return RejectionReason(
        code=ReasonCode.EMPTY_STATUS,
        message="New status must be a non-empty string.",
        policy_name="status_policy",
    )


REGISTER_POLICIES = (
    authority_policy,
    product_id_policy,
    unique_product_policy,
)

TRANSFER_POLICIES = (
    product_exists_policy,
    current_owner_policy,
    new_owner_policy,
    status_policy,
)


def register_custody_policies(dispatcher) -> None:
    for policy in REGISTER_POLICIES:
        dispatcher.register_policy(CUSTODY_PRODUCT_REGISTER_REQUEST, policy)
    for policy in TRANSFER_POLICIES:
        dispatcher.register_policy(CUSTODY_PRODUCT_TRANSFER_REQUEST, policy)
