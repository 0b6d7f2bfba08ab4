"""
Custody Engine — Guard and Policy Tests
==========================================
Pure predicates and the ordered precondition chains, exercised
through a real dispatcher with a stub-free in-memory store.
"""

import uuid
from datetime import datetime, timezone

import pytest

from core.commands.dispatcher import CommandDispatcher
from core.commands.rejection import ReasonCode
from core.identity.identities import NULL_IDENTITY, is_null_identity, same_identity
from core.time.clock import FixedClock
from engines.custody.commands import (
    CUSTODY_PRODUCT_REGISTER_REQUEST,
    CUSTODY_PRODUCT_TRANSFER_REQUEST,
    ProductRegisterRequest,
    ProductTransferRequest,
)
from engines.custody.policies import (
    AccessControlGuard,
    CustodyContext,
    REGISTER_POLICIES,
    TRANSFER_POLICIES,
    recheck_current_owner,
    register_custody_policies,
)
from engines.custody.store import InMemoryProductStore, Product

T0 = datetime(2026, 3, 1, 8, 0, 0, tzinfo=timezone.utc)
AUTHORITY = "M"


def _store_with(*owners_by_id) -> InMemoryProductStore:
    store = InMemoryProductStore()
    for product_id, owner in owners_by_id:
        store.insert(product_id, Product(
            product_id=product_id,
            current_owner=owner,
            registration_timestamp=T0,
            is_genuine=True,
            status="Registered at Manufacturing",
            details_uri="ipfs://x",
        ))
    return store


def _dispatcher(store) -> CommandDispatcher:
    guard = AccessControlGuard(AUTHORITY, store)
    dispatcher = CommandDispatcher(
        context=CustodyContext(guard=guard, store=store),
        clock=FixedClock(T0),
    )
    register_custody_policies(dispatcher)
    return dispatcher


def _register(caller, product_id, details_uri="ipfs://x"):
    return ProductRegisterRequest(product_id, details_uri).to_command(
        actor_id=caller,
        command_id=uuid.uuid4(),
        correlation_id=uuid.uuid4(),
        issued_at=T0,
    )


def _transfer(caller, product_id, new_status, new_owner):
    return ProductTransferRequest(product_id, new_status, new_owner).to_command(
        actor_id=caller,
        command_id=uuid.uuid4(),
        correlation_id=uuid.uuid4(),
        issued_at=T0,
    )


# ══════════════════════════════════════════════════════════════
# IDENTITIES
# ══════════════════════════════════════════════════════════════

class TestIdentities:
    @pytest.mark.parametrize("identity", [None, "", "   ", NULL_IDENTITY, "0X" + "0" * 40])
    def test_null_identities(self, identity):
        assert is_null_identity(identity)

    def test_real_identity_is_not_null(self):
        assert not is_null_identity("0xAbC0000000000000000000000000000000000001")

    def test_null_never_matches(self):
        assert not same_identity("", "")
        assert not same_identity(None, None)
        assert same_identity("D", "D")


# ══════════════════════════════════════════════════════════════
# GUARD
# ══════════════════════════════════════════════════════════════

class TestAccessControlGuard:
    def test_is_authority(self):
        guard = AccessControlGuard(AUTHORITY, _store_with())
        assert guard.is_authority("M")
        assert not guard.is_authority("D")
        assert not guard.is_authority("")

    def test_is_current_owner(self):
        guard = AccessControlGuard(AUTHORITY, _store_with(("SN-001", "D")))
        assert guard.is_current_owner("SN-001", "D")
        assert not guard.is_current_owner("SN-001", "M")
        assert not guard.is_current_owner("SN-404", "D")


# ══════════════════════════════════════════════════════════════
# REGISTER CHAIN
# ══════════════════════════════════════════════════════════════

class TestRegisterPolicies:
    def test_chain_order(self):
        assert [p.__name__ for p in REGISTER_POLICIES] == [
            "authority_policy", "product_id_policy", "unique_product_policy",
        ]

    def test_authority_accepted(self):
        outcome = _dispatcher(_store_with()).dispatch(_register("M", "SN-001"))
        assert outcome.is_accepted

    def test_non_authority_unauthorized_even_with_bad_id(self):
        dispatcher = _dispatcher(_store_with(("SN-001", "M")))
        for product_id in ("SN-002", "", "SN-001"):
            outcome = dispatcher.dispatch(_register("D", product_id))
            assert outcome.reason.code == ReasonCode.UNAUTHORIZED

    def test_empty_id(self):
        outcome = _dispatcher(_store_with()).dispatch(_register("M", ""))
        assert outcome.reason.code == ReasonCode.EMPTY_ID

    def test_duplicate_id(self):
        outcome = _dispatcher(_store_with(("SN-001", "D"))).dispatch(
            _register("M", "SN-001")
        )
        assert outcome.reason.code == ReasonCode.DUPLICATE_ID
        assert outcome.reason.policy_name == "unique_product_policy"


# ══════════════════════════════════════════════════════════════
# TRANSFER CHAIN
# ══════════════════════════════════════════════════════════════

class TestTransferPolicies:
    def test_chain_order(self):
        assert [p.__name__ for p in TRANSFER_POLICIES] == [
            "product_exists_policy",
            "current_owner_policy",
            "new_owner_policy",
            "status_policy",
        ]

    def test_owner_accepted(self):
        dispatcher = _dispatcher(_store_with(("SN-001", "M")))
        outcome = dispatcher.dispatch(_transfer("M", "SN-001", "Shipped", "D"))
        assert outcome.is_accepted

    def test_not_found_before_anything_else(self):
        dispatcher = _dispatcher(_store_with())
        outcome = dispatcher.dispatch(_transfer("X", "SN-404", "", None))
        assert outcome.reason.code == ReasonCode.NOT_FOUND

    def test_non_owner_unauthorized_before_input_checks(self):
        dispatcher = _dispatcher(_store_with(("SN-001", "D")))
        outcome = dispatcher.dispatch(_transfer("M", "SN-001", "", None))
        assert outcome.reason.code == ReasonCode.UNAUTHORIZED

    @pytest.mark.parametrize("new_owner", [None, "", NULL_IDENTITY])
    def test_null_new_owner(self, new_owner):
        dispatcher = _dispatcher(_store_with(("SN-001", "M")))
        outcome = dispatcher.dispatch(_transfer("M", "SN-001", "", new_owner))
        assert outcome.reason.code == ReasonCode.INVALID_OWNER

    def test_empty_status(self):
        dispatcher = _dispatcher(_store_with(("SN-001", "M")))
        outcome = dispatcher.dispatch(_transfer("M", "SN-001", "", "D"))
        assert outcome.reason.code == ReasonCode.EMPTY_STATUS

    def test_policies_do_not_mutate_store(self):
        store = _store_with(("SN-001", "M"))
        _dispatcher(store).dispatch(_transfer("M", "SN-001", "Shipped", "D"))
        assert store.get("SN-001").current_owner == "M"


class TestRequests:
    def test_non_string_details_uri_is_a_type_error(self):
        with pytest.raises(TypeError, match="details_uri"):
            ProductRegisterRequest("SN-001", None)

    @pytest.mark.parametrize("product_id", [None, 42, b"SN-001"])
    def test_non_string_product_id_is_empty_id(self, product_id):
        outcome = _dispatcher(_store_with()).dispatch(_register("M", product_id))
        assert outcome.reason.code == ReasonCode.EMPTY_ID

    def test_non_string_product_id_from_intruder_is_unauthorized(self):
        outcome = _dispatcher(_store_with()).dispatch(_register("intruder", None))
        assert outcome.reason.code == ReasonCode.UNAUTHORIZED

    def test_non_string_transfer_id_is_not_found(self):
        dispatcher = _dispatcher(_store_with(("SN-001", "M")))
        outcome = dispatcher.dispatch(_transfer("M", None, "Shipped", "D"))
        assert outcome.reason.code == ReasonCode.NOT_FOUND

    def test_non_string_owner_is_invalid_owner(self):
        dispatcher = _dispatcher(_store_with(("SN-001", "M")))
        outcome = dispatcher.dispatch(_transfer("M", "SN-001", "Shipped", 42))
        assert outcome.reason.code == ReasonCode.INVALID_OWNER

    def test_non_string_status_is_empty_status(self):
        dispatcher = _dispatcher(_store_with(("SN-001", "M")))
        outcome = dispatcher.dispatch(_transfer("M", "SN-001", None, "D"))
        assert outcome.reason.code == ReasonCode.EMPTY_STATUS

    def test_command_types(self):
        assert _register("M", "SN-001").command_type == CUSTODY_PRODUCT_REGISTER_REQUEST
        assert _transfer("M", "SN-001", "S", "D").command_type == CUSTODY_PRODUCT_TRANSFER_REQUEST


class TestRecheckCurrentOwner:
    def test_holder_passes(self):
        product = _store_with(("SN-001", "M")).get("SN-001")
        assert recheck_current_owner(_transfer("M", "SN-001", "S", "D"), product) is None

    def test_moved_custody_is_unauthorized(self):
        product = _store_with(("SN-001", "X")).get("SN-001")
        reason = recheck_current_owner(_transfer("M", "SN-001", "S", "D"), product)
        assert reason.code == ReasonCode.UNAUTHORIZED
        assert reason.policy_name == "current_owner_policy"

    def test_missing_row_is_not_found(self):
        reason = recheck_current_owner(_transfer("M", "SN-001", "S", "D"), None)
        assert reason.code == ReasonCode.NOT_FOUND
