"""
Custody Engine — History Replay Tests
========================================
Reconstructing the chain of custody from the audit log alone.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from core.event_store.log import InMemoryAuditEventLog
from core.event_store.validators.registry import EventTypeRegistry
from engines.custody.errors import HistoryReplayError
from engines.custody.events import (
    ProductRegistered,
    StatusUpdated,
    register_custody_event_types,
)
from engines.custody.history import (
    CustodyStep,
    reconstruct_custody_chain,
    replay_snapshot,
)

T0 = datetime(2026, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


def _log() -> InMemoryAuditEventLog:
    registry = EventTypeRegistry()
    register_custody_event_types(registry)
    return InMemoryAuditEventLog(registry)


def _write(log, body, *, from_party=None, to_party=None):
    return log.append(
        event_type=body.event_type,
        product_id=body.product_id,
        actor_id=from_party or to_party,
        command_id=uuid.uuid4(),
        correlation_id=uuid.uuid4(),
        payload=body.to_payload(),
        created_at=body.timestamp,
        from_party=from_party,
        to_party=to_party,
    )


def _registered(product_id="SN-001", at=T0):
    return ProductRegistered(product_id, "M", at, "ipfs://x")


def _moved(old, new, status, minutes, product_id="SN-001"):
    return StatusUpdated(product_id, old, new, status, T0 + timedelta(minutes=minutes))


def _mdc_log():
    log = _log()
    _write(log, _registered(), to_party="M")
    _write(log, _registered("SN-002"), to_party="M")
    _write(log, _moved("M", "D", "Shipped", 10), from_party="M", to_party="D")
    _write(log, _moved("D", "C", "Delivered", 20), from_party="D", to_party="C")
    return log


class TestReconstructCustodyChain:
    def test_full_chain(self):
        chain = reconstruct_custody_chain(_mdc_log().events(), "SN-001")
        assert chain == (
            CustodyStep("M", "Registered at Manufacturing", T0, 1),
            CustodyStep("D", "Shipped", T0 + timedelta(minutes=10), 3),
            CustodyStep("C", "Delivered", T0 + timedelta(minutes=20), 4),
        )

    def test_other_products_ignored(self):
        chain = reconstruct_custody_chain(_mdc_log().events(), "SN-002")
        assert [s.owner for s in chain] == ["M"]

    def test_unregistered_product_has_empty_chain(self):
        assert reconstruct_custody_chain(_mdc_log().events(), "SN-404") == ()

    def test_replays_in_sequence_order_whatever_the_input_order(self):
        events = list(_mdc_log().events())
        events.reverse()
        chain = reconstruct_custody_chain(events, "SN-001")
        assert [s.owner for s in chain] == ["M", "D", "C"]

    def test_old_owner_mismatch_raises(self):
        log = _log()
        _write(log, _registered(), to_party="M")
        _write(log, _moved("X", "D", "Shipped", 10), from_party="X", to_party="D")

        with pytest.raises(HistoryReplayError) as exc_info:
            reconstruct_custody_chain(log.events(), "SN-001")
        assert exc_info.value.sequence == 2

    def test_update_before_registration_raises(self):
        log = _log()
        _write(log, _moved("M", "D", "Shipped", 10), from_party="M", to_party="D")
        with pytest.raises(HistoryReplayError, match="before registration"):
            reconstruct_custody_chain(log.events(), "SN-001")

    def test_duplicate_sequence_raises(self):
        events = list(_mdc_log().events())
        events.append(replace(events[2]))
        with pytest.raises(HistoryReplayError, match="duplicate"):
            reconstruct_custody_chain(events, "SN-001")

    def test_double_registration_raises(self):
        log = _log()
        _write(log, _registered(), to_party="M")
        _write(log, _registered(), to_party="M")
        with pytest.raises(HistoryReplayError, match="registered twice"):
            reconstruct_custody_chain(log.events(), "SN-001")


class TestReplaySnapshot:
    def test_snapshot_matches_latest_step(self):
        product = replay_snapshot(_mdc_log().events(), "SN-001")
        assert product.current_owner == "C"
        assert product.status == "Delivered"
        assert product.registration_timestamp == T0
        assert product.details_uri == "ipfs://x"
        assert product.is_genuine is True

    def test_unknown_product(self):
        assert replay_snapshot(_mdc_log().events(), "SN-404") is None
