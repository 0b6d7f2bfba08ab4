"""
Custody Core Transactions — In-Memory Unit of Work Tests
===========================================================
Nested blocks join the outer unit, participants publish on commit in
enlistment order, and on_commit callbacks wait for the commit.
"""

from __future__ import annotations

import threading

import pytest

from core.transactions import InMemoryTransactionManager


class Participant:
    def __init__(self, name, journal):
        self.name = name
        self.journal = journal

    def join(self, tx):
        return tx.enlist(self, publish=self.publish, discard=self.discard)

    def publish(self):
        self.journal.append(f"{self.name}:publish")

    def discard(self):
        self.journal.append(f"{self.name}:discard")


@pytest.fixture
def tx():
    return InMemoryTransactionManager()


# ══════════════════════════════════════════════════════════════
# COMMIT / ROLLBACK
# ══════════════════════════════════════════════════════════════

class TestUnitOfWork:
    def test_participants_publish_in_enlistment_order(self, tx):
        journal = []
        store, log = Participant("store", journal), Participant("log", journal)

        with tx.atomic():
            store.join(tx)
            log.join(tx)
            assert journal == []

        assert journal == ["store:publish", "log:publish"]

    def test_enlist_is_once_per_unit(self, tx):
        journal = []
        store = Participant("store", journal)

        with tx.atomic():
            assert store.join(tx) is True
            assert store.join(tx) is False
        with tx.atomic():
            assert store.join(tx) is True

        assert journal == ["store:publish", "store:publish"]

    def test_exception_discards(self, tx):
        journal = []
        store = Participant("store", journal)

        with pytest.raises(RuntimeError):
            with tx.atomic():
                store.join(tx)
                raise RuntimeError("boom")

        assert journal == ["store:discard"]
        assert not tx.in_atomic()

    def test_nested_block_joins_outer_unit(self, tx):
        journal = []
        store = Participant("store", journal)

        with tx.atomic():
            with tx.atomic():
                store.join(tx)
            assert journal == []

        assert journal == ["store:publish"]

    def test_exception_caught_outside_nested_block_still_rolls_back(self, tx):
        journal = []
        store = Participant("store", journal)

        with tx.atomic():
            store.join(tx)
            try:
                with tx.atomic():
                    raise ValueError("inner")
            except ValueError:
                pass

        assert journal == ["store:discard"]

    def test_enlist_outside_block_raises(self, tx):
        with pytest.raises(RuntimeError, match="atomic"):
            Participant("store", []).join(tx)


# ══════════════════════════════════════════════════════════════
# ON COMMIT
# ══════════════════════════════════════════════════════════════

class TestOnCommit:
    def test_callbacks_wait_for_commit(self, tx):
        journal = []
        store = Participant("store", journal)

        with tx.atomic():
            store.join(tx)
            tx.on_commit(lambda: journal.append("notify"))
            assert journal == []

        assert journal == ["store:publish", "notify"]

    def test_callbacks_dropped_on_rollback(self, tx):
        called = []
        with pytest.raises(RuntimeError):
            with tx.atomic():
                tx.on_commit(lambda: called.append(True))
                raise RuntimeError("boom")
        assert called == []

    def test_outside_block_runs_immediately(self, tx):
        called = []
        tx.on_commit(lambda: called.append(True))
        assert called == [True]


# ══════════════════════════════════════════════════════════════
# THREADS
# ══════════════════════════════════════════════════════════════

class TestThreads:
    def test_unit_is_owned_by_its_thread(self, tx):
        inside = threading.Event()
        release = threading.Event()
        seen = {}

        def writer():
            with tx.atomic():
                inside.set()
                release.wait(timeout=10)

        thread = threading.Thread(target=writer)
        thread.start()
        assert inside.wait(timeout=10)
        seen["reader_in_atomic"] = tx.in_atomic()
        release.set()
        thread.join(timeout=10)

        assert seen["reader_in_atomic"] is False

    def test_writers_take_turns(self, tx):
        state = {"inside": 0, "max_inside": 0}
        lock = threading.Lock()

        def writer():
            with tx.atomic():
                with lock:
                    state["inside"] += 1
                    state["max_inside"] = max(state["max_inside"], state["inside"])
                with lock:
                    state["inside"] -= 1

        threads = [threading.Thread(target=writer) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert state["max_inside"] == 1
