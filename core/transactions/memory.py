"""
Custody Core Transactions — In-Memory Unit of Work
=====================================================
The in-memory counterpart of django.db.transaction for the parts of
the registry that live in process memory.

    with manager.atomic():          # outermost block opens a unit
        store.insert(...)           # participants stage their writes
        log.append(...)
        manager.on_commit(notify)   # queued until the unit commits
    # participants publish in enlistment order, then callbacks run

Rules:
- One writer at a time; the write lock is held for the whole unit
- Nested blocks join the outer unit
- An exception escaping any block rolls the whole unit back, even if
  an outer block catches it
- Readers never take the write lock and only see published state
- on_commit outside a block runs the callback immediately
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

logger = logging.getLogger("custody.transactions")


class _Unit:
    """State of one outermost atomic block."""

    def __init__(self):
        self.participants: dict[int, tuple[Callable[[], None], Callable[[], None]]] = {}
        self.callbacks: list[Callable[[], None]] = []
        self.rollback_only = False

    def commit(self) -> None:
        for publish, _ in self.participants.values():
            publish()

    def rollback(self) -> None:
        for _, discard in self.participants.values():
            discard()


class InMemoryTransactionManager:

    def __init__(self):
        self._lock = threading.RLock()
        self._unit: Optional[_Unit] = None
        self._owner: Optional[int] = None

    def in_atomic(self) -> bool:
        """True only for the thread that owns the open unit."""
        return self._unit is not None and self._owner == threading.get_ident()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            if self._unit is not None:
                try:
                    yield
                except BaseException:
                    self._unit.rollback_only = True
                    raise
                return

            unit = _Unit()
            self._unit = unit
            self._owner = threading.get_ident()
            try:
                yield
            except BaseException:
                self._close()
                unit.rollback()
                raise

            self._close()
            if unit.rollback_only:
                logger.debug("Unit marked rollback-only; discarding writes")
                unit.rollback()
                return
            unit.commit()

        for callback in unit.callbacks:
            callback()

    def _close(self) -> None:
        self._unit = None
        self._owner = None

    def enlist(
        self,
        participant: object,
        *,
        publish: Callable[[], None],
        discard: Callable[[], None],
    ) -> bool:
        """
        Join the open unit. Returns True the first time a participant
        joins a given unit, so it can reset its staging area.
        """
        if not self.in_atomic():
            raise RuntimeError("enlist() requires an open atomic() block.")
        key = id(participant)
        if key in self._unit.participants:
            return False
        self._unit.participants[key] = (publish, discard)
        return True

    def on_commit(self, callback: Callable[[], None]) -> None:
        if self.in_atomic():
            self._unit.callbacks.append(callback)
            return
        callback()
