"""
Custody Engine — Product Store
=================================
Owns the mapping product_id → current snapshot.

The store is a cache of "latest", not the record of history: each
update replaces the whole snapshot and the previous one is gone.
The audit log is where history lives.

Rules:
- One snapshot per product_id, created once, never deleted
- insert on an existing id → DuplicateProductError
- update on a missing id   → ProductNotFoundError
- Snapshots are frozen; an update swaps in a new Product
- Writes inside atomic() are invisible to other threads until the
  outermost block commits, and are discarded if it rolls back
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, ContextManager, Optional, Protocol

from core.transactions import InMemoryTransactionManager
from engines.custody.errors import DuplicateProductError, ProductNotFoundError


# ══════════════════════════════════════════════════════════════
# PRODUCT SNAPSHOT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Product:
    """
    Current snapshot of one registered product.

    Fields:
        product_id:             Opaque immutable key.
        current_owner:          Identity holding custody. Never null.
        registration_timestamp: Fixed at registration.
        is_genuine:             True at registration; no operation
                                changes it (reserved for revocation).
        status:                 Free-form description of where the
                                product is. Never empty.
        details_uri:            Reference to off-chain details, fixed
                                at registration.
    """

    product_id: str
    current_owner: str
    registration_timestamp: datetime
    is_genuine: bool
    status: str
    details_uri: str

    def with_custody(self, status: str, owner: str) -> "Product":
        """Next snapshot: new status and holder, everything else kept."""
        return replace(self, status=status, current_owner=owner)


# ══════════════════════════════════════════════════════════════
# STORE PROTOCOL
# ══════════════════════════════════════════════════════════════

class ProductStore(Protocol):

    def exists(self, product_id: str) -> bool:
        ...

    def get(self, product_id: str, *, for_update: bool = False) -> Optional[Product]:
        """for_update locks the record until the enclosing atomic() ends."""
        ...

    def insert(self, product_id: str, product: Product) -> Product:
        ...

    def update(self, product_id: str, status: str, new_owner: str) -> Product:
        ...

    def count(self) -> int:
        ...

    def atomic(self) -> ContextManager[None]:
        ...

    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run callback once the enclosing atomic() commits."""
        ...


# ══════════════════════════════════════════════════════════════
# IN-MEMORY STORE
# ══════════════════════════════════════════════════════════════

class InMemoryProductStore:
    """
    Thread-safe in-memory product store.

    Writes are staged inside the shared unit of work and published when
    the outermost atomic() block commits. Only the writer thread sees
    its staged snapshots; readers keep seeing the published map.
    """

    def __init__(self, transactions: InMemoryTransactionManager | None = None):
        self._tx = transactions or InMemoryTransactionManager()
        self._committed: dict[str, Product] = {}
        self._staged: Optional[dict[str, Product]] = None

    def _stage(self) -> dict[str, Product]:
        if self._tx.enlist(self, publish=self._publish, discard=self._discard):
            self._staged = {}
        return self._staged

    def _publish(self) -> None:
        staged, self._staged = self._staged, None
        self._committed.update(staged)

    def _discard(self) -> None:
        self._staged = None

    def _visible(self, product_id: str) -> Optional[Product]:
        if self._staged is not None and self._tx.in_atomic():
            staged = self._staged.get(product_id)
            if staged is not None:
                return staged
        return self._committed.get(product_id)

    def atomic(self) -> ContextManager[None]:
        return self._tx.atomic()

    def on_commit(self, callback: Callable[[], None]) -> None:
        self._tx.on_commit(callback)

    def exists(self, product_id: str) -> bool:
        return self._visible(product_id) is not None

    def get(self, product_id: str, *, for_update: bool = False) -> Optional[Product]:
        # the writer already holds the unit's lock; for_update adds nothing
        return self._visible(product_id)

    def insert(self, product_id: str, product: Product) -> Product:
        if product.product_id != product_id:
            raise ValueError(
                f"Snapshot id '{product.product_id}' does not match "
                f"key '{product_id}'."
            )
        with self.atomic():
            if self._visible(product_id) is not None:
                raise DuplicateProductError(product_id)
            self._stage()[product_id] = product
        return product

    def update(self, product_id: str, status: str, new_owner: str) -> Product:
        with self.atomic():
            current = self._visible(product_id)
            if current is None:
                raise ProductNotFoundError(product_id)
            updated = current.with_custody(status=status, owner=new_owner)
            self._stage()[product_id] = updated
        return updated

    def count(self) -> int:
        return len(self._committed)
