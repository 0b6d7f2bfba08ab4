"""
Custody Engine — Django Product Store
========================================
ProductStore backed by the custody_product table.

atomic() is django.db.transaction.atomic(), so a store write and the
audit log append made inside one block commit or roll back together.
The primary key on product_id is the cross-process backstop for
uniqueness. get(for_update=True) and update() lock the row, so a
guard re-checked on the locked row holds until the block commits.
"""

from __future__ import annotations

import logging
from typing import Callable, ContextManager, Optional

from django.db import IntegrityError, transaction

from engines.custody.errors import DuplicateProductError, ProductNotFoundError
from engines.custody.models import ProductRecord
from engines.custody.store import Product

logger = logging.getLogger("custody.engine")


def _to_product(row: ProductRecord) -> Product:
    return Product(
        product_id=row.product_id,
        current_owner=row.current_owner,
        registration_timestamp=row.registration_timestamp,
        is_genuine=row.is_genuine,
        status=row.status,
        details_uri=row.details_uri,
    )


class DjangoProductStore:

    def atomic(self) -> ContextManager[None]:
        return transaction.atomic()

    def exists(self, product_id: str) -> bool:
        return ProductRecord.objects.filter(product_id=product_id).exists()

    def on_commit(self, callback: Callable[[], None]) -> None:
        transaction.on_commit(callback)

    def get(
        self, product_id: str, *, for_update: bool = False
    ) -> Optional[Product]:
        rows = ProductRecord.objects.filter(product_id=product_id)
        if for_update:
            rows = rows.select_for_update()
        row = rows.first()
        return _to_product(row) if row is not None else None

    def insert(self, product_id: str, product: Product) -> Product:
        if product.product_id != product_id:
            raise ValueError(
                f"Snapshot id '{product.product_id}' does not match "
                f"key '{product_id}'."
            )
        try:
            with transaction.atomic():
                ProductRecord.objects.create(
                    product_id=product.product_id,
                    current_owner=product.current_owner,
                    registration_timestamp=product.registration_timestamp,
                    is_genuine=product.is_genuine,
                    status=product.status,
                    details_uri=product.details_uri,
                )
        except IntegrityError as exc:
            raise DuplicateProductError(product_id) from exc
        return product

    def update(self, product_id: str, status: str, new_owner: str) -> Product:
        with transaction.atomic():
            row = (
                ProductRecord.objects.select_for_update()
                .filter(product_id=product_id)
                .first()
            )
            if row is None:
                raise ProductNotFoundError(product_id)
            row.status = status
            row.current_owner = new_owner
            row.save(update_fields=["status", "current_owner"])
        return _to_product(row)

    def count(self) -> int:
        return ProductRecord.objects.count()
