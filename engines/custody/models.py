"""
Custody Engine — Product Snapshot Model
==========================================
One row per registered product id holding only the current snapshot.
There is no history column: every transfer overwrites
status and current_owner in place.

Rows are never deleted.
"""

from django.db import models


class ProductRecord(models.Model):

    product_id = models.CharField(
        max_length=255,
        primary_key=True,
        help_text="Opaque product identifier, unique for the store's lifetime.",
    )

    current_owner = models.CharField(max_length=255, db_index=True)

    registration_timestamp = models.DateTimeField()

    is_genuine = models.BooleanField(default=True)

    status = models.TextField()

    details_uri = models.TextField()

    class Meta:
        db_table = "custody_product"

    def delete(self, *args, **kwargs):
        raise PermissionError("Registered products are never deleted.")

    def __str__(self):
        return f"{self.product_id} ({self.status}) @ {self.current_owner}"
