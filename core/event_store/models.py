"""
Custody Event Store — Audit Event Model
==========================================
The persisted form of the audit log. One row per sealed event.

RULES:
- No deletes, no overwrites, no updates after insert
- sequence is unique and gap-free (assigned under a row lock)
- previous_event_hash is unique: two events can never claim the
  same predecessor, so concurrent appends cannot fork the chain
- Indexed by product_id and by the custody parties so indexers can
  filter without scanning the whole log

This file contains NO business logic.
"""

import uuid

from django.db import models


class AuditEventRecord(models.Model):
    """One sealed audit event."""

    # ── Ordering & Identity ───────────────────────────────────
    sequence = models.PositiveBigIntegerField(
        unique=True,
        help_text="Position in the global commit order, starting at 1.",
    )

    event_id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    event_type = models.CharField(
        max_length=255,
        help_text="Registered type, e.g. custody.product.registered.v1.",
    )

    # ── Subject & Parties ─────────────────────────────────────
    product_id = models.CharField(max_length=255)

    actor_id = models.CharField(max_length=255)

    from_party = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Custody giver. Null for registrations.",
    )

    to_party = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Custody receiver.",
    )

    # ── Causality ─────────────────────────────────────────────
    command_id = models.UUIDField()

    correlation_id = models.UUIDField()

    # ── Body ──────────────────────────────────────────────────
    payload = models.JSONField()

    # ── Temporal ──────────────────────────────────────────────
    created_at = models.DateTimeField(
        help_text="When the event happened (command issued_at).",
    )

    recorded_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the row was written.",
    )

    # ── Integrity (Hash-Chain) ────────────────────────────────
    previous_event_hash = models.CharField(max_length=64, unique=True)

    event_hash = models.CharField(max_length=64)

    class Meta:
        db_table = "custody_audit_event"
        ordering = ["sequence"]
        indexes = [
            models.Index(
                fields=["product_id", "sequence"],
                name="idx_audit_product_seq",
            ),
            models.Index(
                fields=["from_party"],
                name="idx_audit_from_party",
            ),
            models.Index(
                fields=["to_party"],
                name="idx_audit_to_party",
            ),
            models.Index(
                fields=["event_type"],
                name="idx_audit_type",
            ),
        ]

    def save(self, *args, **kwargs):
        """INSERT only. Sealed events are never updated."""
        if not self._state.adding:
            raise PermissionError(
                "Audit events are immutable. Cannot update a sealed event."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionError("Audit events are never deleted.")

    def __str__(self):
        return f"#{self.sequence} [{self.event_type}] {self.product_id}"
