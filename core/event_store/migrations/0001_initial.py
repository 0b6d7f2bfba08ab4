import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AuditEventRecord",
            fields=[
                (
                    "sequence",
                    models.PositiveBigIntegerField(
                        unique=True,
                        help_text="Position in the global commit order, starting at 1.",
                    ),
                ),
                (
                    "event_id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                (
                    "event_type",
                    models.CharField(
                        max_length=255,
                        help_text="Registered type, e.g. custody.product.registered.v1.",
                    ),
                ),
                ("product_id", models.CharField(max_length=255)),
                ("actor_id", models.CharField(max_length=255)),
                (
                    "from_party",
                    models.CharField(
                        max_length=255,
                        null=True,
                        blank=True,
                        help_text="Custody giver. Null for registrations.",
                    ),
                ),
                (
                    "to_party",
                    models.CharField(
                        max_length=255,
                        null=True,
                        blank=True,
                        help_text="Custody receiver.",
                    ),
                ),
                ("command_id", models.UUIDField()),
                ("correlation_id", models.UUIDField()),
                ("payload", models.JSONField()),
                (
                    "created_at",
                    models.DateTimeField(
                        help_text="When the event happened (command issued_at).",
                    ),
                ),
                (
                    "recorded_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        help_text="When the row was written.",
                    ),
                ),
                (
                    "previous_event_hash",
                    models.CharField(max_length=64, unique=True),
                ),
                ("event_hash", models.CharField(max_length=64)),
            ],
            options={
                "db_table": "custody_audit_event",
                "ordering": ["sequence"],
                "indexes": [
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
                ],
            },
        ),
    ]
