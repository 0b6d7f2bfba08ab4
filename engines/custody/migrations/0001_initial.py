from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ProductRecord",
            fields=[
                (
                    "product_id",
                    models.CharField(
                        max_length=255,
                        primary_key=True,
                        serialize=False,
                        help_text="Opaque product identifier, unique for the store's lifetime.",
                    ),
                ),
                ("current_owner", models.CharField(max_length=255, db_index=True)),
                ("registration_timestamp", models.DateTimeField()),
                ("is_genuine", models.BooleanField(default=True)),
                ("status", models.TextField()),
                ("details_uri", models.TextField()),
            ],
            options={
                "db_table": "custody_product",
            },
        ),
    ]
