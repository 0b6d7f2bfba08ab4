"""
Custody Engine — App Configuration
=====================================
Holds the current snapshot of every registered product.
History is not kept here; core.event_store holds it.
"""

from django.apps import AppConfig


class CustodyConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "engines.custody"
    label = "custody"
    verbose_name = "Custody Product Registry"
