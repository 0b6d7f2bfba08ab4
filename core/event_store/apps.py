"""
Custody Event Store — App Configuration
==========================================
The audit log: append-only, hash-chained, strictly ordered.

This app:
- Seals events in commit order
- Maintains hash-chain integrity
- Answers history queries

This app does NOT:
- Hold current product state (engines.custody does)
- Decide who may act
- Notify observers (core.events does)
"""

from django.apps import AppConfig


class EventStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.event_store"
    label = "event_store"
    verbose_name = "Custody Audit Event Log"
