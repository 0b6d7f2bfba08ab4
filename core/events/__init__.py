"""
Custody Event Bus — Public API
=================================
The audit log seals history. The bus announces it to observers.
History must be committed before it is heard.
"""

from core.events.dispatcher import dispatch
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
)
from core.events.registry import ALL_EVENTS, SubscriberRegistry

__all__ = [
    "dispatch",
    "SubscriberRegistry",
    "ALL_EVENTS",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
]
