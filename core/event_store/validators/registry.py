"""
Custody Event Store — Event Type Registry
============================================
Controls which event types may be appended to the audit log.
Free-text event types are forbidden.

Rules:
- Registry starts EMPTY
- Engines register their types at bootstrap
- The log refuses any unregistered event type
- Format: engine.domain.action[.version] (e.g. custody.product.registered.v1)
"""

from threading import Lock


class EventTypeRegistry:
    """
    In-memory registry of permitted event types.
    Thread-safe for concurrent registration and lookup.

    Usage:
        registry = EventTypeRegistry()
        registry.register("custody.product.registered.v1")
        registry.is_registered("custody.product.registered.v1")  # True
    """

    def __init__(self):
        self._registered_types: set[str] = set()
        self._lock = Lock()

    def register(self, event_type: str) -> None:
        if not event_type or not isinstance(event_type, str):
            raise ValueError("Event type must be a non-empty string.")

        parts = event_type.strip().split(".")
        if len(parts) < 3:
            raise ValueError(
                f"Event type '{event_type}' does not follow "
                f"engine.domain.action format."
            )

        with self._lock:
            self._registered_types.add(event_type)

    def is_registered(self, event_type: str) -> bool:
        with self._lock:
            return event_type in self._registered_types

    def get_all_registered(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._registered_types)

    def count(self) -> int:
        with self._lock:
            return len(self._registered_types)
