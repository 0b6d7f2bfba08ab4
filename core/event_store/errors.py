"""
Custody Event Store — Append Errors
======================================
Raised when an append cannot be sealed into the log.
An append that raises has written nothing.
"""


class EventStoreError(Exception):
    """Base error for audit log operations."""

    code = "EVENT_STORE_ERROR"


class UnknownEventTypeError(EventStoreError):
    """Event type was never registered with the EventTypeRegistry."""

    code = "EVENT_TYPE_UNKNOWN"

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(
            f"Event type '{event_type}' is not registered; "
            f"unknown types are never appended."
        )


class SequenceConflictError(EventStoreError):
    """Another writer claimed the next sequence number first."""

    code = "SEQUENCE_CONFLICT"

    def __init__(self, sequence: int):
        self.sequence = sequence
        super().__init__(
            f"Sequence {sequence} is already taken; "
            f"the log head moved during append."
        )
