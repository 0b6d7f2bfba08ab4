"""
Custody Event Bus — Tests
============================
Observer registration and post-commit dispatch.
"""

import uuid
from dataclasses import dataclass

import pytest

from core.events.dispatcher import dispatch
from core.events.errors import DuplicateSubscriberError, InvalidEventTypeFormat
from core.events.registry import ALL_EVENTS, SubscriberRegistry

REGISTERED = "custody.product.registered.v1"
UPDATED = "custody.product.status_updated.v1"


@dataclass(frozen=True)
class StubEvent:
    event_type: str
    event_id: uuid.UUID


def _event(event_type: str = REGISTERED) -> StubEvent:
    return StubEvent(event_type=event_type, event_id=uuid.uuid4())


class TestSubscriberRegistry:
    def test_register_and_lookup(self):
        registry = SubscriberRegistry()
        handler = lambda event: None
        registry.register_subscriber(REGISTERED, handler, subscriber_name="indexer")
        assert registry.get_subscribers(REGISTERED) == [(handler, "indexer")]
        assert registry.has_subscribers(REGISTERED)
        assert not registry.has_subscribers(UPDATED)

    def test_duplicate_handler_rejected(self):
        registry = SubscriberRegistry()
        handler = lambda event: None
        registry.register_subscriber(REGISTERED, handler, subscriber_name="a")
        with pytest.raises(DuplicateSubscriberError):
            registry.register_subscriber(REGISTERED, handler, subscriber_name="b")

    def test_bad_event_type_rejected(self):
        registry = SubscriberRegistry()
        with pytest.raises(InvalidEventTypeFormat):
            registry.register_subscriber("registered", lambda e: None, subscriber_name="x")

    def test_wildcard_follows_specific(self):
        registry = SubscriberRegistry()
        specific = lambda event: None
        everything = lambda event: None
        registry.register_subscriber(ALL_EVENTS, everything, subscriber_name="audit")
        registry.register_subscriber(UPDATED, specific, subscriber_name="tracker")

        assert registry.get_subscribers(UPDATED) == [
            (specific, "tracker"),
            (everything, "audit"),
        ]
        assert registry.subscriber_count(REGISTERED) == 1


class TestDispatch:
    def test_no_subscribers_is_not_an_error(self):
        result = dispatch(_event(), SubscriberRegistry())
        assert result["subscribers_notified"] == 0
        assert result["failures"] == []

    def test_delivers_in_registration_order(self):
        received = []
        registry = SubscriberRegistry()
        registry.register_subscriber(
            REGISTERED, lambda e: received.append("first"), subscriber_name="one"
        )
        registry.register_subscriber(
            REGISTERED, lambda e: received.append("second"), subscriber_name="two"
        )

        result = dispatch(_event(), registry)

        assert received == ["first", "second"]
        assert result["subscribers_notified"] == 2

    def test_failing_subscriber_is_isolated(self):
        received = []

        def broken(event):
            raise RuntimeError("indexer offline")

        registry = SubscriberRegistry()
        registry.register_subscriber(REGISTERED, broken, subscriber_name="broken")
        registry.register_subscriber(
            REGISTERED, lambda e: received.append(e), subscriber_name="ok"
        )

        event = _event()
        result = dispatch(event, registry)

        assert received == [event]
        assert result["subscribers_notified"] == 1
        assert result["subscribers_failed"] == 1
        failure = result["failures"][0]
        assert failure["subscriber"] == "broken"
        assert failure["error_type"] == "RuntimeError"
        assert failure["error"] == "indexer offline"
