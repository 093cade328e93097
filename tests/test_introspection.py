"""
Unit tests for the registry inspection API.

Tests verify that introspection methods provide accurate information about
namespaces, keys, subscribers, and registry state.
"""

import gc
import json

import eventstore
from eventstore import EventRecord


def test_get_namespaces() -> None:
    """Test getting all namespaces, sorted."""
    sut = eventstore.EventRegistry()
    sut.save("event1", "system")
    sut.save("event2", "app")
    sut.save("event3")

    assert sut.get_namespaces() == ["", "app", "system"]


def test_get_keys() -> None:
    """Test getting the keys of a namespace."""
    sut = eventstore.EventRegistry()
    sut.save("b", "ns")
    sut.save("a", "ns")
    sut.save("c")

    assert sut.get_keys("ns") == ["a", "b"]
    assert sut.get_keys() == ["c"]
    assert sut.get_keys("missing") == []


def test_namespace_exists() -> None:
    """Test checking if namespace exists."""
    sut = eventstore.EventRegistry()
    sut.save("event1", "test")

    assert sut.namespace_exists("test") is True
    assert sut.namespace_exists("nonexistent") is False


def test_namespace_with_zero_value_still_exists() -> None:
    """Test that a namespace stays until cleared even if all values are 0."""
    sut = eventstore.EventRegistry()
    sut.save("event1", "test")
    sut.set_value("event1", 0, "test")

    assert sut.namespace_exists("test") is True


def test_subscriber_counts() -> None:
    """Test counting all and live subscribers."""
    sut = eventstore.EventRegistry()

    # noinspection PyUnusedLocal
    def handler1(record: EventRecord) -> None:
        pass

    # noinspection PyUnusedLocal
    def handler2(record: EventRecord) -> None:
        pass

    sut.register_subscriber(handler1)
    sut.register_subscriber(handler2, weak=True)

    assert sut.get_subscriber_count() == 2
    assert sut.get_live_subscriber_count() == 2

    del handler2
    gc.collect()

    assert sut.get_live_subscriber_count() == 1


def test_is_subscribed() -> None:
    """Test checking whether a callback is subscribed."""
    sut = eventstore.EventRegistry()

    # noinspection PyUnusedLocal
    def handler(record: EventRecord) -> None:
        pass

    # noinspection PyUnusedLocal
    def other(record: EventRecord) -> None:
        pass

    sut.register_subscriber(handler)

    assert sut.is_subscribed(handler) is True
    assert sut.is_subscribed(other) is False


def test_get_statistics() -> None:
    """Test registry wide statistics."""
    sut = eventstore.EventRegistry()
    sut.save("event1")
    sut.save("event2", "firstNamespace")
    sut.set_value("event3", 0, "firstNamespace")

    # noinspection PyUnusedLocal
    def handler(record: EventRecord) -> None:
        pass

    sut.register_subscriber(handler)

    assert sut.get_statistics() == {
        "total_namespaces": 2,
        "total_keys": 3,
        "keys_with_value": 2,
        "total_subscribers": 1,
        "total_live_subscribers": 1,
        "dead_subscriber_references": 0,
    }


def test_to_dict_and_to_string() -> None:
    """Test the dictionary and string forms of the registry."""
    sut = eventstore.EventRegistry()
    sut.add_to("event1", 3, "ns")

    assert sut.to_dict() == {"ns": {"event1": 3}}
    assert json.loads(sut.to_string()) == {"ns": {"event1": 3}}


def test_reset() -> None:
    """Test that reset empties the registry quietly."""
    sut = eventstore.EventRegistry()
    received: list[EventRecord] = []
    sut.register_subscriber(received.append)
    sut.save("event1")

    sut.reset()

    assert sut.get_namespaces() == []
    assert sut.get_subscriber_count() == 0
    assert len(received) == 1
