"""
Required for static type checkers to accept these names as members of the
eventstore module.

This module gets imported into the eventstore module so stubs are accessible
through the eventstore namespace.

The doc strings for each function exists in the stubs for intellisense
fetching, instead of within the module class itself because the module class
is a module replacement at runtime, so the namespaces during inspection are
different.
"""

from collections.abc import Mapping
from typing import Callable
from typing import Optional

from eventstore import handlers
from eventstore import namespaces
from eventstore import subscriber


# -----General Stubs-----------------------------------------------------------


def reset() -> None:
    """Drop every event and every subscriber of the default registry without
    notifying anyone."""


def to_dict() -> namespaces.Snapshot:
    """Convert the default registry contents to a dictionary."""


def to_string() -> str:
    """Returns a string representation of the default registry."""


# -----Mutation Stubs----------------------------------------------------------


# noinspection PyUnusedLocal
def save(key: str, namespace: str = namespaces.DEFAULT_NAMESPACE) -> int:
    """
    Record an occurrence of an event. Sets the value to 1 if the event does
    not exist already, otherwise increments it.

    Args:
        key (str): The key, or name, of the event.
        namespace (str): Optional namespace to segregate events with.
    Returns:
        int: The current value of the event.
    """


# noinspection PyUnusedLocal
def add_to(key: str, amount: int, namespace: str = namespaces.DEFAULT_NAMESPACE) -> int:
    """
    Add an amount to an event, creating it with that amount if missing.

    Args:
        key (str): The key, or name, of the event.
        amount (int): The amount to add.
        namespace (str): Optional namespace to segregate events with.
    Returns:
        int: The current value of the event.
    """


# noinspection PyUnusedLocal
def remove_from(
    key: str, amount: int, namespace: str = namespaces.DEFAULT_NAMESPACE
) -> int:
    """
    Subtract an amount from an event, creating it with -amount if missing.

    Args:
        key (str): The key, or name, of the event.
        amount (int): The amount to subtract.
        namespace (str): Optional namespace to segregate events with.
    Returns:
        int: The current value of the event.
    """


# noinspection PyUnusedLocal
def set_value(
    key: str, amount: int, namespace: str = namespaces.DEFAULT_NAMESPACE
) -> int:
    """
    Set an event to the given amount regardless of its previous value.

    Args:
        key (str): The key, or name, of the event.
        amount (int): The value to store.
        namespace (str): Optional namespace to segregate events with.
    Returns:
        int: The current value of the event.
    """


# noinspection PyUnusedLocal
def clear_namespace(namespace: str) -> bool:
    """
    Clear all events in a namespace. This removes data!
    Subscribers receive a value 0 record for each key before removal.

    Returns:
        bool: True if the namespace was cleared, False if it did not exist.
    """


def clear_all() -> None:
    """
    Clear all events. All of them. This removes data!
    Subscribers receive a value 0 record for each key.
    """


# -----Query Stubs-------------------------------------------------------------


# noinspection PyUnusedLocal
def get(key: str, namespace: str = namespaces.DEFAULT_NAMESPACE) -> int:
    """Get the current value of an event, or 0 if it does not exist."""


# noinspection PyUnusedLocal
def has_value(key: str, namespace: str = namespaces.DEFAULT_NAMESPACE) -> bool:
    """True if the event exists and is non-zero."""


# -----Snapshot Stubs----------------------------------------------------------


def export_snapshot() -> namespaces.Snapshot:
    """Get a copy of all event data for a persistence layer."""


# noinspection PyUnusedLocal
def import_snapshot(data: Mapping[str, Mapping[str, int]]) -> None:
    """
    Replace all event data, usually with data from a persistence layer.
    Subscribers receive a record for every imported key.

    Raises:
        SnapshotFormatError: If data is not shaped namespace -> key -> int.
    """


# -----Subscriber Stubs--------------------------------------------------------


# noinspection PyUnusedLocal
def register_subscriber(
    callback: subscriber.CALLBACK, priority: int = 0, weak: bool = False
) -> None:
    """
    Register a callback to receive every change record.

    Args:
        callback (Callable): Function called with one EventRecord.
        priority (int): Higher priorities are delivered to first.
        weak (bool): Hold the callback by weak reference.
    Raises:
        SubscriberSignatureError: If callback cannot receive a single
            positional EventRecord.
    """


# noinspection PyUnusedLocal
def unregister_subscriber(callback: subscriber.CALLBACK) -> None:
    """Remove every registration of a callback."""


# noinspection PyUnusedLocal
def subscribe(
    priority: int = 0, weak: bool = False
) -> Callable[[subscriber.CALLBACK], subscriber.CALLBACK]:
    """
    Decorator to register a function or static method as a subscriber.

    Args:
        priority (int): The delivery priority. Defaults to 0.
        weak (bool): Hold the callback by weak reference.
    """


def clear_subscribers() -> None:
    """Remove all subscribers."""


# noinspection PyUnusedLocal
def set_subscriber_exception_handler(
    handler: Optional[handlers.SUBSCRIBER_EXCEPTION_HANDLER],
) -> None:
    """
    Set the exception handler for subscriber errors.
    Pass None to restore default behavior (re-raise exceptions).
    """


# -----Introspection Stubs-----------------------------------------------------


def get_namespaces() -> list[str]:
    """Get all namespaces."""


# noinspection PyUnusedLocal
def get_keys(namespace: str = namespaces.DEFAULT_NAMESPACE) -> list[str]:
    """Get all keys in a namespace."""


# noinspection PyUnusedLocal
def namespace_exists(namespace: str) -> bool:
    """Check if a namespace exists..."""


def get_subscriber_count() -> int:
    """Get the number of subscribers, including dead weak references."""


def get_live_subscriber_count() -> int:
    """Get the number of subscribers whose callback is still alive."""


# noinspection PyUnusedLocal
def is_subscribed(callback: subscriber.CALLBACK) -> bool:
    """Check if a specific callback is subscribed."""


def get_statistics() -> dict[str, object]:
    """Get overall statistics of the default registry."""
