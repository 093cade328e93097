"""
# Event Registry

Herein is the event registry itself: a namespace -> key -> value table of
integer counters plus the list of subscribers that are told about every value
change.

Every public method holds the registry lock for its whole duration, including
delivery to subscribers, so other threads never see a half applied clear or
snapshot load. Delivery is synchronous: a slow subscriber slows down the call
that changed the value, and a failing subscriber fails it unless an exception
handler is set.
"""

import copy
import inspect
import json
import logging
import threading
import weakref
from collections.abc import Mapping
from typing import Any
from typing import Callable
from typing import Optional
from typing import Union

from eventstore import handlers
from eventstore import namespaces
from eventstore import record
from eventstore import subscriber


logger = logging.getLogger(__name__)


# -----Exceptions--------------------------------------------------------------
class EventStoreError(Exception):
    """Base class for event store errors."""


class SubscriberSignatureError(EventStoreError):
    """Raised when a callback cannot receive a single change record."""


class SnapshotFormatError(EventStoreError):
    """Raised when snapshot data is not shaped namespace -> key -> int."""


# -----------------------------------------------------------------------------


def _make_ref(
    callback: subscriber.CALLBACK,
    weak: bool,
    on_collected_callback: Callable[[], None],
) -> Union[weakref.ref[Any], weakref.WeakMethod, subscriber.StrongRef]:
    """Create the appropriate reference for any callback type."""
    if not weak:
        return subscriber.StrongRef(callback)

    def cleanup(_: Union[weakref.ref[Any], weakref.WeakMethod]) -> None:
        # Arg needed to add for weakref creation.
        on_collected_callback()

    try:
        if inspect.ismethod(callback):
            return weakref.WeakMethod(callback, cleanup)
        else:
            return weakref.ref(callback, cleanup)
    except TypeError as e:
        raise SubscriberSignatureError(
            f"Subscriber '{handlers.get_callable_name(callback)}' cannot be held "
            f"by weak reference, builtins and bound builtin methods must be "
            f"registered with weak=False: {e}"
        ) from e


def _validate_callback(callback: subscriber.CALLBACK) -> None:
    """
    Check that a callback can be called with exactly one positional argument.

    Raises:
        SubscriberSignatureError: If the callback is not callable or its
            signature cannot bind a single positional record.
    """
    if not callable(callback):
        raise SubscriberSignatureError(f"Subscriber {callback!r} is not callable.")

    try:
        sig = inspect.signature(callback)
    except (TypeError, ValueError):
        # Some builtins expose no signature, trust them.
        return

    try:
        sig.bind(None)
    except TypeError as e:
        raise SubscriberSignatureError(
            f"Subscriber '{handlers.get_callable_name(callback)}' must accept "
            f"a single positional EventRecord argument: {e}"
        ) from e


def _validate_snapshot(data: Any) -> None:
    """
    Validate snapshot data before it replaces the table.

    Raises:
        SnapshotFormatError: If data is not a mapping of string namespaces to
            mappings of string keys to ints.
    """
    if not isinstance(data, Mapping):
        raise SnapshotFormatError(
            f"Snapshot must be a mapping, got {type(data).__name__}."
        )

    for namespace, table in data.items():
        if not isinstance(namespace, str):
            raise SnapshotFormatError(f"Namespace {namespace!r} is not a string.")
        if not isinstance(table, Mapping):
            raise SnapshotFormatError(
                f"Namespace {namespace!r} must map to a mapping, "
                f"got {type(table).__name__}."
            )
        for key, value in table.items():
            if not isinstance(key, str):
                raise SnapshotFormatError(
                    f"Key {key!r} in namespace {namespace!r} is not a string."
                )
            if isinstance(value, bool) or not isinstance(value, int):
                raise SnapshotFormatError(
                    f"Value of {namespace!r}/{key!r} must be an int, "
                    f"got {type(value).__name__}."
                )


class EventRegistry(object):
    """
    Keeps a record of integer events and tells subscribers whenever any value
    changes.

    Events are identified by a key and an optional namespace. Namespaces are
    created lazily the first time a key is written to them.

    To manage subscribers use
    register_subscriber() and unregister_subscriber(),
    or decorate with @registry.subscribe().

    Use export_snapshot() and import_snapshot() to hand the state to and from
    a persistence layer.
    """

    def __init__(
        self,
        exception_handler: Optional[handlers.SUBSCRIBER_EXCEPTION_HANDLER] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._table: namespaces.Snapshot = {}
        self._subscribers: list[subscriber.Subscriber] = []

        # -----Exception Handlers-----
        self._subscriber_exception_handler: Optional[
            handlers.SUBSCRIBER_EXCEPTION_HANDLER
        ] = exception_handler

    def reset(self) -> None:
        """Drop every event and every subscriber without notifying anyone."""
        with self._lock:
            self._table = {}
            self._subscribers = []
            logger.debug("Event registry reset.")

    # -----Mutation------------------------------------------------------------

    def _apply(
        self,
        key: str,
        namespace: str,
        on_create: int,
        combine: Callable[[int], int],
    ) -> int:
        """
        Write a single event value and notify subscribers.

        Args:
            key (str): The event key.
            namespace (str): The event namespace, created if missing.
            on_create (int): Value stored when the key does not exist yet.
            combine (Callable[[int], int]): Produces the new value from the
                current one when the key exists.
        Returns:
            int: The new value.
        """
        with self._lock:
            table = self._table.setdefault(namespace, {})

            if key not in table:
                table[key] = on_create
            else:
                table[key] = combine(table[key])

            value = table[key]
            self._notify(record.EventRecord(key, namespace, value))
            return value

    def save(self, key: str, namespace: str = namespaces.DEFAULT_NAMESPACE) -> int:
        """
        Record an occurrence of an event. Sets the value to 1 if the event does
        not exist already, otherwise increments it.

        Args:
            key (str): The key, or name, of the event.
            namespace (str): Optional namespace to segregate events with.
        Returns:
            int: The current value of the event.
        """
        return self._apply(key, namespace, 1, lambda current: current + 1)

    def add_to(
        self, key: str, amount: int, namespace: str = namespaces.DEFAULT_NAMESPACE
    ) -> int:
        """
        Add an amount to an event, creating it with that amount if missing.

        Args:
            key (str): The key, or name, of the event.
            amount (int): The amount to add.
            namespace (str): Optional namespace to segregate events with.
        Returns:
            int: The current value of the event.
        """
        return self._apply(key, namespace, amount, lambda current: current + amount)

    def remove_from(
        self, key: str, amount: int, namespace: str = namespaces.DEFAULT_NAMESPACE
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
        return self._apply(key, namespace, -amount, lambda current: current - amount)

    def set_value(
        self, key: str, amount: int, namespace: str = namespaces.DEFAULT_NAMESPACE
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
        return self._apply(key, namespace, amount, lambda _: amount)

    def clear_namespace(self, namespace: str) -> bool:
        """
        Clear all events in a namespace. This removes data!

        Subscribers receive a record with value 0 for every key in the
        namespace before it is removed.

        Args:
            namespace (str): The namespace to clear.
        Returns:
            bool: True if the namespace was cleared, False if it did not exist.
        """
        with self._lock:
            if namespace not in self._table:
                logger.debug(f"Namespace {namespace!r} not found, nothing cleared.")
                return False

            self._notify_cleared(namespace)

            # A subscriber may have cleared it already.
            self._table.pop(namespace, None)
            logger.debug(f"Cleared namespace {namespace!r}.")
            return True

    def clear_all(self) -> None:
        """
        Clear all events. All of them. This removes data!

        Subscribers receive a record with value 0 for every key, namespace by
        namespace in stored order. Keys written by subscribers meanwhile are
        announced the same way before everything is removed.
        """
        with self._lock:
            self._notify_cleared()

            self._table = {}
            logger.debug("Cleared all events.")

    # -----Queries-------------------------------------------------------------

    def get(self, key: str, namespace: str = namespaces.DEFAULT_NAMESPACE) -> int:
        """
        Get the current value of an event.

        Returns:
            int: The value of the event if it exists, otherwise 0.
        """
        with self._lock:
            return self._table.get(namespace, {}).get(key, 0)

    def has_value(
        self, key: str, namespace: str = namespaces.DEFAULT_NAMESPACE
    ) -> bool:
        """True if the event exists and is non-zero."""
        return self.get(key, namespace) != 0

    # -----Snapshots-----------------------------------------------------------

    def export_snapshot(self) -> namespaces.Snapshot:
        """
        Get a copy of all event data for a persistence layer.

        Returns:
            namespaces.Snapshot: namespace -> key -> value. Changing it does not
                affect the registry.
        """
        with self._lock:
            return copy.deepcopy(self._table)

    def import_snapshot(self, data: Mapping[str, Mapping[str, int]]) -> None:
        """
        Replace all event data, usually with data from a persistence layer.
        This overwrites everything currently stored!

        Subscribers receive a record for every key in the new data, carrying
        its imported value, in the order of the given data.

        Args:
            data (Mapping[str, Mapping[str, int]]): namespace -> key -> value.
        Raises:
            SnapshotFormatError: If data is not shaped as expected. Nothing is
                changed or emitted in that case.
        """
        _validate_snapshot(data)

        with self._lock:
            self._table = {
                namespace: dict(table) for namespace, table in data.items()
            }
            logger.debug(f"Imported snapshot with {len(self._table)} namespaces.")

            for namespace, table in list(self._table.items()):
                for key, value in list(table.items()):
                    self._notify(record.EventRecord(key, namespace, value))

    # -----Subscriber Management-----------------------------------------------

    def _on_subscriber_collected(self) -> None:
        """Called when a weakly held subscriber is garbage collected."""
        with self._lock:
            self._subscribers = [
                sub for sub in self._subscribers if sub.callback is not None
            ]

    def register_subscriber(
        self, callback: subscriber.CALLBACK, priority: int = 0, weak: bool = False
    ) -> None:
        """
        Register a callback to receive every change record.

        Args:
            callback (Callable): Function called with one EventRecord.
            priority (int): Higher priorities are delivered to first. Equal
                priorities are delivered to in registration order.
            weak (bool): Hold the callback by weak reference so the registry
                does not keep it alive.
        Raises:
            SubscriberSignatureError: If callback cannot receive a single
                positional EventRecord.
        """
        _validate_callback(callback)

        sub = subscriber.Subscriber(
            callback_ref=_make_ref(
                callback=callback,
                weak=weak,
                on_collected_callback=self._on_subscriber_collected,
            ),
            priority=priority,
            is_weak=weak,
        )

        with self._lock:
            self._subscribers.append(sub)
            self._subscribers.sort(key=lambda s: s.priority, reverse=True)

    def unregister_subscriber(self, callback: subscriber.CALLBACK) -> None:
        """
        Remove every registration of a callback. Unknown callbacks are ignored.

        Args:
            callback (Callable): Function to remove.
        """
        with self._lock:
            self._subscribers = [
                sub for sub in self._subscribers if sub.callback != callback
            ]

    def subscribe(
        self, priority: int = 0, weak: bool = False
    ) -> Callable[[subscriber.CALLBACK], subscriber.CALLBACK]:
        """
        Decorator to register a function or static method as a subscriber.

        To register an instance referencing class method (one using 'self'),
        use registry.register_subscriber(self.method).

        Args:
            priority (int): The delivery priority. Defaults to 0.
            weak (bool): Hold the callback by weak reference.
        """

        def decorator(func: subscriber.CALLBACK) -> subscriber.CALLBACK:
            self.register_subscriber(func, priority, weak)
            return func

        return decorator

    def clear_subscribers(self) -> None:
        """Remove all subscribers."""
        with self._lock:
            self._subscribers = []

    def set_subscriber_exception_handler(
        self, handler: Optional[handlers.SUBSCRIBER_EXCEPTION_HANDLER]
    ) -> None:
        """
        Set the exception handler for subscriber errors.
        The handler is called when a subscriber raises while a record is
        delivered.

        Args:
            Optional[handlers.SUBSCRIBER_EXCEPTION_HANDLER]:
                Callable with signature (CALLBACK, EventRecord, Exception) -> bool.
                Returns True to stop delivery, False to continue.
                Pass None to restore default behavior (re-raise exceptions).
        """
        with self._lock:
            self._subscriber_exception_handler = handler

    def _notify_cleared(self, only_namespace: Optional[str] = None) -> None:
        """
        Send a 0 record for every key about to be removed. Lock must be held.

        Keys that subscribers write while these records are delivered get a 0
        record too, so every key removed afterwards has been announced. Each
        key is announced once per clear.

        Args:
            only_namespace (Optional[str]): Limit to this namespace. None for
                every namespace.
        """
        announced: set[tuple[str, str]] = set()

        while True:
            pending = [
                (namespace, key)
                for namespace, table in self._table.items()
                if only_namespace is None or namespace == only_namespace
                for key in table
                if (namespace, key) not in announced
            ]
            if not pending:
                return

            for namespace, key in pending:
                announced.add((namespace, key))
                self._notify(record.EventRecord(key, namespace, 0))

    def _notify(self, record_: record.EventRecord) -> None:
        """Deliver a record to all current subscribers. Lock must be held."""
        for sub in list(self._subscribers):
            callback = sub.callback
            if callback is None:
                continue

            try:
                callback(record_)
            except Exception as e:
                if self._subscriber_exception_handler is None:
                    raise

                stop = self._subscriber_exception_handler(callback, record_, e)
                if stop:
                    break

    # -----Introspection API---------------------------------------------------

    def get_namespaces(self) -> list[str]:
        """Get all namespaces."""
        with self._lock:
            return sorted(self._table.keys())

    def get_keys(self, namespace: str = namespaces.DEFAULT_NAMESPACE) -> list[str]:
        """Get all keys in a namespace, or an empty list if it doesn't exist."""
        with self._lock:
            return sorted(self._table.get(namespace, {}).keys())

    def namespace_exists(self, namespace: str) -> bool:
        """Check if a namespace exists..."""
        with self._lock:
            return namespace in self._table

    def get_subscriber_count(self) -> int:
        """
        Get the number of subscribers.

        Returns:
            int: Number of subscribers (including dead weak references).
        """
        with self._lock:
            return len(self._subscribers)

    def get_live_subscriber_count(self) -> int:
        """Get the number of subscribers whose callback is still alive."""
        with self._lock:
            return sum(1 for sub in self._subscribers if sub.callback is not None)

    def is_subscribed(self, callback: subscriber.CALLBACK) -> bool:
        """
        Check if a specific callback is subscribed.

        Args:
            callback (Callable): The callback function to check.
        Returns:
            bool: True if callback is subscribed, False otherwise.
        """
        with self._lock:
            for sub in self._subscribers:
                if sub.callback == callback:
                    return True

            return False

    def get_statistics(self) -> dict[str, object]:
        """
        Get overall registry statistics.

        Returns:
            dict[str, object]: Dictionary with registry-wide statistics.

        Example:
            {
                "total_namespaces": 3,
                "total_keys": 12,
                "keys_with_value": 9,
                "total_subscribers": 2,
                "total_live_subscribers": 2,
                "dead_subscriber_references": 0,
            }
        """
        with self._lock:
            total_keys = sum(len(table) for table in self._table.values())
            keys_with_value = sum(
                sum(1 for value in table.values() if value != 0)
                for table in self._table.values()
            )
            total_subscribers = len(self._subscribers)
            total_live_subscribers = sum(
                1 for sub in self._subscribers if sub.callback is not None
            )

            return {
                "total_namespaces": len(self._table),
                "total_keys": total_keys,
                "keys_with_value": keys_with_value,
                "total_subscribers": total_subscribers,
                "total_live_subscribers": total_live_subscribers,
                "dead_subscriber_references": (
                    total_subscribers - total_live_subscribers
                ),
            }

    def to_dict(self) -> namespaces.Snapshot:
        """Convert the registry contents to a dictionary."""
        return self.export_snapshot()

    def to_string(self) -> str:
        """Returns a string representation of the registry."""
        return json.dumps(self.to_dict(), indent=4)
