"""
# Event Store

Herein is the module level event store: a process wide EventRegistry wrapped
in a module class to create a protective closure around the event table.

A reimport protection clause exists at the top of the file to prevent the
event table and its subscribers from being lost on import.

Function stubs exist in the stubs file for static type checkers to validate
correct calls.

Independent registries can be created with eventstore.EventRegistry().
"""

# Remember to update doc strings in the stub.py file so static type checkers
# and intellisense can receive accurate feedback!

import sys

# -----------------------------------------------------------------------------
# Prevent module reload - event table would be lost!
if "eventstore" in sys.modules:
    existing_module = sys.modules["eventstore"]
    if hasattr(existing_module, "_EVENTSTORE_IMPORT_GUARD"):
        raise ImportError(
            "Module 'eventstore' has already been imported and cannot be reloaded. "
            "Event data would be lost. "
            "Restart your Python session to reimport."
        )
_EVENTSTORE_IMPORT_GUARD = True
# -----------------------------------------------------------------------------

from collections.abc import Mapping
from types import ModuleType

from eventstore.stub import *
from eventstore import handlers
from eventstore import namespaces
from eventstore import record
from eventstore import registry
from eventstore import subscriber


version_major = 1
version_minor = 0
version_patch = 0
__version__ = f"{version_major}.{version_minor}.{version_patch}"

_DEFAULT_REGISTRY = registry.EventRegistry()
"""
Process wide event registry.
Holds every event saved through the module level functions.
"""


class EventStore(ModuleType):
    """
    Module level access to the process wide event registry.

    Events are integer counters identified by a key and an optional namespace.
    Every change is sent to subscribers as an EventRecord.

    To manage subscribers use
    register_subscriber() and unregister_subscriber(),
    or decorate with @eventstore.subscribe().

    Use export_snapshot() and import_snapshot() to persist the events.
    """

    # -----Runtime Closures----------------------------------------------------
    # ---Constants---
    __version__ = __version__
    _EVENTSTORE_IMPORT_GUARD = _EVENTSTORE_IMPORT_GUARD
    DEFAULT_NAMESPACE = namespaces.DEFAULT_NAMESPACE
    # Explicitly refuse to make closure for _DEFAULT_REGISTRY so it stays
    # protected!

    # ---Types---
    EventRegistry = registry.EventRegistry
    EventRecord = record.EventRecord

    # ---Exceptions---
    EventStoreError = registry.EventStoreError
    SubscriberSignatureError = registry.SubscriberSignatureError
    SnapshotFormatError = registry.SnapshotFormatError

    # ---Modules---
    handlers = handlers
    namespaces = namespaces
    record = record
    registry = registry
    subscriber = subscriber
    # -------------------------------------------------------------------------

    def __init__(self, name: str) -> None:
        super().__init__(name)
        assert self._EVENTSTORE_IMPORT_GUARD is True

    @staticmethod
    def reset() -> None:
        _DEFAULT_REGISTRY.reset()

    # -----Mutation------------------------------------------------------------

    @staticmethod
    def save(key: str, namespace: str = namespaces.DEFAULT_NAMESPACE) -> int:
        return _DEFAULT_REGISTRY.save(key, namespace)

    @staticmethod
    def add_to(
        key: str, amount: int, namespace: str = namespaces.DEFAULT_NAMESPACE
    ) -> int:
        return _DEFAULT_REGISTRY.add_to(key, amount, namespace)

    @staticmethod
    def remove_from(
        key: str, amount: int, namespace: str = namespaces.DEFAULT_NAMESPACE
    ) -> int:
        return _DEFAULT_REGISTRY.remove_from(key, amount, namespace)

    @staticmethod
    def set_value(
        key: str, amount: int, namespace: str = namespaces.DEFAULT_NAMESPACE
    ) -> int:
        return _DEFAULT_REGISTRY.set_value(key, amount, namespace)

    @staticmethod
    def clear_namespace(namespace: str) -> bool:
        return _DEFAULT_REGISTRY.clear_namespace(namespace)

    @staticmethod
    def clear_all() -> None:
        _DEFAULT_REGISTRY.clear_all()

    # -----Queries-------------------------------------------------------------

    @staticmethod
    def get(key: str, namespace: str = namespaces.DEFAULT_NAMESPACE) -> int:
        return _DEFAULT_REGISTRY.get(key, namespace)

    @staticmethod
    def has_value(key: str, namespace: str = namespaces.DEFAULT_NAMESPACE) -> bool:
        return _DEFAULT_REGISTRY.has_value(key, namespace)

    # -----Snapshots-----------------------------------------------------------

    @staticmethod
    def export_snapshot() -> namespaces.Snapshot:
        return _DEFAULT_REGISTRY.export_snapshot()

    @staticmethod
    def import_snapshot(data: Mapping[str, Mapping[str, int]]) -> None:
        _DEFAULT_REGISTRY.import_snapshot(data)

    # -----Subscriber Management-----------------------------------------------

    @staticmethod
    def register_subscriber(
        callback: subscriber.CALLBACK, priority: int = 0, weak: bool = False
    ) -> None:
        _DEFAULT_REGISTRY.register_subscriber(callback, priority, weak)

    @staticmethod
    def unregister_subscriber(callback: subscriber.CALLBACK) -> None:
        _DEFAULT_REGISTRY.unregister_subscriber(callback)

    @staticmethod
    def subscribe(priority: int = 0, weak: bool = False) -> Callable:
        return _DEFAULT_REGISTRY.subscribe(priority, weak)

    @staticmethod
    def clear_subscribers() -> None:
        _DEFAULT_REGISTRY.clear_subscribers()

    @staticmethod
    def set_subscriber_exception_handler(
        handler: Optional[handlers.SUBSCRIBER_EXCEPTION_HANDLER],
    ) -> None:
        _DEFAULT_REGISTRY.set_subscriber_exception_handler(handler)

    # -----Introspection API---------------------------------------------------

    @staticmethod
    def get_namespaces() -> list[str]:
        return _DEFAULT_REGISTRY.get_namespaces()

    @staticmethod
    def get_keys(namespace: str = namespaces.DEFAULT_NAMESPACE) -> list[str]:
        return _DEFAULT_REGISTRY.get_keys(namespace)

    @staticmethod
    def namespace_exists(namespace: str) -> bool:
        return _DEFAULT_REGISTRY.namespace_exists(namespace)

    @staticmethod
    def get_subscriber_count() -> int:
        return _DEFAULT_REGISTRY.get_subscriber_count()

    @staticmethod
    def get_live_subscriber_count() -> int:
        return _DEFAULT_REGISTRY.get_live_subscriber_count()

    @staticmethod
    def is_subscribed(callback: subscriber.CALLBACK) -> bool:
        return _DEFAULT_REGISTRY.is_subscribed(callback)

    @staticmethod
    def get_statistics() -> dict[str, object]:
        return _DEFAULT_REGISTRY.get_statistics()

    @staticmethod
    def to_dict() -> namespaces.Snapshot:
        return _DEFAULT_REGISTRY.to_dict()

    @staticmethod
    def to_string() -> str:
        return _DEFAULT_REGISTRY.to_string()


# This is here to protect the _DEFAULT_REGISTRY, creating a protective closure.
custom_module = EventStore(sys.modules[__name__].__name__)
sys.modules[__name__] = custom_module
