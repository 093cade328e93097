"""
Subscriber data structures and type definitions for the event store.

Defines the Subscriber dataclass which wraps callback references with
metadata. Subscribers may be held weakly so the registry does not keep their
owners alive, or strongly so short-lived callables such as lambdas survive.
Also defines the CALLBACK type alias used throughout the package.
"""

import weakref
from dataclasses import dataclass
from typing import Any
from typing import Callable
from typing import Optional
from typing import Union

from eventstore import record

CALLBACK = Callable[[record.EventRecord], Any]
"""
The end point that change records are forwarded to. Receives one positional
EventRecord. Return values are ignored.
"""


class StrongRef(object):
    """Same call interface as weakref.ref, but keeps the target alive."""

    __slots__ = ("_target",)

    def __init__(self, target: CALLBACK) -> None:
        self._target = target

    def __call__(self) -> CALLBACK:
        return self._target


@dataclass(frozen=True)
class Subscriber(object):
    """A subscriber with a callback reference and priority."""

    callback_ref: Union[weakref.ref[Any], weakref.WeakMethod, StrongRef]
    """
    The end point that records are forwarded to. i.e. what gets ran.
    Either a weak reference or a StrongRef, depending on how the subscriber
    was registered.
    """

    priority: int
    """
    Where in the delivery order the callback should take place.
    Higher numbers are delivered to before lower numbers.
    """

    is_weak: bool
    """If the callback is held by weak reference."""

    @property
    def callback(self) -> Optional[CALLBACK]:
        """Get the live callback, or None if collected."""
        return self.callback_ref()
