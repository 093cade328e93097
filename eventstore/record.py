"""
The change record sent to subscribers.

Every time an event value changes the registry builds an EventRecord holding
the value after the change and forwards it to each subscriber.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EventRecord(object):
    """A single event value change."""

    key: str
    """The key, or name, of the event."""

    namespace: str
    """The namespace the event lives in. Empty string for the default."""

    value: int
    """The value of the event after the change."""
