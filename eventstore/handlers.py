"""
Exception handling utilities for the event store.

Provides exception handler functions and type definitions for managing errors
raised by subscriber callbacks while a change record is delivered. Without a
handler the exception propagates to whoever mutated the registry. Built-in
handlers cover the common patterns: stopping delivery with logging
(stop_and_log_subscriber_exception), logging and continuing
(log_and_continue_subscriber_exception), silently continuing
(silent_subscriber_exception), and collecting exceptions for batch processing
(collect_subscriber_exception).
"""

import logging
import sys
from typing import Callable

from eventstore import record
from eventstore import subscriber


logger = logging.getLogger(__name__)


SUBSCRIBER_EXCEPTION_HANDLER = Callable[
    [subscriber.CALLBACK, record.EventRecord, Exception], bool
]
"""
Signature for exception handlers.

Exception handlers receive the failing callback, the record being delivered,
and the exception, then return True to stop delivery of that record or False
to continue to the remaining subscribers.
"""

STOP = True
CONTINUE = False


def get_callable_name(callable_: Callable) -> str:
    """
    Returns the name of the callable, using class name for items with __self__,
    __name__ for anything with __name__, or str(callback) if neither are found.
    """
    if hasattr(callable_, "__self__"):
        return f"{callable_.__self__.__class__.__name__}.{callable_.__name__}"
    elif hasattr(callable_, "__name__"):
        return callable_.__name__
    else:
        return str(callable_)


def describe_record(record_: record.EventRecord) -> str:
    """Short human readable form of a record for log lines."""
    return f"{record_.namespace!r}/{record_.key!r}={record_.value}"


def stop_and_log_subscriber_exception(
    callback: subscriber.CALLBACK, record_: record.EventRecord, exception: Exception
) -> bool:
    """
    Handler that logs the raised exception and stops delivering the record to
    the remaining subscribers.
    """
    logger.error(
        f"Exception in event store subscriber:\n"
        f"  Record:    {describe_record(record_)}\n"
        f"  Callback:  {get_callable_name(callback)}\n"
        f"  Exception: {exception.__class__.__name__}: {exception}",
        exc_info=True,
    )

    return STOP


def log_and_continue_subscriber_exception(
    callback: subscriber.CALLBACK, record_: record.EventRecord, exception: Exception
) -> bool:
    """Log subscriber errors but continue delivering."""
    logger.warning(
        f"Subscriber error (continuing): "
        f"{get_callable_name(callback)} on {describe_record(record_)}: {exception}"
    )
    return CONTINUE


def silent_subscriber_exception(
    _: subscriber.CALLBACK, __: record.EventRecord, ___: Exception
) -> bool:
    """Silently ignore all exceptions."""
    return CONTINUE


exceptions_caught = []


def collect_subscriber_exception(
    callback: subscriber.CALLBACK, record_: record.EventRecord, exception: Exception
) -> bool:
    """
    Collect exceptions for batch processing.
    This appends exceptions caught to eventstore.handlers.exceptions_caught
    which is a list.
    Either manage the list manually or use this function as an example to create
    a more robust exception collector.
    """
    exceptions_caught.append(
        {
            "callback": get_callable_name(callback),
            "namespace": record_.namespace,
            "key": record_.key,
            "value": record_.value,
            "exception": f"{exception.__class__.__name__}: {exception}",
            "exc_info": sys.exc_info(),
        }
    )
    return CONTINUE
