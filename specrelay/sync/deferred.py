"""Call-site preservation for deferred commands.

When an awaited command fails, its traceback starts in the event loop
and no longer shows where the user issued it. These helpers capture
the call-site trace up front and merge it into the failure.
"""

import functools
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, TypeVar

from specrelay.core.models import ErrorRecord
from specrelay.core.stack import StackReconciler

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CommandError(Exception):
    """A deferred command failed; ``record`` holds the merged trace."""

    def __init__(self, record: ErrorRecord):
        super().__init__(record.message)
        self.record = record


async def settle(awaitable: Awaitable[T], call_site: ErrorRecord | None = None) -> T:
    """Await a command, re-raising failures with the call-site trace merged in.

    Args:
        awaitable: The deferred command.
        call_site: Trace captured where the command was issued. Captured
            here when omitted.

    Returns:
        The command's result.

    Raises:
        CommandError: If the command raised. The original exception is
            chained as ``__cause__``.
    """
    if call_site is None:
        call_site = ErrorRecord.capture(skip=2)
    try:
        return await awaitable
    except Exception as e:
        record = StackReconciler.merge_and_clean(e, call_site)
        logger.debug(f"Deferred command failed: {record.name}: {record.message}")
        raise CommandError(record) from e


def preserve_call_site(
    func: Callable[..., Coroutine[Any, Any, T]],
) -> Callable[..., Coroutine[Any, Any, T]]:
    """Decorate a coroutine function so its failures keep the caller's trace."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        call_site = ErrorRecord.capture(skip=2)
        return await settle(func(*args, **kwargs), call_site=call_site)

    return wrapper
