"""Isolated invocation of user callbacks."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

_LOGGER = logging.getLogger(__name__)

# Strong references to scheduled coroutine callbacks until they finish
_BACKGROUND_TASKS: set[asyncio.Task[Any]] = set()


def _log_task_result(task: asyncio.Task[Any]) -> None:
    _BACKGROUND_TASKS.discard(task)
    if task.cancelled():
        return
    err = task.exception()
    if err is not None:
        _LOGGER.error(
            "Async callback %s failed", task.get_name(), exc_info=err
        )


def run_callback(callback: Callable[..., Any], *args: Any) -> bool:
    """Invoke a callback, logging instead of propagating its errors.

    Coroutine results are scheduled on the running loop so a slow listener
    never blocks the frame loop.

    Returns:
        False if the callback raised synchronously, True otherwise.
    """
    try:
        result = callback(*args)
    except Exception:
        _LOGGER.exception("Callback %r raised", callback)
        return False

    if inspect.iscoroutine(result):
        try:
            task = asyncio.get_running_loop().create_task(
                result, name=getattr(callback, "__qualname__", repr(callback))
            )
        except RuntimeError:
            result.close()
            _LOGGER.error("No running event loop for async callback %r", callback)
            return False
        _BACKGROUND_TASKS.add(task)
        task.add_done_callback(_log_task_result)
    return True
