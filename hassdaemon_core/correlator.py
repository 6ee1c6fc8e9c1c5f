"""Request/response correlation for the multiplexed WebSocket connection.

Every command sent after authentication carries an integer id. A ``result``
frame fires the one-shot callback registered under its id; an ``event`` frame
fires the persistent subscription callback registered under the id of the
``subscribe_events`` command that created it.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from .const import MSG_EVENT, MSG_RESULT
from .errors import HassProtocolError
from .models import CommandResult, PendingRequest, RemoteEvent, ResultCallback

_LOGGER = logging.getLogger(__name__)

EventCallback = Callable[[RemoteEvent], Awaitable[None] | None]


class MessageCorrelator:
    """Assign command ids and route result and event frames back to callers."""

    def __init__(self) -> None:
        self._next_id = 1
        self._pending: dict[int, PendingRequest] = {}
        self._subscriptions: dict[int, EventCallback] = {}

    @property
    def pending_count(self) -> int:
        """Number of requests still waiting for a result."""
        return len(self._pending)

    @property
    def subscription_ids(self) -> tuple[int, ...]:
        return tuple(self._subscriptions)

    def next_id(self) -> int:
        """Return the next command id. Ids start at 1 and are never reused."""
        msg_id = self._next_id
        self._next_id += 1
        return msg_id

    def register(self, msg_id: int, on_result: ResultCallback) -> PendingRequest:
        """Register the one-shot result callback for ``msg_id``."""
        if msg_id in self._pending:
            raise ValueError(f"Request id {msg_id} is already pending")
        pending = PendingRequest(id=msg_id, on_result=on_result)
        self._pending[msg_id] = pending
        return pending

    def subscribe(self, msg_id: int, on_event: EventCallback) -> None:
        """Register the persistent event callback for subscription ``msg_id``."""
        self._subscriptions[msg_id] = on_event

    def unsubscribe(self, msg_id: int) -> bool:
        return self._subscriptions.pop(msg_id, None) is not None

    def discard(self, msg_id: int) -> bool:
        """Forget a pending request without firing it."""
        return self._pending.pop(msg_id, None) is not None

    def abandon(self) -> int:
        """Drop every pending request after transport loss.

        Abandoned callbacks never fire.

        Returns:
            Number of requests dropped.
        """
        count = len(self._pending)
        self._pending.clear()
        return count

    async def dispatch(self, frame: Mapping[str, Any]) -> bool:
        """Route a ``result`` or ``event`` frame.

        Returns:
            True if a callback was invoked, False if the frame had no taker.
            Errors raised by the callback itself are logged, not propagated.

        Raises:
            HassProtocolError: If the frame is malformed.
        """
        msg_type = frame.get("type")
        if msg_type == MSG_RESULT:
            return await self._dispatch_result(frame)
        if msg_type == MSG_EVENT:
            return await self._dispatch_event(frame)
        raise HassProtocolError(f"Frame type {msg_type!r} is not correlated")

    async def _dispatch_result(self, frame: Mapping[str, Any]) -> bool:
        result = CommandResult.from_dict(frame)
        pending = self._pending.pop(result.id, None)
        if pending is None:
            _LOGGER.warning("Ignoring result for unknown or completed id %s", result.id)
            return False
        _LOGGER.debug("Result id=%d success=%s", result.id, result.success)
        await self._invoke(pending.on_result, result, result.id)
        return True

    async def _dispatch_event(self, frame: Mapping[str, Any]) -> bool:
        msg_id = frame.get("id")
        callback = self._subscriptions.get(msg_id) if isinstance(msg_id, int) else None
        if callback is None:
            _LOGGER.debug("Ignoring event for unknown subscription id %s", msg_id)
            return False
        event = RemoteEvent.from_dict(frame.get("event"))
        await self._invoke(callback, event, msg_id)
        return True

    @staticmethod
    async def _invoke(callback: Callable[[Any], Any], arg: Any, msg_id: int) -> None:
        """Run a continuation to completion, logging instead of raising."""
        try:
            outcome = callback(arg)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            _LOGGER.exception("Callback for id %d raised", msg_id)
