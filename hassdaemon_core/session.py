"""Session manager for a Home Assistant WebSocket connection.

This module provides the connection handle that entities and automation code
talk to. It handles:
- Connection and authentication handshake
- Warm-up of the entity state cache
- The event subscription and per-entity state-change dispatch
- Command sending, with or without waiting for the result

There is no reconnect logic. When the transport drops, pending requests are
abandoned and the session moves to FAILED; the process is expected to be
restarted by whatever supervises it.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

import aiohttp

from .callbacks import run_callback
from .const import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_PING_INTERVAL,
    EVENT_STATE_CHANGED,
    MSG_AUTH_INVALID,
    MSG_AUTH_OK,
    MSG_AUTH_REQUIRED,
    MSG_CALL_SERVICE,
    MSG_EVENT,
    MSG_GET_STATES,
    MSG_RESULT,
    MSG_SUBSCRIBE_EVENTS,
    WEBSOCKET_PATH,
)
from .correlator import MessageCorrelator
from .errors import (
    HassAuthError,
    HassClientError,
    HassConnectionError,
    HassProtocolError,
    HassTimeout,
)
from .history import HistoryAccessor
from .http import HassHttpClient
from .models import CommandResult, EntityState, RemoteEvent, ResultCallback, StateChangedData
from .protocol import build_auth, build_call_service, build_command, classify
from .state_cache import StateCache
from .transport import HassWsClient, HassWsMessageType

_LOGGER = logging.getLogger(__name__)

StateChangeCallback = Callable[[EntityState | None, RemoteEvent], Any]


class ConnectionState(Enum):
    """Connection lifecycle states."""

    DISCONNECTED = "disconnected"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    SYNCING = "syncing"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


class HassSession:
    """Connection handle for one Home Assistant instance.

    Usage:
        session = HassSession("homeassistant.local:8123", token="...")
        await session.connect()
        await session.wait_ready()
        light = Light(session, "light.kitchen")
        await session.close()
    """

    def __init__(
        self,
        url: str,
        token: str,
        *,
        secure: bool = True,
        ping_interval: int | None = DEFAULT_PING_INTERVAL,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
        http_timeout: float = DEFAULT_HTTP_TIMEOUT,
        http_session: aiohttp.ClientSession | None = None,
        cache_follows_events: bool = False,
    ) -> None:
        """Initialize session.

        Args:
            url: Host and optional port of the instance, without scheme
            token: Long-lived access token
            secure: Use wss/https instead of ws/http
            ping_interval: Keepalive ping interval (seconds)
            timeout: WebSocket connect timeout (seconds)
            http_timeout: REST request timeout (seconds)
            http_session: aiohttp session for REST calls; created on demand
                and owned by this session when omitted
            cache_follows_events: Also replace the cached record on every
                state_changed event
        """
        self.url = url.rstrip("/")
        self.token = token
        self.secure = secure

        self._ping_interval = ping_interval
        self._timeout = timeout
        self._http_timeout = http_timeout
        self._cache_follows_events = cache_follows_events

        # Connection state
        self._ws: HassWsClient | None = None
        self._connection_state = ConnectionState.DISCONNECTED
        self._listen_task: asyncio.Task[None] | None = None
        self._authenticated = False
        self._shutdown_requested = False
        self._ready: asyncio.Future[None] | None = None
        self._failure: HassClientError | None = None

        # Protocol state
        self._correlator = MessageCorrelator()
        self._states = StateCache()
        self._subscription_id: int | None = None

        # Callbacks
        self._connected_callbacks: list[Callable[[], Any]] = []
        self._connected_fired = False
        self._connection_state_callback: Callable[[ConnectionState], None] | None = None
        self._state_change_listeners: dict[str, list[StateChangeCallback]] = {}

        # REST
        self._http_session = http_session
        self._managed_http_session = http_session is None
        self._history: HistoryAccessor | None = None

    # -------------------------------------------------------------------------
    # Public API: Connection Management
    # -------------------------------------------------------------------------

    @property
    def ws_url(self) -> str:
        scheme = "wss" if self.secure else "ws"
        return f"{scheme}://{self.url}{WEBSOCKET_PATH}"

    @property
    def base_url(self) -> str:
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.url}"

    async def connect(self) -> None:
        """Open the WebSocket and start the frame loop.

        The handshake continues in the background; use ``wait_ready`` to
        wait for the state cache to be warm.

        Raises:
            HassClientError: If the connection cannot be opened.
        """
        if self._shutdown_requested:
            raise HassConnectionError("Session has been closed")
        if self._ws is not None:
            raise HassConnectionError("Session is already connected")

        self._ready = asyncio.get_running_loop().create_future()
        _LOGGER.info("[%s] Connecting to %s", self.url, self.ws_url)

        ws_client = HassWsClient()
        try:
            await ws_client.connect(
                self.ws_url, ping_interval=self._ping_interval, timeout=self._timeout
            )
        except HassClientError as err:
            _LOGGER.error("[%s] Connection failed: %s", self.url, err)
            self._fail(err)
            raise

        self._ws = ws_client
        self._set_state(ConnectionState.UNAUTHENTICATED)
        self._listen_task = asyncio.create_task(self._listen())

    async def wait_ready(self, timeout: float | None = None) -> None:
        """Wait until the state cache is warm and events are subscribed.

        Raises:
            HassAuthError: If the token was rejected.
            HassConnectionError: If the connection was lost or never opened.
            HassTimeout: If ``timeout`` elapsed first.
        """
        if self._ready is None:
            raise HassConnectionError("Session is not connected")
        try:
            await asyncio.wait_for(asyncio.shield(self._ready), timeout)
        except TimeoutError as err:
            raise HassTimeout("Timed out waiting for the connection to be ready") from err

    async def close(self) -> None:
        """Tear down the transport.

        Requests still waiting for a result are abandoned and never fire.
        """
        _LOGGER.info("[%s] Closing session", self.url)
        self._shutdown_requested = True

        if self._listen_task is not None:
            self._listen_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._listen_task
            self._listen_task = None

        if self._ws is not None:
            try:
                await asyncio.wait_for(self._ws.close(), timeout=2.0)
            except TimeoutError:
                _LOGGER.warning("[%s] WebSocket close timed out", self.url)
            self._ws = None

        self._abandon_pending()
        self._authenticated = False
        if self._ready is not None and not self._ready.done():
            self._reject_ready(HassConnectionError("Session closed before ready"))

        if self._http_session is not None and self._managed_http_session:
            await self._http_session.close()
            self._http_session = None
            self._history = None

        self._set_state(ConnectionState.CLOSED)

    async def __aenter__(self) -> HassSession:
        await self.connect()
        try:
            await self.wait_ready()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def is_ready(self) -> bool:
        """True once the cache is warm and the event subscription is live."""
        return self._connection_state is ConnectionState.READY

    @property
    def has_connected(self) -> bool:
        """True once the connected signal has fired for this session."""
        return self._connected_fired

    @property
    def connection_state(self) -> ConnectionState:
        return self._connection_state

    @property
    def failure(self) -> HassClientError | None:
        """First error that failed the connection, if any."""
        return self._failure

    # -------------------------------------------------------------------------
    # Public API: Callbacks
    # -------------------------------------------------------------------------

    def on_connected(self, callback: Callable[[], Any]) -> None:
        """Register a callback fired once when the connection becomes ready.

        Callbacks registered after that point are not replayed.
        """
        if self._connected_fired:
            _LOGGER.debug(
                "[%s] Connected callback registered after ready; it will not fire",
                self.url,
            )
        self._connected_callbacks.append(callback)

    def on_connection_state_changed(
        self, callback: Callable[[ConnectionState], None]
    ) -> None:
        """Register callback for connection state changes."""
        self._connection_state_callback = callback

    def on_state_change(
        self, entity_id: str, callback: StateChangeCallback
    ) -> Callable[[], None]:
        """Register a delta listener for one entity.

        Callback receives ``(new_state, event)`` for every state_changed
        event of ``entity_id``.

        Returns:
            Function that removes the listener.
        """
        listeners = self._state_change_listeners.setdefault(entity_id, [])
        listeners.append(callback)

        def _remove() -> None:
            with contextlib.suppress(ValueError):
                listeners.remove(callback)

        return _remove

    # -------------------------------------------------------------------------
    # Public API: State
    # -------------------------------------------------------------------------

    @property
    def states(self) -> StateCache:
        return self._states

    def get_state(self, entity_id: str) -> EntityState | None:
        """Return the cached record of an entity.

        The cache holds the warm-up snapshot; it only follows later changes
        when the session was built with ``cache_follows_events=True``.
        """
        return self._states.get(entity_id)

    def entity_ids(self) -> list[str]:
        """All entity ids returned by the warm-up fetch."""
        return self._states.entity_ids()

    @property
    def history(self) -> HistoryAccessor:
        """History reads bound to this session's REST endpoint."""
        if self._history is None:
            http = HassHttpClient(
                self._get_http_session(),
                self.base_url,
                self.token,
                timeout=self._http_timeout,
            )
            self._history = HistoryAccessor(http)
        return self._history

    # -------------------------------------------------------------------------
    # Public API: Commands
    # -------------------------------------------------------------------------

    async def send_command(
        self,
        msg_type: str,
        *,
        on_result: ResultCallback | None = None,
        **fields: Any,
    ) -> int:
        """Send a command and return its id without waiting for the result.

        Args:
            msg_type: Command type
            on_result: Optional continuation fired with the CommandResult
            **fields: Additional command fields

        Raises:
            HassConnectionError: If not authenticated or the send fails.
        """
        return await self._send(
            msg_type,
            lambda msg_id: build_command(msg_type, msg_id, **fields),
            on_result,
        )

    async def request(
        self, msg_type: str, *, timeout: float | None = None, **fields: Any
    ) -> CommandResult:
        """Send a command and wait for its result.

        Raises:
            HassTimeout: If no result arrived within ``timeout``.
        """
        return await self._send_and_wait(
            msg_type,
            lambda msg_id: build_command(msg_type, msg_id, **fields),
            timeout,
        )

    async def call_service(
        self,
        domain: str,
        service: str,
        service_data: Mapping[str, Any] | None = None,
        entity_id: str | None = None,
    ) -> int:
        """Call a service without waiting for its result."""
        return await self._send(
            MSG_CALL_SERVICE,
            lambda msg_id: build_call_service(
                msg_id, domain, service, service_data, entity_id
            ),
        )

    async def call_service_and_wait(
        self,
        domain: str,
        service: str,
        service_data: Mapping[str, Any] | None = None,
        entity_id: str | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Call a service and return its result payload.

        Raises:
            HassCommandError: If the server reported failure.
            HassTimeout: If no result arrived within ``timeout``.
        """
        result = await self._send_and_wait(
            MSG_CALL_SERVICE,
            lambda msg_id: build_call_service(
                msg_id, domain, service, service_data, entity_id
            ),
            timeout,
        )
        result.raise_for_error()
        return result.result

    async def _send(
        self,
        msg_type: str,
        build: Callable[[int], dict[str, Any]],
        on_result: ResultCallback | None = None,
    ) -> int:
        """Assign an id, build the frame with it and send it."""
        if self._ws is None or not self._authenticated:
            raise HassConnectionError(f"Cannot send {msg_type}: not authenticated")

        msg_id = self._correlator.next_id()
        frame = build(msg_id)
        if on_result is not None:
            self._correlator.register(msg_id, on_result)
        try:
            await self._ws.send_json(frame)
        except HassClientError:
            self._correlator.discard(msg_id)
            raise
        _LOGGER.debug("[%s] Sent %s id=%d", self.url, msg_type, msg_id)
        return msg_id

    async def _send_and_wait(
        self,
        msg_type: str,
        build: Callable[[int], dict[str, Any]],
        timeout: float | None,
    ) -> CommandResult:
        future: asyncio.Future[CommandResult] = asyncio.get_running_loop().create_future()

        def _resolve(result: CommandResult) -> None:
            if not future.done():
                future.set_result(result)

        msg_id = await self._send(msg_type, build, _resolve)
        try:
            return await asyncio.wait_for(future, timeout)
        except TimeoutError as err:
            self._correlator.discard(msg_id)
            raise HassTimeout(
                f"No result for {msg_type} id={msg_id} within {timeout}s"
            ) from err
        except asyncio.CancelledError:
            self._correlator.discard(msg_id)
            raise

    # -------------------------------------------------------------------------
    # Internal: Connection State Machine
    # -------------------------------------------------------------------------

    def _set_state(self, state: ConnectionState) -> None:
        """Update connection state and notify callback."""
        if self._connection_state != state:
            _LOGGER.debug(
                "[%s] State: %s → %s",
                self.url,
                self._connection_state.value,
                state.value,
            )
            self._connection_state = state
            if self._connection_state_callback:
                run_callback(self._connection_state_callback, state)

    def _reject_ready(self, err: HassClientError) -> None:
        if self._ready is not None and not self._ready.done():
            self._ready.set_exception(err)
            # Mark retrieved; wait_ready callers still see the error.
            self._ready.exception()

    def _fail(self, err: HassClientError) -> None:
        """Record the first failure and move to FAILED."""
        if self._failure is None:
            self._failure = err
        self._reject_ready(err)
        self._set_state(ConnectionState.FAILED)

    def _abandon_pending(self) -> None:
        dropped = self._correlator.abandon()
        if dropped:
            _LOGGER.warning(
                "[%s] Abandoned %d requests without a result", self.url, dropped
            )

    def _handle_transport_loss(self, err: HassClientError) -> None:
        self._abandon_pending()
        self._authenticated = False
        self._fail(err)

    # -------------------------------------------------------------------------
    # Internal: Message Listener
    # -------------------------------------------------------------------------

    async def _listen(self) -> None:
        """Process frames in arrival order until the transport ends."""
        if self._ws is None:
            return

        ws = self._ws
        message_count = 0
        failure: HassClientError | None = None

        try:
            async for msg in ws:
                message_count += 1

                if msg.type == HassWsMessageType.TEXT:
                    try:
                        frame = ws.decode_json(msg)
                        await self._handle_message(frame)
                    except HassProtocolError as err:
                        _LOGGER.warning("[%s] Dropping frame: %s", self.url, err)

                elif msg.type == HassWsMessageType.CLOSED:
                    _LOGGER.info("[%s] WebSocket closed by server", self.url)
                    failure = HassConnectionError("WebSocket closed by server")
                    break

                elif msg.type == HassWsMessageType.ERROR:
                    _LOGGER.error("[%s] WebSocket error", self.url)
                    failure = HassConnectionError("WebSocket error")
                    break

        except asyncio.CancelledError:
            _LOGGER.debug(
                "[%s] Listener cancelled (%d messages)", self.url, message_count
            )
            raise
        except HassClientError as err:
            _LOGGER.warning("[%s] Client error: %s", self.url, err)
            failure = err
        except Exception as err:
            _LOGGER.exception("[%s] Unexpected error: %s", self.url, err)
            failure = HassConnectionError(f"Unexpected error: {err}")
        finally:
            if failure is not None and not self._shutdown_requested:
                self._handle_transport_loss(failure)

    async def _handle_message(self, frame: Any) -> None:
        """Route one decoded frame."""
        msg_type = classify(frame)

        if msg_type == MSG_AUTH_REQUIRED:
            await self._send_auth()
        elif msg_type == MSG_AUTH_OK:
            await self._handle_auth_ok(frame)
        elif msg_type == MSG_AUTH_INVALID:
            self._handle_auth_invalid(frame)
        elif msg_type in (MSG_RESULT, MSG_EVENT):
            await self._correlator.dispatch(frame)
        else:
            _LOGGER.debug("[%s] Unknown message type: %s", self.url, msg_type)

    # -------------------------------------------------------------------------
    # Internal: Protocol Handlers
    # -------------------------------------------------------------------------

    async def _send_auth(self) -> None:
        """Send credentials in reply to auth_required."""
        if self._ws is None:
            return

        self._set_state(ConnectionState.AUTHENTICATING)
        await self._ws.send_json(build_auth(self.token))
        _LOGGER.debug("[%s] Auth sent", self.url)

    async def _handle_auth_ok(self, frame: Mapping[str, Any]) -> None:
        """Authenticated: start the state warm-up."""
        self._authenticated = True
        self._set_state(ConnectionState.SYNCING)
        _LOGGER.info(
            "[%s] Authenticated (server %s)", self.url, frame.get("ha_version", "?")
        )
        await self.send_command(MSG_GET_STATES, on_result=self._on_states_result)

    def _handle_auth_invalid(self, frame: Mapping[str, Any]) -> None:
        message = frame.get("message") or "Invalid access token"
        _LOGGER.error("[%s] Authentication rejected: %s", self.url, message)
        self._authenticated = False
        self._fail(HassAuthError(str(message)))

    async def _on_states_result(self, result: CommandResult) -> None:
        """Warm the cache from get_states, then subscribe to events."""
        try:
            result.raise_for_error()
            count = self._states.replace_all(result.result or [])
        except HassClientError as err:
            _LOGGER.error("[%s] Initial state fetch failed: %s", self.url, err)
            self._fail(err)
            return

        _LOGGER.info("[%s] Fetched %d states", self.url, count)
        msg_id = await self.send_command(
            MSG_SUBSCRIBE_EVENTS, on_result=self._on_subscribed
        )
        self._subscription_id = msg_id
        self._correlator.subscribe(msg_id, self._on_event)

    def _on_subscribed(self, result: CommandResult) -> None:
        try:
            result.raise_for_error()
        except HassClientError as err:
            _LOGGER.error("[%s] Event subscription failed: %s", self.url, err)
            if self._subscription_id is not None:
                self._correlator.unsubscribe(self._subscription_id)
            self._fail(err)
            return

        _LOGGER.info("[%s] Subscribed to events (id=%d)", self.url, result.id)
        self._set_ready()

    def _set_ready(self) -> None:
        self._set_state(ConnectionState.READY)
        if self._ready is not None and not self._ready.done():
            self._ready.set_result(None)
        if self._connected_fired:
            return
        self._connected_fired = True
        _LOGGER.debug("[%s] Connected to Home Assistant", self.url)
        for callback in list(self._connected_callbacks):
            run_callback(callback)

    def _on_event(self, event: RemoteEvent) -> None:
        """Dispatch a subscribed event to per-entity delta listeners."""
        if event.event_type != EVENT_STATE_CHANGED:
            return

        try:
            data = StateChangedData.from_event(event)
        except HassProtocolError as err:
            _LOGGER.warning("[%s] Dropping state_changed event: %s", self.url, err)
            return
        if self._cache_follows_events and data.new_state is not None:
            self._states.apply(data.new_state)

        listeners = self._state_change_listeners.get(data.entity_id)
        if not listeners:
            return
        for callback in list(listeners):
            run_callback(callback, data.new_state, event)

    def _get_http_session(self) -> aiohttp.ClientSession:
        if self._http_session is None or self._http_session.closed:
            _LOGGER.debug("[%s] Creating aiohttp ClientSession", self.url)
            self._http_session = aiohttp.ClientSession()
            self._managed_http_session = True
        return self._http_session


async def initialize(
    url: str,
    token: str,
    *,
    ready_timeout: float | None = None,
    **kwargs: Any,
) -> HassSession:
    """Connect and return a session once its state cache is warm.

    Args:
        url: Host and optional port of the instance, without scheme
        token: Long-lived access token
        ready_timeout: Optional bound on the whole handshake (seconds)
        **kwargs: Passed through to HassSession

    Raises:
        HassClientError: If connecting or authenticating failed.
    """
    session = HassSession(url, token, **kwargs)
    try:
        await session.connect()
        await session.wait_ready(ready_timeout)
    except BaseException:
        await session.close()
        raise
    return session
