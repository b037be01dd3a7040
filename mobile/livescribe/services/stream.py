"""Persistent WebSocket link to the remote transcription service."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Union
from urllib.parse import urlsplit

import websockets
from websockets.exceptions import ConnectionClosed as SocketClosed
from websockets.exceptions import ConnectionClosedError, WebSocketException

from ..audio.types import AudioPayload
from ..config import CONFIG
from .logger import LogBuffer

log = logging.getLogger(__name__)

ABNORMAL_CLOSURE = 1006
NORMAL_CLOSURE = 1000


class ConnectionFailed(Exception):
    """Transport failed to establish or dropped."""


class InvalidEndpoint(ValueError):
    pass


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ConnectionOpened:
    endpoint: str


@dataclass(frozen=True, slots=True)
class TextReceived:
    endpoint: str
    text: str


@dataclass(frozen=True, slots=True)
class ConnectionClosed:
    endpoint: str
    code: int
    reason: str


@dataclass(frozen=True, slots=True)
class StreamError:
    endpoint: str
    error: ConnectionFailed


StreamEvent = Union[ConnectionOpened, TextReceived, ConnectionClosed, StreamError]
Listener = Callable[[StreamEvent], None]


def validate_endpoint(endpoint: str) -> str:
    """Return the trimmed endpoint or raise ``InvalidEndpoint``."""
    value = (endpoint or "").strip()
    try:
        parts = urlsplit(value)
    except ValueError as exc:
        raise InvalidEndpoint(f"Malformed address: {value!r}") from exc
    if parts.scheme not in {"ws", "wss"}:
        raise InvalidEndpoint(f"Address must start with ws:// or wss://: {value!r}")
    if not parts.hostname:
        raise InvalidEndpoint(f"Address has no host: {value!r}")
    return value


class TranscriptStream:
    """Owns one connection at a time and reports its lifecycle to listeners.

    Events from a connection that has been replaced or closed are never
    delivered: each connection attempt carries a token and every emission
    checks it against the current one.
    """

    def __init__(
        self,
        logger: LogBuffer,
        *,
        connector: Callable[[str], Any] | None = None,
        connect_timeout: float = CONFIG.connect_timeout,
    ) -> None:
        self.logger = logger
        self.connect_timeout = connect_timeout
        self._connector = connector or websockets.connect
        self._listeners: List[Listener] = []
        self.state = ConnectionState.CLOSED
        self.endpoint: Optional[str] = None
        self._token: Optional[object] = None
        self._ws: Any = None
        self._task: Optional[asyncio.Task] = None
        self._sends: set[asyncio.Task] = set()
        self._closing: set[asyncio.Task] = set()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    def connect(self, endpoint: str) -> None:
        """Replace the current connection with one to ``endpoint``.

        Returns immediately; the outcome arrives as ``ConnectionOpened`` or
        ``StreamError`` followed by ``ConnectionClosed``.
        """
        endpoint = validate_endpoint(endpoint)
        loop = asyncio.get_running_loop()
        self._teardown("endpoint changed")
        token = object()
        self._token = token
        self.endpoint = endpoint
        self.state = ConnectionState.CONNECTING
        self.logger.add(f"Connecting to {endpoint}")
        self._task = loop.create_task(self._run(endpoint, token))

    def ensure_connected(self, endpoint: str) -> bool:
        """Connect to ``endpoint`` unless that link is already open or opening.

        Returns True when a new connection was started.
        """
        endpoint = validate_endpoint(endpoint)
        if endpoint == self.endpoint and self.state in (ConnectionState.OPEN, ConnectionState.CONNECTING):
            log.debug("Endpoint unchanged, keeping connection to %s", endpoint)
            return False
        self.connect(endpoint)
        return True

    def send(self, payload: AudioPayload | bytes) -> bool:
        """Transmit one binary message; a silent no-op unless the link is open."""
        data = payload.data if isinstance(payload, AudioPayload) else bytes(payload)
        if self.state is not ConnectionState.OPEN or self._ws is None:
            log.debug("Send dropped (%d bytes): connection %s", len(data), self.state.value)
            return False
        task = asyncio.get_running_loop().create_task(self._transmit(self._ws, data))
        self._sends.add(task)
        task.add_done_callback(self._sends.discard)
        return True

    def close(self) -> None:
        self._teardown("closed by client")

    async def shutdown(self) -> None:
        """Close and wait for the socket to finish its closing handshake."""
        self.close()
        if self._closing:
            await asyncio.gather(*self._closing, return_exceptions=True)

    async def _run(self, endpoint: str, token: object) -> None:
        try:
            ws = await asyncio.wait_for(self._connector(endpoint), timeout=self.connect_timeout)
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            if token is self._token:
                self._fail(endpoint, exc)
                self._finish(endpoint, ABNORMAL_CLOSURE, "")
            return
        if token is not self._token:
            await ws.close()
            return
        self._ws = ws
        self.state = ConnectionState.OPEN
        self.logger.add(f"Connected to {endpoint}")
        self._emit(ConnectionOpened(endpoint))

        error: Optional[Exception] = None
        try:
            async for message in ws:
                if token is not self._token:
                    return
                if not isinstance(message, str):
                    log.debug("Ignoring %d-byte binary message", len(message))
                    continue
                self._emit(TextReceived(endpoint, message))
        except ConnectionClosedError as exc:
            error = exc
        if token is not self._token:
            return
        self._ws = None
        if error is not None:
            self._fail(endpoint, error)
        code = getattr(ws, "close_code", None)
        reason = getattr(ws, "close_reason", None) or ""
        self._finish(endpoint, ABNORMAL_CLOSURE if code is None else int(code), reason)

    async def _transmit(self, ws: Any, data: bytes) -> None:
        try:
            await ws.send(data)
        except SocketClosed as exc:
            log.debug("Send abandoned, connection closed: %s", exc)
        else:
            log.debug("Sent %d bytes", len(data))

    def _teardown(self, reason: str) -> None:
        previous = self.state
        endpoint = self.endpoint
        ws, self._ws = self._ws, None
        task, self._task = self._task, None
        self._token = None
        if task is not None and not task.done():
            task.cancel()
        # In-flight sends are abandoned, not flushed.
        for pending in list(self._sends):
            pending.cancel()
        if ws is not None:
            closing = asyncio.get_running_loop().create_task(ws.close())
            self._closing.add(closing)
            closing.add_done_callback(self._closing.discard)
        if previous in (ConnectionState.CONNECTING, ConnectionState.OPEN):
            self.state = ConnectionState.CLOSED
            self.logger.add(f"Disconnected from {endpoint} ({reason})")
            self._emit(ConnectionClosed(endpoint or "", NORMAL_CLOSURE, reason))

    def _fail(self, endpoint: str, exc: BaseException) -> None:
        self.state = ConnectionState.FAILED
        error = ConnectionFailed(f"{endpoint}: {str(exc) or type(exc).__name__}")
        error.__cause__ = exc
        self.logger.add(f"Connection error: {error}", level=logging.WARNING)
        self._emit(StreamError(endpoint, error))

    def _finish(self, endpoint: str, code: int, reason: str) -> None:
        # A failed link stays FAILED; the close notification still follows.
        if self.state is not ConnectionState.FAILED:
            self.state = ConnectionState.CLOSED
        self.logger.add(f"Connection closed ({code}{': ' + reason if reason else ''})")
        self._emit(ConnectionClosed(endpoint, code, reason))

    def _emit(self, event: StreamEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # pragma: no cover
                log.exception("Stream listener failed on %s", type(event).__name__)


__all__ = [
    "ConnectionClosed",
    "ConnectionFailed",
    "ConnectionOpened",
    "ConnectionState",
    "InvalidEndpoint",
    "StreamError",
    "StreamEvent",
    "TextReceived",
    "TranscriptStream",
    "validate_endpoint",
]
