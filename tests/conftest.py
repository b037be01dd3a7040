"""Pytest configuration helpers."""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

import pytest


def _ensure_repo_on_path() -> None:
    """Allow tests to import from repo modules without setting PYTHONPATH."""
    repo_root = Path(__file__).resolve().parents[1]
    path_str = str(repo_root)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)


_ensure_repo_on_path()
# Kivy parses sys.argv on import unless told otherwise.
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")

from mobile.livescribe.services.logger import LogBuffer  # noqa: E402


async def settle(rounds: int = 20) -> None:
    """Let queued callbacks and freshly created tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeRawInputStream:
    def __init__(self, *, start_error: Exception | None = None, **kwargs) -> None:
        self.kwargs = kwargs
        self.start_error = start_error
        self.callback = kwargs["callback"]
        self.started = False
        self.stopped = False
        self.closed = False

    def start(self) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def close(self) -> None:
        self.closed = True

    def push(self, data: bytes) -> None:
        """Simulate one PortAudio callback."""
        self.callback(data, len(data) // 2, None, None)


class FakeSoundDevice:
    """Stands in for the ``sounddevice`` module."""

    class PortAudioError(Exception):
        pass

    def __init__(self, *, has_input: bool = True, refuse: bool = False, fail_start: bool = False) -> None:
        self.has_input = has_input
        self.refuse = refuse
        self.fail_start = fail_start
        self.streams: list[FakeRawInputStream] = []

    def query_devices(self, device=None, kind=None):  # noqa: ARG002
        if not self.has_input:
            raise ValueError("No input device matching None")
        return {"name": "Fake Mic", "max_input_channels": 1}

    def RawInputStream(self, **kwargs):  # noqa: N802
        if self.refuse:
            raise self.PortAudioError("Error opening RawInputStream: permission denied")
        start_error = self.PortAudioError("Error starting stream: device unplugged") if self.fail_start else None
        stream = FakeRawInputStream(start_error=start_error, **kwargs)
        self.streams.append(stream)
        return stream


class FakeWebSocket:
    """Minimal websockets connection: async iteration, send, close."""

    _END = object()

    def __init__(self, endpoint: str) -> None:
        self.endpoint = endpoint
        self.sent: list[bytes] = []
        self.closed = False
        self.close_code: int | None = None
        self.close_reason = ""
        self._inbox: asyncio.Queue = asyncio.Queue()

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._inbox.get()
        if item is self._END:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    async def send(self, data: bytes) -> None:
        self.sent.append(data)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.close_code = self.close_code or 1000
        self._inbox.put_nowait(self._END)

    def feed(self, message) -> None:
        self._inbox.put_nowait(message)

    def remote_close(self, code: int = 1000, reason: str = "") -> None:
        self.close_code = code
        self.close_reason = reason
        self.closed = True
        self._inbox.put_nowait(self._END)

    def drop(self) -> None:
        from websockets.exceptions import ConnectionClosedError

        self.closed = True
        self._inbox.put_nowait(ConnectionClosedError(None, None))


class FakeConnector:
    def __init__(self, refuse: set[str] | None = None) -> None:
        self.refuse = refuse or set()
        self.calls: list[str] = []
        self.sockets: list[FakeWebSocket] = []

    async def __call__(self, endpoint: str) -> FakeWebSocket:
        self.calls.append(endpoint)
        if endpoint in self.refuse:
            raise ConnectionRefusedError(111, "Connect call failed")
        ws = FakeWebSocket(endpoint)
        self.sockets.append(ws)
        return ws


@pytest.fixture()
def logger() -> LogBuffer:
    return LogBuffer(50)


@pytest.fixture()
def fake_sd() -> FakeSoundDevice:
    return FakeSoundDevice()


@pytest.fixture()
def connector() -> FakeConnector:
    return FakeConnector()
