"""Microphone capture producing ordered PCM chunks on the event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

import numpy as np

from ..config import CONFIG
from ..services.logger import LogBuffer
from .types import AudioChunk

log = logging.getLogger(__name__)


class DeviceUnavailable(Exception):
    """Microphone access refused or no input device present."""


class AudioCapture:
    """Wraps a sounddevice input stream for one recording session.

    PortAudio invokes the stream callback on its own thread; every chunk is
    handed back to the owning event loop with ``call_soon_threadsafe`` so
    observers only ever run on that loop, one chunk at a time, in capture
    order. ``end`` queues the completion signal behind any chunk already in
    flight, which makes "completion fired" equivalent to "all chunks
    delivered".
    """

    def __init__(
        self,
        on_chunk: Callable[[AudioChunk], None],
        on_complete: Callable[[], None],
        logger: LogBuffer,
        *,
        device: int | str | None = None,
        level_callback: Callable[[float], None] | None = None,
        backend: Any = None,
    ) -> None:
        self.on_chunk = on_chunk
        self.on_complete = on_complete
        self.logger = logger
        self.device = device
        self.level_callback = level_callback
        self.sample_rate = CONFIG.sample_rate
        self.channels = CONFIG.channels
        self.blocksize = CONFIG.frames_per_chunk
        self._sd = backend if backend is not None else self._try_import_sounddevice()
        self._stream: Any = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._sequence = 0
        self._active = False
        self._completed = False

    def _try_import_sounddevice(self):
        try:
            import sounddevice as sd  # type: ignore

            return sd
        except (ImportError, OSError) as exc:
            log.warning("sounddevice unavailable: %s", exc)
            return None

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    @property
    def is_active(self) -> bool:
        return self._active

    async def open(self) -> None:
        if self._stream is not None:
            return
        sd = self._sd
        if sd is None:
            raise DeviceUnavailable("Audio backend (PortAudio) not available")
        self._loop = asyncio.get_running_loop()
        try:
            self._stream = await asyncio.to_thread(self._open_stream, sd)
        except (sd.PortAudioError, ValueError) as exc:
            raise DeviceUnavailable(str(exc)) from exc
        self.logger.add("Microphone opened")

    def _open_stream(self, sd: Any) -> Any:
        info = sd.query_devices(self.device, kind="input")
        if not info or int(info.get("max_input_channels", 0)) < self.channels:
            raise DeviceUnavailable("No input device available")
        return sd.RawInputStream(
            samplerate=self.sample_rate,
            blocksize=self.blocksize,
            channels=self.channels,
            dtype=CONFIG.sample_format,
            device=self.device,
            callback=self._callback,
        )

    def begin(self) -> None:
        if self._stream is None or self._loop is None:
            raise DeviceUnavailable("Microphone not opened")
        if self._active:
            return
        self._sequence = 0
        self._completed = False
        try:
            self._stream.start()
        except self._sd.PortAudioError as exc:
            raise DeviceUnavailable(str(exc)) from exc
        self._active = True

    def end(self) -> None:
        if not self._active:
            return
        self._active = False
        # Blocks the loop for at most one buffer: Pa_StopStream returns only
        # after the last callback has queued its chunk ahead of completion.
        self._stream.stop()
        self._loop.call_soon_threadsafe(self._complete)  # type: ignore[union-attr]

    def release(self) -> None:
        stream, self._stream = self._stream, None
        self._active = False
        if stream is None:
            return
        try:
            stream.close()
        except self._sd.PortAudioError as exc:
            log.warning("Closing input stream failed: %s", exc)
        self.logger.add("Microphone released")

    def _callback(self, indata, frames, time_info, status) -> None:  # noqa: ARG002
        # PortAudio thread: copy the buffer and hop onto the event loop.
        data = bytes(indata)
        if status:
            log.debug("Input stream status: %s", status)
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._deliver, data)

    def _deliver(self, data: bytes) -> None:
        if self._completed:
            log.debug("Chunk arrived after completion; dropped")
            return
        chunk = AudioChunk(data=data, sequence=self._sequence)
        self._sequence += 1
        self._report_level(data)
        self.on_chunk(chunk)

    def _complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        self.on_complete()

    def _report_level(self, data: bytes) -> None:
        if not self.level_callback:
            return
        pcm = np.frombuffer(data[: len(data) - (len(data) % 2)], dtype=np.int16)
        level = float(np.max(np.abs(pcm.astype(np.int32)))) / 32768.0 if pcm.size else 0.0
        self.level_callback(max(0.0, min(1.0, level)))


__all__ = ["AudioCapture", "DeviceUnavailable"]
