"""Recording lifecycle: capture -> assemble -> send -> transcript."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import partial
from typing import Callable, List, Optional

from ..audio.assembler import ChunkAssembler
from ..audio.capture import AudioCapture, DeviceUnavailable
from ..audio.types import AudioChunk
from ..store.transcript_log import TranscriptLog
from .logger import LogBuffer
from .stream import StreamEvent, TextReceived, TranscriptStream

log = logging.getLogger(__name__)

CaptureFactory = Callable[[Callable[[AudioChunk], None], Callable[[], None]], AudioCapture]


class SessionState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"


@dataclass(slots=True)
class RecordingSession:
    """One start-to-stop cycle; its chunks live in its own assembler."""

    started_at: datetime
    state: SessionState = SessionState.RECORDING
    chunks: ChunkAssembler = field(default_factory=ChunkAssembler)
    capture: Optional[AudioCapture] = None


class SessionController:
    """Two-state machine (IDLE/RECORDING) wiring capture, assembler and stream.

    ``stop_recording`` returns to IDLE at once. The payload is assembled and
    sent later, from the capture's completion callback, so chunks that were
    already in flight when stop was pressed still belong to the session.
    Device and transport errors are not translated here: ``DeviceUnavailable``
    propagates out of ``start_recording`` and connection problems stay on the
    stream's own listeners.
    """

    def __init__(
        self,
        stream: TranscriptStream,
        transcript: TranscriptLog,
        logger: LogBuffer,
        capture_factory: CaptureFactory,
    ) -> None:
        self.stream = stream
        self.transcript = transcript
        self.logger = logger
        self.capture_factory = capture_factory
        self.state = SessionState.IDLE
        self.session: Optional[RecordingSession] = None
        self._listeners: List[Callable[[SessionState], None]] = []
        self._device_free = asyncio.Event()
        self._device_free.set()
        stream.subscribe(self._on_stream_event)

    @property
    def is_recording(self) -> bool:
        return self.state is SessionState.RECORDING

    def subscribe(self, listener: Callable[[SessionState], None]) -> None:
        self._listeners.append(listener)

    async def start_recording(self) -> bool:
        if self.is_recording:
            log.debug("Start ignored: already recording")
            return False
        session = RecordingSession(started_at=datetime.now(timezone.utc))
        self.session = session
        self._set_state(SessionState.RECORDING)
        # The previous session holds the device until its completion releases it.
        await self._device_free.wait()
        if session.state is not SessionState.RECORDING:
            self.logger.add("Recording cancelled before capture began")
            return False
        capture = self.capture_factory(
            partial(self._on_chunk, session),
            partial(self._on_capture_complete, session),
        )
        session.capture = capture
        self._device_free.clear()
        try:
            await capture.open()
            if session.state is SessionState.RECORDING:
                capture.begin()
        except DeviceUnavailable as exc:
            self.logger.add(f"Microphone unavailable: {exc}", level=logging.WARNING)
            session.state = SessionState.IDLE
            self._release(session)
            if self.session is session:
                self.session = None
                self._set_state(SessionState.IDLE)
            raise
        if session.state is not SessionState.RECORDING:
            # Stopped while the device was still opening; nothing was captured.
            self._release(session)
            self.logger.add("Recording cancelled before capture began")
            return False
        self.logger.add("Recording started")
        return True

    def stop_recording(self) -> bool:
        session = self.session
        if not self.is_recording or session is None:
            log.debug("Stop ignored: not recording")
            return False
        session.state = SessionState.IDLE
        self.session = None
        self._set_state(SessionState.IDLE)
        capture = session.capture
        if capture is not None and capture.is_active:
            capture.end()
            self.logger.add("Recording stopped")
        return True

    def _on_chunk(self, session: RecordingSession, chunk: AudioChunk) -> None:
        session.chunks.append(chunk)

    def _on_capture_complete(self, session: RecordingSession) -> None:
        payload = session.chunks.finish()
        self._release(session)
        self.logger.add(
            f"Session captured {payload.chunk_count} chunk(s), "
            f"{len(payload)} bytes ({payload.duration_seconds:.1f}s)"
        )
        if self.stream.send(payload):
            self.logger.add(f"Sent {len(payload)} bytes for transcription")

    def _release(self, session: RecordingSession) -> None:
        capture, session.capture = session.capture, None
        if capture is not None:
            capture.release()
        self._device_free.set()

    def _on_stream_event(self, event: StreamEvent) -> None:
        if isinstance(event, TextReceived):
            self.transcript.append(event.text)

    def _set_state(self, state: SessionState) -> None:
        if state is self.state:
            return
        self.state = state
        for listener in list(self._listeners):
            listener(state)


__all__ = ["CaptureFactory", "RecordingSession", "SessionController", "SessionState"]
