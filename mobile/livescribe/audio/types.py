"""Dataclasses shared across audio helpers."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import CONFIG


@dataclass(slots=True)
class AudioChunk:
    """One slice of captured PCM, identified only by its position in the session."""

    data: bytes
    sequence: int

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class AudioPayload:
    """Concatenated chunks of a finished session, sent as a single message."""

    data: bytes
    chunk_count: int = 0
    content_type: str = CONFIG.content_type

    def __len__(self) -> int:
        return len(self.data)

    @property
    def duration_seconds(self) -> float:
        return len(self.data) / CONFIG.bytes_per_second
