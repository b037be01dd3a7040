"""Per-session chunk buffer."""

from __future__ import annotations

from typing import List

from .types import AudioChunk, AudioPayload


class ChunkAssembler:
    """Collects chunks in delivery order and joins them on ``finish``.

    Ordering is the caller's responsibility; chunks are kept exactly as
    appended.
    """

    def __init__(self) -> None:
        self._chunks: List[bytes] = []

    def append(self, chunk: AudioChunk | bytes) -> None:
        data = chunk.data if isinstance(chunk, AudioChunk) else bytes(chunk)
        self._chunks.append(data)

    def finish(self) -> AudioPayload:
        chunks, self._chunks = self._chunks, []
        return AudioPayload(data=b"".join(chunks), chunk_count=len(chunks))

    @property
    def byte_count(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)


__all__ = ["ChunkAssembler"]
