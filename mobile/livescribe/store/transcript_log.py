"""Append-only, in-memory transcript for the current run."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Tuple


@dataclass(frozen=True, slots=True)
class TranscriptEntry:
    index: int
    text: str
    received_at: datetime


class TranscriptLog:
    """Ordered fragments as received from the service.

    Entries are only ever appended; there is no removal or edit path.
    Accessed from the event loop only.
    """

    def __init__(self) -> None:
        self._entries: List[TranscriptEntry] = []
        self._listeners: List[Callable[[TranscriptEntry], None]] = []

    def append(self, text: str) -> TranscriptEntry:
        entry = TranscriptEntry(
            index=len(self._entries),
            text=text,
            received_at=datetime.now(timezone.utc),
        )
        self._entries.append(entry)
        for listener in list(self._listeners):
            listener(entry)
        return entry

    def entries(self) -> Tuple[TranscriptEntry, ...]:
        return tuple(self._entries)

    def texts(self) -> List[str]:
        return [entry.text for entry in self._entries]

    def text(self, separator: str = "\n") -> str:
        return separator.join(self.texts())

    def subscribe(self, listener: Callable[[TranscriptEntry], None]) -> None:
        self._listeners.append(listener)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self.entries())


__all__ = ["TranscriptEntry", "TranscriptLog"]
