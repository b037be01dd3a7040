"""In-app activity log mirrored to the standard logging module."""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import List

_log = logging.getLogger("livescribe")


class LogBuffer:
    """Bounded list of timestamped lines rendered by the activity log card."""

    def __init__(self, max_lines: int = 200) -> None:
        self._lines: deque[str] = deque(maxlen=max(1, max_lines))

    def add(self, message: str, *, level: int = logging.INFO) -> None:
        stamp = datetime.now().strftime("%H:%M:%S")
        self._lines.append(f"[{stamp}] {message}")
        _log.log(level, message)

    def get(self) -> List[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


__all__ = ["LogBuffer"]
