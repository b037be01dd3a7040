"""Static client configuration with environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class AppConfig:
    # Fixed wire encoding: raw PCM, signed 16-bit little-endian, mono.
    sample_rate: int = field(default_factory=lambda: _env_int("LIVESCRIBE_SAMPLE_RATE", 16000))
    channels: int = 1
    sample_format: str = "int16"
    content_type: str = "audio/L16"
    chunk_ms: int = field(default_factory=lambda: _env_int("LIVESCRIBE_CHUNK_MS", 250))
    default_endpoint: str = field(
        default_factory=lambda: os.getenv("LIVESCRIBE_ENDPOINT", "ws://127.0.0.1:3000/audio")
    )
    settings_file: str = "settings.json"
    log_history: int = 200
    connect_timeout: float = 10.0

    @property
    def bytes_per_second(self) -> int:
        return self.sample_rate * self.channels * 2

    @property
    def frames_per_chunk(self) -> int:
        return max(1, int(self.sample_rate * self.chunk_ms / 1000))


CONFIG = AppConfig()

__all__ = ["AppConfig", "CONFIG"]
