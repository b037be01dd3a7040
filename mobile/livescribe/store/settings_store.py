"""Persistent settings storage for the service endpoint and input device."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path

from ..config import CONFIG

log = logging.getLogger(__name__)


@dataclass(slots=True)
class AppSettings:
    endpoint: str = CONFIG.default_endpoint
    input_device: str = ""


class SettingsStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._settings = self._load()

    def _load(self) -> AppSettings:
        settings = AppSettings()
        if not self.path.exists():
            return settings
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return settings
        if not isinstance(raw, dict):
            return settings
        settings.endpoint = str(raw.get("endpoint") or settings.endpoint)
        settings.input_device = str(raw.get("input_device") or "")
        return settings

    def get(self) -> AppSettings:
        return self._settings

    def update(self, **kwargs) -> AppSettings:
        for key, value in kwargs.items():
            if not hasattr(self._settings, key):
                continue
            setattr(self._settings, key, str(value or "").strip())
        self._persist()
        return self._settings

    def input_device(self) -> int | str | None:
        """Device selector for sounddevice: index, name substring, or default."""
        value = self._settings.input_device
        if not value:
            return None
        return int(value) if value.isdigit() else value

    def _persist(self) -> None:
        self.path.write_text(json.dumps(asdict(self._settings)), encoding="utf-8")


__all__ = ["AppSettings", "SettingsStore"]
