# src/runner/settings.py
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional, Protocol
from .config import AVATAR_PROFILES, CITY_COUNT

logger = logging.getLogger(__name__)


@dataclass
class RunSettings:
    """Player choices carried from one run to the next."""
    start_level: int = 1
    avatar_index: int = 0
    city_index: int = 0
    best_score: int = 0

    def validate(self) -> "RunSettings":
        if not isinstance(self.start_level, int) or self.start_level < 1:
            raise ValueError(f"start_level must be >= 1, got {self.start_level!r}")
        if not 0 <= self.avatar_index < len(AVATAR_PROFILES):
            raise ValueError(f"avatar_index out of range: {self.avatar_index!r}")
        if not 0 <= self.city_index < CITY_COUNT:
            raise ValueError(f"city_index out of range: {self.city_index!r}")
        if self.best_score < 0:
            raise ValueError(f"best_score must be >= 0, got {self.best_score!r}")
        return self


class SettingsStore(Protocol):
    def load(self) -> RunSettings: ...

    def save(self, settings: RunSettings) -> None: ...


class MemorySettingsStore:
    def __init__(self, settings: Optional[RunSettings] = None):
        self._settings = settings or RunSettings()

    def load(self) -> RunSettings:
        return RunSettings(**asdict(self._settings))

    def save(self, settings: RunSettings) -> None:
        self._settings = RunSettings(**asdict(settings.validate()))


class JsonSettingsStore:
    """Settings in a small JSON file. Unreadable files fall back to defaults."""
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> RunSettings:
        if not self.path.exists():
            return RunSettings()
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
            known = {f.name for f in fields(RunSettings)}
            return RunSettings(**{k: v for k, v in raw.items() if k in known}).validate()
        except (OSError, json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
            logger.warning("Ignoring settings file %s: %s", self.path, e)
            return RunSettings()

    def save(self, settings: RunSettings) -> None:
        settings.validate()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(asdict(settings), f, indent=2)
