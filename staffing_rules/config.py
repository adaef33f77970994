"""Engine configuration loaded from YAML (or JSON)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from datetime import date
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from staffing_rules.domain.db import DEFAULT_DB_URL
from staffing_rules.domain.roster import CalendarContext


@dataclass
class CalendarConfig:
    start_date: Optional[date] = None  # None: Monday of the current week
    interval_days: int = 42


@dataclass
class CacheConfig:
    freshness_seconds: float = 1.0
    max_entries: int = 10


@dataclass
class StorageConfig:
    db_url: str = DEFAULT_DB_URL
    local_rules_path: str = "rules.json"


@dataclass
class EngineConfig:
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    def calendar_context(self, today: Optional[date] = None) -> CalendarContext:
        if self.calendar.start_date is not None:
            return CalendarContext(self.calendar.start_date, self.calendar.interval_days)
        return CalendarContext.current_week(self.calendar.interval_days, today=today)


def _section(cls, data: Any, name: str):
    if data is None:
        return cls()
    if not isinstance(data, Mapping):
        raise ValueError(f"Config section '{name}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown keys in config section '{name}': {sorted(unknown)}")
    return cls(**data)


def config_from_dict(data: Mapping[str, Any]) -> EngineConfig:
    """Build an EngineConfig; missing keys keep their defaults."""
    unknown = set(data) - {"calendar", "cache", "storage"}
    if unknown:
        raise ValueError(f"Unknown config sections: {sorted(unknown)}")

    calendar = _section(CalendarConfig, data.get("calendar"), "calendar")
    if isinstance(calendar.start_date, str):
        calendar.start_date = date.fromisoformat(calendar.start_date)
    calendar.interval_days = int(calendar.interval_days)
    if calendar.interval_days <= 0:
        raise ValueError("calendar.interval_days must be positive")

    cache = _section(CacheConfig, data.get("cache"), "cache")
    cache.freshness_seconds = float(cache.freshness_seconds)
    cache.max_entries = int(cache.max_entries)

    return EngineConfig(
        calendar=calendar,
        cache=cache,
        storage=_section(StorageConfig, data.get("storage"), "storage"),
    )


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load config from a .yaml/.yml or .json file; defaults when ``path`` is None."""
    if path is None:
        return EngineConfig()
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data: Dict[str, Any] = json.loads(text) or {}
    else:
        data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Config file {path} must contain a mapping")
    return config_from_dict(data)
