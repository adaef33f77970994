"""Short-lived memo of evaluation results."""

from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional, Tuple

from staffing_rules.domain.rules import Violation

CacheKey = Tuple[str, int, int]


class EvaluationCache:
    """Results keyed by (interval start, interval length, rule-store version).

    An entry is served only while younger than ``freshness_seconds``. The
    whole cache is dropped when it grows past ``max_entries`` or when nothing
    has been stored for twice the freshness window.
    """

    def __init__(self, freshness_seconds: float = 1.0, max_entries: int = 10,
                 clock: Callable[[], float] = time.monotonic):
        self.freshness_seconds = freshness_seconds
        self.max_entries = max_entries
        self.clock = clock
        self._entries: Dict[CacheKey, Tuple[float, List[Violation]]] = {}
        self._last_store: Optional[float] = None

    @staticmethod
    def make_key(start_iso: str, days: int, version: int) -> CacheKey:
        return (start_iso, int(days), int(version))

    def get(self, key: CacheKey) -> Optional[List[Violation]]:
        now = self.clock()
        self._expire(now)
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, violations = entry
        if now - stored_at >= self.freshness_seconds:
            return None
        return list(violations)

    def put(self, key: CacheKey, violations: List[Violation]) -> None:
        now = self.clock()
        self._entries[key] = (now, list(violations))
        self._last_store = now

    def clear(self) -> None:
        self._entries.clear()
        self._last_store = None

    def _expire(self, now: float) -> None:
        if len(self._entries) > self.max_entries:
            self.clear()
        elif self._last_store is not None and now - self._last_store > 2 * self.freshness_seconds:
            self.clear()

    def __len__(self) -> int:
        return len(self._entries)
