"""Problems met while evaluating rules; reported, never raised."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Set, Tuple


@dataclass(frozen=True)
class Diagnostic:
    rule_id: Optional[str]
    rule_name: str
    date: str
    reason: str


class DiagnosticLog:
    """Collects diagnostics for one pass and prints each distinct one once."""

    def __init__(self, echo: bool = True):
        self.echo = echo
        self.entries: List[Diagnostic] = []
        self._reported: Set[Tuple[Optional[str], str]] = set()

    def add(self, diagnostic: Diagnostic) -> None:
        self.entries.append(diagnostic)
        key = (diagnostic.rule_id, diagnostic.reason)
        if key in self._reported:
            return
        self._reported.add(key)
        if self.echo:
            print(f"[WARN] Rule '{diagnostic.rule_name}': {diagnostic.reason}")

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
