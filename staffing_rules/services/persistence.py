"""Best-effort rule persistence: database first, local JSON file as backup."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from staffing_rules.domain.db import session_scope
from staffing_rules.domain.repositories import RuleRepository
from staffing_rules.domain.rules import Rule


class RulePersistence:
    """Saves and loads rule documents. Failures are reported, never raised."""

    def __init__(self, session_factory: Optional[sessionmaker] = None, local_path: str | Path = "rules.json"):
        self.session_factory = session_factory
        self.local_path = Path(local_path)

    def save(self, rules: List[Rule]) -> None:
        payloads = [rule.to_dict() for rule in rules]
        self._write_local(payloads)

        if self.session_factory is None:
            return
        try:
            with session_scope(self.session_factory) as session:
                count = RuleRepository.replace_all(session, payloads)
            print(f"[OK] Saved {count} rules to database")
        except SQLAlchemyError as e:
            print(f"[WARN] Failed to save rules to database: {e}")

    def load(self) -> List[Rule]:
        payloads = self._read_database()
        if payloads:
            print(f"[OK] Loaded {len(payloads)} rules from database")
            self._write_local(payloads)
        else:
            payloads = self._read_local()
            if payloads:
                print(f"[OK] Loaded {len(payloads)} rules from {self.local_path}")
            else:
                print("[INFO] No stored rules found")
        return [Rule.from_dict(p) for p in payloads if isinstance(p, dict)]

    def _read_database(self) -> List[Dict[str, Any]]:
        if self.session_factory is None:
            return []
        try:
            with session_scope(self.session_factory) as session:
                return [dict(row.payload) for row in RuleRepository.get_all(session)]
        except SQLAlchemyError as e:
            print(f"[WARN] Failed to load rules from database: {e}")
            return []

    def _read_local(self) -> List[Dict[str, Any]]:
        if not self.local_path.exists():
            return []
        try:
            data = json.loads(self.local_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            print(f"[WARN] Failed to read {self.local_path}: {e}")
            return []
        if not isinstance(data, list):
            print(f"[WARN] Ignoring {self.local_path}: expected a list of rules")
            return []
        return data

    def _write_local(self, payloads: List[Dict[str, Any]]) -> None:
        try:
            self.local_path.write_text(json.dumps(payloads, indent=2, default=str), encoding="utf-8")
        except OSError as e:
            print(f"[WARN] Failed to write {self.local_path}: {e}")
