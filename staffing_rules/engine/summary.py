"""Summary row counts (role x day/night) shared with the reporting panel.

Each employee is classified once per pass as a night worker (any of their
shifts looks like a night shift) or a day worker. On each date the assigned
shift is then matched against the row patterns below. Matching is by
substring of the role and shift display names, not by shift-type taxonomy.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

SUMMARY_ROWS = ("amgr", "pct", "rn", "us", "charge", "mid")
HALVES = ("day", "night")
SUMMARY_KINDS = tuple(f"{row}_{half}_count" for row in SUMMARY_ROWS for half in HALVES)

_NIGHT_SHIFT = re.compile(r"^(?:anm n|18|night)", re.IGNORECASE)
_SUMMARY_KIND = re.compile(r"^(.+)_(day|night)_count$")

# row -> (role tokens, day shift tokens, night shift tokens)
_ROW_PATTERNS = {
    "amgr": (("AMGR", "MANAGER"), ("ANM",), ("ANM",)),
    "pct": (("PCT", "PHLEBOTOMIST"), ("6t", "6T"), ("18t", "18T")),
    "us": (("US", "ULTRASOUND"), ("6w", "6W"), ("18w", "18W")),
    "rn": (("RN", "REGISTERED NURSE"), ("6t", "6T"), ("18t", "18T")),
}


def is_night_shift(shift_name: Optional[str]) -> bool:
    return bool(shift_name) and bool(_NIGHT_SHIFT.match(shift_name))


def split_summary_kind(kind: str) -> Optional[Tuple[str, str]]:
    """'rn_day_count' -> ('rn', 'day'); None when the name does not parse."""
    match = _SUMMARY_KIND.match(kind or "")
    if not match:
        return None
    return match.group(1), match.group(2)


def summary_key(row: str, half: str) -> str:
    return f"{row}_{half}"


def _is_charge_shift(shift_name: str) -> bool:
    return "Charg" in shift_name or "CHARGE" in shift_name.upper()


def matching_rows(role_name: str, shift_name: str, night_worker: bool) -> List[str]:
    """Summary keys ("rn_day", "charge_night", ...) one assignment contributes to."""
    if not shift_name:
        return []
    half = "night" if night_worker else "day"
    role_upper = (role_name or "").upper()
    shift_upper = shift_name.upper()
    keys = []

    for row, (role_tokens, day_tokens, night_tokens) in _ROW_PATTERNS.items():
        if not any(token in role_upper for token in role_tokens):
            continue
        shift_tokens = night_tokens if night_worker else day_tokens
        if row == "amgr":
            hit = "ANM" in shift_name or shift_upper.startswith("ANM")
        else:
            hit = any(token in shift_name for token in shift_tokens)
        if hit:
            keys.append(summary_key(row, half))

    charge_role = "CHARGE" in role_upper or "CHG" in role_upper
    if charge_role or _is_charge_shift(shift_name):
        keys.append(summary_key("charge", half))

    if "MIDSH" in shift_upper or "QUALI" in shift_upper:
        keys.append(summary_key("mid", half))

    return keys


def empty_summary() -> Dict[str, int]:
    return {summary_key(row, half): 0 for row in SUMMARY_ROWS for half in HALVES}
