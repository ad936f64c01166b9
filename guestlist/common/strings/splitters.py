# guestlist/common/strings/splitters.py
from __future__ import annotations

from typing import List, Optional

_TRUTHY = {"1", "true", "yes", "y", "on", "x"}


def csv_to_list(v: str | List[str] | None) -> List[str]:
    if v is None:
        return []
    if isinstance(v, list):
        return [s.strip() for s in v if s and str(s).strip()]
    return [s.strip() for s in str(v).split(",") if s.strip()]


def blank_to_none(v: Optional[str]) -> Optional[str]:
    """Strip a cell/field value; empty strings become None."""
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def cell_to_bool(v: str | bool | None) -> bool:
    """Spreadsheet-style boolean: 'true', 'yes', '1', 'x' are True, anything else False."""
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    return str(v).strip().lower() in _TRUTHY
