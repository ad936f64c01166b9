# guestlist/common/naming/people.py
from __future__ import annotations

import re
import unicodedata
from typing import Optional, Tuple

# Same shape the original guest table enforced with a CHECK constraint
EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

_ws_re = re.compile(r"\s+")


def clean_name(text: Optional[str]) -> str:
    """
    Trim and collapse internal whitespace, keeping the caller's casing:
      "  Mary   Ann " -> "Mary Ann"
    Returns '' for None/blank input (callers decide whether that is an error).
    """
    if text is None:
        return ""
    value = unicodedata.normalize("NFC", str(text))
    return _ws_re.sub(" ", value).strip()


def name_key(first: Optional[str], last: Optional[str]) -> Tuple[str, str]:
    """Case-insensitive comparison key for a (first, last) pair."""
    return clean_name(first).casefold(), clean_name(last).casefold()


def display_name(first: Optional[str], last: Optional[str]) -> str:
    return " ".join(p for p in (clean_name(first), clean_name(last)) if p)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_RE.match(email) is not None
