from __future__ import annotations
from enum import StrEnum

class ErrorKind(StrEnum):
    not_found = "not_found"
    conflict = "conflict"
    forbidden = "forbidden"
    validation = "validation"
    unavailable = "unavailable"
