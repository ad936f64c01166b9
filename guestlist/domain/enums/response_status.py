from __future__ import annotations
from enum import StrEnum

class ResponseStatus(StrEnum):
    attending = "attending"
    not_attending = "not_attending"
    pending = "pending"
