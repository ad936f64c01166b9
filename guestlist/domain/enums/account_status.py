from __future__ import annotations
from enum import StrEnum

class AccountStatus(StrEnum):
    unregistered = "unregistered"
    registered = "registered"
    removed = "removed"
