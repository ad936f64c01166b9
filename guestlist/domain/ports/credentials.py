from __future__ import annotations
from typing import Protocol

class CredentialHasherPort(Protocol):
    """Stored hashes are opaque strings; verify() must compare in constant time."""

    def hash(self, secret: str) -> str: ...

    def verify(self, secret: str, hashed: str) -> bool: ...
