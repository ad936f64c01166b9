from __future__ import annotations

import bcrypt

from guestlist.common.logging import get_logger
from guestlist.domain.ports.credentials import CredentialHasherPort

logger = get_logger(__name__)

# bcrypt only looks at the first 72 bytes of a secret
_BCRYPT_MAX_BYTES = 72


class BcryptHasher(CredentialHasherPort):
    """
    Adaptive password hashing. The stored value is the opaque bcrypt string;
    checkpw() compares in constant time.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    @staticmethod
    def _encode(secret: str) -> bytes:
        return secret.encode("utf-8")[:_BCRYPT_MAX_BYTES]

    def hash(self, secret: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._encode(secret), salt).decode("utf-8")

    def verify(self, secret: str, hashed: str) -> bool:
        if not secret or not hashed:
            return False
        try:
            return bcrypt.checkpw(self._encode(secret), hashed.encode("utf-8"))
        except ValueError:
            # Not a bcrypt hash (e.g. legacy rows); treat as a failed check
            logger.warning("Stored credential is not a valid bcrypt hash")
            return False
