from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID

from jose import JWTError, jwt

from guestlist.common.settings import AuthConfig


def create_access_token(person_id: UUID, cfg: AuthConfig) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "exp": now + timedelta(minutes=cfg.access_token_minutes),
        "iat": now,
        "sub": str(person_id),
        "type": "access",
    }
    return jwt.encode(payload, cfg.jwt_secret, algorithm=cfg.jwt_algo)


def decode_access_token(token: str, cfg: AuthConfig) -> UUID:
    """Person id carried by a valid access token; ValueError otherwise."""
    try:
        payload = jwt.decode(token, cfg.jwt_secret, algorithms=[cfg.jwt_algo])
        if payload.get("type") != "access":
            raise JWTError("Invalid token type")
        return UUID(str(payload.get("sub")))
    except (JWTError, ValueError) as exc:
        raise ValueError("Invalid token") from exc
