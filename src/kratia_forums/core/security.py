"""Bearer token helpers for the session collaborator."""
from __future__ import annotations

from datetime import timedelta

from jose import JWTError, jwt

from kratia_forums.core.settings import settings
from kratia_forums.db.time import utcnow


def create_access_token(member_id: str, expires_delta: timedelta | None = None) -> str:
    """Issue a signed JWT whose subject is the member id."""
    expire = utcnow() + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {"sub": member_id, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str | None:
    """Return the member id carried by ``token`` or None if it does not verify."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    return subject if isinstance(subject, str) else None
