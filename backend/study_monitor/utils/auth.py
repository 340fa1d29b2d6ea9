from __future__ import annotations
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from study_monitor.core.config import settings

TOKEN_SCOPE = "agent:admin"


def create_access_token(subject: str) -> tuple[str, int]:
    """Return a signed operator token and its lifetime in seconds."""

    now = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"sub": subject, "scope": TOKEN_SCOPE, "iat": now, "exp": now + lifetime}
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, int(lifetime.total_seconds())


def verify_access_token(token: str) -> str | None:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("scope") != TOKEN_SCOPE or payload.get("sub") != settings.auth_username:
        return None
    return payload.get("sub")
