"""Caller identity: bearer JWT issued upstream, resolved to a user id."""
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Request
from jose import JWTError, jwt

from drill_engine.core.config import get_settings
from drill_engine.core.errors import AuthorizationError


def create_access_token(subject: str, extra: dict[str, Any] | None = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {"sub": str(subject), "exp": expire, "type": "access"}
    if extra:
        to_encode.update(extra)
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict | None:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user_id(request: Request) -> str:
    """FastAPI dependency: authenticated user id or 401."""
    token = _bearer_token(request)
    if token is None:
        raise AuthorizationError(detail="missing_user_jwt")

    claims = decode_access_token(token)
    subject = (claims or {}).get("sub")
    if not subject:
        raise AuthorizationError(detail="invalid_user_jwt")
    return str(subject)
