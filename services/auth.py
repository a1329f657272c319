from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import settings
from core.errors import NotAuthenticatedError

_ALGO = "HS256"
_bearer = HTTPBearer(auto_error=False)


def create_token(user_id: str, ttl_minutes: int | None = None) -> str:
    ttl = ttl_minutes or settings.jwt_ttl_minutes
    exp = datetime.now(timezone.utc) + timedelta(minutes=ttl)
    payload = {"sub": user_id, "exp": exp}
    return jwt.encode(payload, settings.jwt_secret, algorithm=_ALGO)


def verify_token(token: str) -> str:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[_ALGO])
    except jwt.PyJWTError as exc:
        raise NotAuthenticatedError(f"Invalid session token: {exc}") from exc
    user_id = payload.get("sub")
    if not user_id:
        raise NotAuthenticatedError("Session token has no subject")
    return str(user_id)


async def current_user_id(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """FastAPI dependency: bearer token → user id, or NotAuthenticatedError."""
    if creds is None:
        raise NotAuthenticatedError()
    return verify_token(creds.credentials)
