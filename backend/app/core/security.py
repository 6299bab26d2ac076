"""
Bearer-token verification.

Tokens are issued by the identity service; this API only verifies them
and reads the `sub` claim as the caller's user id.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import get_settings
from app.core.exceptions import Unauthorized
from app.core.logging import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token the same way the identity service does. Used by tooling and tests."""
    settings = get_settings()
    payload = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload["exp"] = expire
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the token subject or raise Unauthorized."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")

    subject = payload.get("sub")
    if not subject:
        raise Unauthorized("Invalid token")
    return str(subject)


async def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Caller's user id when a bearer token is present, else None."""
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)


async def get_current_user_id(
    user_id: Optional[str] = Depends(get_optional_user_id),
) -> str:
    if user_id is None:
        logger.info("auth_missing_token")
        raise Unauthorized("Authentication required. No token provided.")
    return user_id
