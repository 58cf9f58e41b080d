"""JWT authentication for the UI.

A single user is configured through the environment (USERNAME and a bcrypt
HASHED_PASSWORD). Logging in returns an HS256 access token signed with
SECRET; every registry endpoint requires it as "Authorization: Bearer <token>".

JWT Payload Structure:
{
    "sub": "admin",          # Username
    "iat": 1234567890,       # Issued at
    "exp": 1234567890        # Expiration
}
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from regview.core.config import settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# Security scheme for Swagger UI
security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Access token obtained from POST /auth/login",
    auto_error=False,
)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a plaintext password against a bcrypt hash. Malformed hashes never match."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        logger.error("HASHED_PASSWORD is not a valid bcrypt hash")
        return False


def authenticate_user(username: str, password: str) -> bool:
    if not settings.USERNAME or not settings.HASHED_PASSWORD:
        logger.error("USERNAME/HASHED_PASSWORD are not configured; refusing all logins")
        return False
    if username != settings.USERNAME:
        return False
    return verify_password(password, settings.HASHED_PASSWORD)


def create_access_token(subject: str, expires_in_minutes: Optional[int] = None) -> str:
    """
    Create a signed access token for `subject`.

    Args:
        subject: Username stored in the `sub` claim
        expires_in_minutes: Token validity; defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        str: Encoded JWT
    """
    minutes = expires_in_minutes if expires_in_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.SECRET, algorithm=ALGORITHM)


def verify_access_token(token: str) -> str:
    """
    Verify a token and return its subject.

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET,
            algorithms=[ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired. Please log in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        logger.info("JWT validation failed", exc_info=e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload["sub"]


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    FastAPI dependency returning the authenticated username.

    Usage:
        @router.get("/protected")
        async def protected_route(user: str = Depends(get_current_user)):
            ...
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return verify_access_token(credentials.credentials)
