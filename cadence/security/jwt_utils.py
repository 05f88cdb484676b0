"""JWT token utilities for authentication.

Tokens are issued by the identity service; this service only needs to read
the ``sub`` claim. ``create_access_token`` exists for local tooling and tests.
"""
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from cadence.config.settings import get_settings

settings = get_settings()


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token (e.g., {"sub": "42"})
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.access_token_expire_minutes
        )
    to_encode["exp"] = expire

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm,
    )


def decode_access_token(token: str) -> Optional[dict]:
    """Decode a JWT access token, returning None if it is invalid or expired."""
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
    except JWTError:
        return None


def verify_token(token: str) -> Optional[int]:
    """Verify a JWT token and extract the user ID.

    Returns:
        User ID if valid, None otherwise
    """
    payload = decode_access_token(token)

    if payload is None:
        return None

    user_id = payload.get("sub")

    if user_id is None:
        return None

    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None
