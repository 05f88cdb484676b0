"""Shared dependencies for API routes."""
from datetime import date

from fastapi import Header

from cadence.config.settings import get_settings
from cadence.core.exceptions import AuthenticationError, AuthorizationError
from cadence.core.logging import add_log_context
from cadence.security import verify_token

settings = get_settings()


async def get_current_user_id(
    authorization: str | None = Header(None, alias="Authorization"),
) -> int:
    """Get current user ID from JWT token.

    Falls back to ``default_user_id`` when no token is sent, so local
    development works without an identity service.

    Raises:
        AuthenticationError: Missing, malformed, invalid or expired token
    """
    if not authorization:
        if settings.default_user_id is not None:
            add_log_context(user_id=settings.default_user_id)
            return settings.default_user_id
        raise AuthenticationError("No authorization header provided")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError("Invalid authorization header format")
    if scheme.lower() != "bearer":
        raise AuthenticationError("Invalid authentication scheme")

    user_id = verify_token(token)

    if user_id is None:
        raise AuthenticationError("Invalid or expired token")

    add_log_context(user_id=user_id)
    return user_id


async def require_admin(
    x_admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
) -> bool:
    """Verify the admin token for operational endpoints.

    If no admin token is configured, access is allowed (development mode).
    """
    if not settings.admin_api_token:
        return True
    if x_admin_token != settings.admin_api_token:
        raise AuthorizationError("Invalid or missing admin token", code="AUTH_ADMIN_REQUIRED")
    return True


def get_reference_date() -> date:
    """The calendar day treated as "today". Overridden in tests."""
    return date.today()
