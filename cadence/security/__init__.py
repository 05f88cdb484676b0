"""Security utilities for authentication."""
from .jwt_utils import (
    create_access_token,
    decode_access_token,
    verify_token,
)

__all__ = [
    "create_access_token",
    "decode_access_token",
    "verify_token",
]
