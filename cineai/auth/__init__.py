"""
Authentication module for CineAI.

This module provides authentication and authorization functionality including:
- JWT token generation and validation
- Password hashing and verification
- FastAPI dependencies for route protection
"""

from .jwt import create_access_token, create_refresh_token, decode_token, refresh_token_expiry
from .password import hash_password, verify_password
from .dependencies import (
    get_current_user,
    get_current_user_optional,
    get_database,
    public_user,
    require_role,
    require_admin
)

__all__ = [
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "refresh_token_expiry",
    "hash_password",
    "verify_password",
    "get_current_user",
    "get_current_user_optional",
    "get_database",
    "public_user",
    "require_role",
    "require_admin",
]
