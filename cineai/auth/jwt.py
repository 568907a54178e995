"""
JWT token utilities for authentication.

Provides functions for creating and decoding JWT tokens using HS256 algorithm.
"""

import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
import jwt
from jwt.exceptions import InvalidTokenError

# Configuration from environment
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production-use-a-long-random-secret")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_DAYS", "7"))


def create_access_token(user_id: str, role: str, additional_claims: Optional[Dict] = None) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: The user's UUID as a string
        role: The user's role ('user' or 'admin')
        additional_claims: Optional additional claims to include in the token

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)

    payload = {
        "sub": user_id,
        "role": role,
        "type": "access",
        "exp": now + timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS),
        "iat": now
    }

    if additional_claims:
        payload.update(additional_claims)

    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def refresh_token_expiry() -> datetime:
    """Expiry timestamp for a refresh token issued now."""
    return datetime.now(timezone.utc) + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)


def create_refresh_token(user_id: str) -> str:
    """
    Create a JWT refresh token.

    Each token carries a random jti so two tokens issued in the same
    second never hash to the same value.

    Args:
        user_id: The user's UUID as a string

    Returns:
        Encoded JWT refresh token string
    """
    payload = {
        "sub": user_id,
        "type": "refresh",
        "jti": uuid.uuid4().hex,
        "exp": refresh_token_expiry(),
        "iat": datetime.now(timezone.utc)
    }

    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Dict:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT token string to decode

    Returns:
        Dictionary containing the token payload

    Raises:
        InvalidTokenError: If the token is invalid or expired
    """
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError as e:
        raise InvalidTokenError(f"Invalid token: {str(e)}")
