"""
FastAPI dependencies for authentication and authorization.

Provides dependency functions that can be used to protect routes and
verify user permissions.
"""

from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jwt.exceptions import InvalidTokenError

from cineai.storage import Database
from cineai.utils.audit_log import log_authorization_failure
from .jwt import decode_token

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def get_database(request: Request) -> Database:
    """The Database built by create_app."""
    return request.app.state.db


def public_user(user: dict) -> dict:
    """Strip secrets from a stored user record."""
    return {key: value for key, value in user.items() if key != "password_hash"}


def _user_from_token(token: str, db: Database) -> Optional[dict]:
    payload = decode_token(token)

    if payload.get("type") != "access":
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    user = db.find_user_by_id(user_id)
    return public_user(user) if user else None


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Database = Depends(get_database)
) -> Optional[dict]:
    """
    Get the current authenticated user (optional).

    Returns None if no valid token is provided, otherwise returns user dict.
    """
    if not credentials:
        return None

    try:
        return _user_from_token(credentials.credentials, db)
    except InvalidTokenError:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Database = Depends(get_database)
) -> dict:
    """
    Get the current authenticated user (required).

    Raises:
        HTTPException: 401 if the token is missing, invalid, of the wrong
            type, or names a user that no longer exists
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_token(credentials.credentials)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.find_user_by_id(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return public_user(user)


def require_role(required_role: str):
    """
    Create a dependency that requires a specific role.

    Args:
        required_role: The role required ('user' or 'admin')

    Returns:
        Dependency function that checks the user's role
    """
    async def role_checker(request: Request, current_user: dict = Depends(get_current_user)) -> dict:
        if current_user.get("role") != required_role:
            log_authorization_failure(
                user_id=current_user["id"],
                email=current_user.get("email"),
                role=current_user.get("role"),
                resource_type="route",
                resource_id=request.url.path,
                action=request.method.lower(),
                request=request,
                reason=f"requires {required_role}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires {required_role} role"
            )
        return current_user

    return role_checker


def require_admin():
    """Shorthand dependency for requiring the admin role."""
    return require_role("admin")
