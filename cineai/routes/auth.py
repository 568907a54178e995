"""
Authentication routes.

Provides endpoints for:
- Email/password registration and login
- Token refresh with refresh-token rotation
- Current user profile and password change
- Logout
"""

import hashlib
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from jwt.exceptions import InvalidTokenError

from cineai.auth import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_current_user,
    get_database,
    hash_password,
    public_user,
    refresh_token_expiry,
    verify_password
)
from cineai.models.user import (
    PasswordChange,
    RefreshTokenRequest,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse
)
from cineai.storage import Database
from cineai.storage.database import utc_now
from cineai.utils.audit_log import log_auth_event, log_sensitive_operation

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

DEFAULT_PREFERENCES = {"favorite_genres": [], "preferred_languages": ["English"]}


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def issue_tokens(db: Database, user: dict) -> TokenResponse:
    """Create an access/refresh token pair and store the refresh token hash."""
    access_token = create_access_token(user["id"], user["role"])
    refresh_token = create_refresh_token(user["id"])

    db.add_refresh_token(user["id"], hash_token(refresh_token), refresh_token_expiry().isoformat())

    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        user=UserResponse(**public_user(user))
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(register_request: UserRegister, request: Request, db: Database = Depends(get_database)):
    """
    Create a new account.

    New accounts get the 'user' role and default preferences.
    """
    if db.find_user_by_email(register_request.email):
        log_auth_event(
            event_type="register",
            user_id=None,
            email=register_request.email,
            success=False,
            request=request,
            details="Email already registered"
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists with this email"
        )

    password_hash_value = await run_in_threadpool(hash_password, register_request.password)

    user = db.create_user({
        "name": register_request.name,
        "email": register_request.email,
        "password_hash": password_hash_value,
        "role": "user",
        "preferences": dict(DEFAULT_PREFERENCES),
        "last_login_at": utc_now(),
    })

    log_auth_event(
        event_type="register",
        user_id=user["id"],
        email=user["email"],
        success=True,
        request=request
    )

    return issue_tokens(db, user)


@router.post("/login", response_model=TokenResponse)
async def login(login_request: UserLogin, request: Request, db: Database = Depends(get_database)):
    """
    Authenticate with email and password.
    """
    user = db.find_user_by_email(login_request.email)

    if not user:
        log_auth_event(
            event_type="login",
            user_id=None,
            email=login_request.email,
            success=False,
            request=request,
            details="User not found"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    password_ok = await run_in_threadpool(verify_password, login_request.password, user.get("password_hash"))
    if not password_ok:
        log_auth_event(
            event_type="login",
            user_id=user["id"],
            email=user["email"],
            success=False,
            request=request,
            details="Invalid password"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    user = db.update_user(user["id"], {"last_login_at": utc_now()})

    log_auth_event(
        event_type="login",
        user_id=user["id"],
        email=user["email"],
        success=True,
        request=request
    )

    return issue_tokens(db, user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_access_token(
    refresh_request: RefreshTokenRequest,
    request: Request,
    db: Database = Depends(get_database)
):
    """
    Exchange a refresh token for a new token pair.

    The presented refresh token is revoked; reusing it fails.
    """
    try:
        payload = decode_token(refresh_request.refresh_token)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token"
        )

    if payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type"
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    token_record = db.find_refresh_token(hash_token(refresh_request.refresh_token), user_id)

    if not token_record:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token"
        )

    if token_record.get("revoked_at"):
        log_auth_event(
            event_type="token_refresh",
            user_id=user_id,
            email=None,
            success=False,
            request=request,
            details="Revoked token reused"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token has been revoked"
        )

    if datetime.fromisoformat(token_record["expires_at"]) < datetime.now(timezone.utc):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token expired"
        )

    user = db.find_user_by_id(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    db.revoke_refresh_token(token_record["id"])

    log_auth_event(
        event_type="token_refresh",
        user_id=user["id"],
        email=user["email"],
        success=True,
        request=request
    )

    return issue_tokens(db, user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: dict = Depends(get_current_user)):
    """
    Get the current user's profile.
    """
    return UserResponse(**current_user)


@router.put("/me/password")
async def change_password(
    password_request: PasswordChange,
    request: Request,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Change the current user's password.

    Outstanding refresh tokens are revoked so other sessions must log in
    again.
    """
    user = db.find_user_by_id(current_user["id"])

    password_ok = await run_in_threadpool(
        verify_password, password_request.current_password, user.get("password_hash")
    )
    if not password_ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect"
        )

    new_hash = await run_in_threadpool(hash_password, password_request.new_password)
    db.update_user(current_user["id"], {"password_hash": new_hash})
    db.revoke_user_refresh_tokens(current_user["id"])

    log_sensitive_operation(
        operation="password_change",
        user_id=current_user["id"],
        email=current_user["email"],
        request=request
    )

    return {"message": "Password changed successfully"}


@router.post("/logout")
async def logout(
    request: Request,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Logout the current user by revoking all refresh tokens.
    """
    db.revoke_user_refresh_tokens(current_user["id"])

    log_auth_event(
        event_type="logout",
        user_id=current_user["id"],
        email=current_user["email"],
        success=True,
        request=request
    )

    return {"message": "Logged out successfully"}
