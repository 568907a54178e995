"""
User profile and search history routes.
"""

import math

from fastapi import APIRouter, Depends, HTTPException, Query, status

from cineai.auth import get_current_user, get_database, public_user, require_admin
from cineai.models.user import ProfileUpdate, UserListResponse, UserResponse
from cineai.storage import Database

router = APIRouter(prefix="/api/users", tags=["Users"])

PROFILE_HISTORY_LIMIT = 50


def paginate(items: list, limit: int, offset: int) -> dict:
    """Slice a list and report page numbers the way the UI expects them."""
    total = len(items)
    return {
        "items": items[offset:offset + limit],
        "total": total,
        "page": offset // limit + 1,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


@router.get("/profile")
async def get_profile(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Get the current user's profile with their most recent searches.
    """
    history = db.get_search_history(current_user["id"])[:PROFILE_HISTORY_LIMIT]
    return {
        "user": UserResponse(**current_user),
        "search_history": history,
    }


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    update: ProfileUpdate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Update the name and/or preferences of the current user.

    Preference lists that are omitted keep their current value.
    """
    updates = {}

    if update.name is not None:
        updates["name"] = update.name

    if update.preferences is not None:
        preferences = dict(current_user.get("preferences") or {})
        if update.preferences.favorite_genres is not None:
            preferences["favorite_genres"] = update.preferences.favorite_genres
        if update.preferences.preferred_languages is not None:
            preferences["preferred_languages"] = update.preferences.preferred_languages
        updates["preferences"] = preferences

    if not updates:
        return UserResponse(**current_user)

    user = db.update_user(current_user["id"], updates)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return UserResponse(**public_user(user))


@router.get("/search-history")
async def get_search_history(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Page through the current user's search history, newest first.
    """
    page = paginate(db.get_search_history(current_user["id"]), limit, offset)
    return {
        "history": page["items"],
        "total": page["total"],
        "page": page["page"],
        "total_pages": page["total_pages"],
    }


@router.delete("/search-history/{entry_id}")
async def delete_search_history_entry(
    entry_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Delete one of the current user's search history entries.
    """
    if not db.delete_search_history(current_user["id"], entry_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Search history entry not found"
        )

    return {"message": "Search history entry deleted"}


@router.get("", response_model=UserListResponse)
async def list_users(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: dict = Depends(require_admin()),
    db: Database = Depends(get_database)
):
    """
    List all users (admin only).
    """
    users = db.get_users()
    return UserListResponse(
        users=[UserResponse(**public_user(u)) for u in users[offset:offset + limit]],
        total=len(users)
    )
