"""
API route modules for CineAI.
"""

from .auth import router as auth_router
from .users import router as users_router
from .ai import router as ai_router
from .movies import router as movies_router

__all__ = [
    "auth_router",
    "users_router",
    "ai_router",
    "movies_router",
]
