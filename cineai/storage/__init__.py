"""
File-backed persistence for CineAI.
"""

from .database import Database, DatabaseError

__all__ = ["Database", "DatabaseError"]
