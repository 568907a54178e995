"""
JSON file database.

Each collection is a JSON array stored in its own file under the data
directory. Every read-modify-write cycle holds one re-entrant lock, and
writes go through a temp file so a crash never leaves a truncated file.
"""

import json
import logging
import os
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

USERS = "users"
MOVIES = "movies"
SEARCH_HISTORY = "search_history"
REFRESH_TOKENS = "refresh_tokens"

COLLECTIONS = (USERS, MOVIES, SEARCH_HISTORY, REFRESH_TOKENS)


class DatabaseError(Exception):
    """Raised when a collection file cannot be read or parsed."""


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Database:
    """File-backed store for users, movies, search history and refresh tokens."""

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self._lock = threading.RLock()
        os.makedirs(self.data_dir, exist_ok=True)
        for name in COLLECTIONS:
            path = self._path(name)
            if not os.path.exists(path):
                self._write(name, [])

    def _path(self, name: str) -> str:
        return os.path.join(self.data_dir, f"{name}.json")

    def _load(self, name: str) -> List[Dict[str, Any]]:
        try:
            with open(self._path(name), "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            raise DatabaseError(f"Cannot read {name}: {e}") from e

        if not isinstance(data, list):
            raise DatabaseError(f"Collection {name} is not a JSON array")
        return data

    def _read(self, name: str) -> List[Dict[str, Any]]:
        with self._lock:
            try:
                return self._load(name)
            except DatabaseError as e:
                logger.error("%s; treating it as empty", e)
                return []

    def _write(self, name: str, records: List[Dict[str, Any]]) -> None:
        with self._lock:
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self._path(name))
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

    def _update(self, name: str, mutate: Callable[[List[Dict[str, Any]]], Any]) -> Any:
        """
        Run mutate on the collection under the lock and persist the result.

        Raises:
            DatabaseError: If the collection file cannot be parsed; the file
                is left untouched
        """
        with self._lock:
            records = self._load(name)
            result = mutate(records)
            self._write(name, records)
            return result

    # Users

    def get_users(self) -> List[Dict[str, Any]]:
        return self._read(USERS)

    def find_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        email = (email or "").strip().lower()
        for user in self._read(USERS):
            if user.get("email", "").lower() == email:
                return user
        return None

    def find_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        for user in self._read(USERS):
            if user.get("id") == user_id:
                return user
        return None

    def create_user(self, user: Dict[str, Any]) -> Dict[str, Any]:
        now = utc_now()
        record = {
            "id": str(uuid.uuid4()),
            **user,
            "email": user["email"].strip().lower(),
            "created_at": now,
            "updated_at": now,
        }
        self._update(USERS, lambda users: users.append(record))
        return record

    def update_user(self, user_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        def mutate(users):
            for user in users:
                if user.get("id") == user_id:
                    user.update(updates)
                    user["id"] = user_id
                    user["updated_at"] = utc_now()
                    return dict(user)
            return None

        return self._update(USERS, mutate)

    # Movies

    def get_movies(self) -> List[Dict[str, Any]]:
        return self._read(MOVIES)

    def find_movie(self, movie_id: str) -> Optional[Dict[str, Any]]:
        for movie in self._read(MOVIES):
            if movie.get("id") == movie_id:
                return movie
        return None

    @staticmethod
    def _same_title_year(movie: Dict[str, Any], title: str, year: Optional[int]) -> bool:
        return (movie.get("title") or "").strip().lower() == (title or "").strip().lower() \
            and movie.get("year") == year

    def find_movie_by_title_year(self, title: str, year: Optional[int]) -> Optional[Dict[str, Any]]:
        for movie in self._read(MOVIES):
            if self._same_title_year(movie, title, year):
                return movie
        return None

    def add_movie(self, movie: Dict[str, Any]) -> Dict[str, Any]:
        """Add a movie unless one with the same title and year exists; return the stored record."""
        def mutate(movies):
            for existing in movies:
                if self._same_title_year(existing, movie.get("title"), movie.get("year")):
                    return existing
            now = utc_now()
            record = {**movie, "id": movie.get("id") or str(uuid.uuid4()), "created_at": now, "updated_at": now}
            movies.append(record)
            return record

        return self._update(MOVIES, mutate)

    # Search history

    def get_search_history(self, user_id: str) -> List[Dict[str, Any]]:
        """Entries for one user, newest first."""
        entries = [
            (entry.get("created_at", ""), position, entry)
            for position, entry in enumerate(self._read(SEARCH_HISTORY))
            if entry.get("user_id") == user_id
        ]
        # Later insertion wins when timestamps tie
        entries.sort(key=lambda item: (item[0], item[1]), reverse=True)
        return [entry for _, _, entry in entries]

    def add_search_history(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        record = {**entry, "id": str(uuid.uuid4()), "created_at": utc_now()}
        self._update(SEARCH_HISTORY, lambda entries: entries.append(record))
        return record

    def delete_search_history(self, user_id: str, entry_id: str) -> bool:
        def mutate(entries):
            for index, entry in enumerate(entries):
                if entry.get("id") == entry_id and entry.get("user_id") == user_id:
                    del entries[index]
                    return True
            return False

        return self._update(SEARCH_HISTORY, mutate)

    # Refresh tokens

    def add_refresh_token(self, user_id: str, token_hash: str, expires_at: str) -> Dict[str, Any]:
        record = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "token_hash": token_hash,
            "expires_at": expires_at,
            "revoked_at": None,
            "created_at": utc_now(),
        }
        self._update(REFRESH_TOKENS, lambda tokens: tokens.append(record))
        return record

    def find_refresh_token(self, token_hash: str, user_id: str) -> Optional[Dict[str, Any]]:
        for token in self._read(REFRESH_TOKENS):
            if token.get("token_hash") == token_hash and token.get("user_id") == user_id:
                return token
        return None

    def revoke_refresh_token(self, token_id: str) -> bool:
        def mutate(tokens):
            for token in tokens:
                if token.get("id") == token_id and not token.get("revoked_at"):
                    token["revoked_at"] = utc_now()
                    return True
            return False

        return self._update(REFRESH_TOKENS, mutate)

    def revoke_user_refresh_tokens(self, user_id: str) -> int:
        def mutate(tokens):
            count = 0
            now = utc_now()
            for token in tokens:
                if token.get("user_id") == user_id and not token.get("revoked_at"):
                    token["revoked_at"] = now
                    count += 1
            return count

        return self._update(REFRESH_TOKENS, mutate)
