"""
User record storage.

Users are stored as a JSON list in a flat file, one object per user:

    [{"firstName": ..., "lastName": ..., "email": ..., "password": <bcrypt>,
      "settings": {...}}]

Request handlers receive the store through the get_user_store()
dependency so the color engines never touch the file.
"""

import json
import threading
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lightsync.config import USERS_FILE
from lightsync.logger import logger

T = TypeVar("T")


class UserNotFoundError(KeyError):
    """Raised when an update targets an unknown email."""


class UserExistsError(ValueError):
    """Raised when creating a user whose email is already taken."""


class UserRecord(BaseModel):
    """
    Stored user with free-form settings.

    settings is None when the stored record has no settings block; lamp
    endpoints answer 404 for such users. Null names and password read as "".
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    email: str
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    password: str = Field("", description="bcrypt hash")
    settings: Optional[dict[str, Any]] = None

    @field_validator("first_name", "last_name", "password", mode="before")
    @classmethod
    def _null_text(cls, v: Any) -> Any:
        return "" if v is None else v

    def ensure_settings(self) -> dict[str, Any]:
        """Settings dict, created empty if the record has none."""
        if self.settings is None:
            self.settings = {}
        return self.settings


class UserStore(Protocol):
    """Key-value capability keyed by email."""

    def get_user(self, email: str) -> Optional[UserRecord]: ...

    def put_user(self, record: UserRecord) -> None: ...

    def create_user(self, record: UserRecord) -> None: ...

    def update_user(self, email: str, mutate: Callable[[UserRecord], T]) -> T: ...


# ============================================================================
# JSON file store
# ============================================================================

class JsonFileUserStore:
    """
    User store backed by a single JSON file.

    Every read-modify-write runs under one lock so concurrent saves from
    the same process cannot lose updates. Last writer wins across processes.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()
    def _load_entries(self) -> list[Any]:
        """
        Read every entry in the users file.

        Entries that validate come back as UserRecord; anything else is kept
        as the raw JSON value so that saving writes it back unchanged.
        """
        if not self.path.exists():
            logger.info(f"Users file not found, creating empty store: {self.path}")
            self._write_entries([])
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read users file {self.path}: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Users file {self.path} does not contain a list, ignoring")
            return []

        entries: list[Any] = []
        for entry in data:
            try:
                entries.append(UserRecord.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Keeping unreadable user record as-is: {e.error_count()} error(s)")
                entries.append(entry)

        logger.debug(f"Loaded {len(entries)} user entries from {self.path}")
        return entries

    def _write_entries(self, entries: list[Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            data = [
                entry.model_dump(by_alias=True) if isinstance(entry, UserRecord) else entry
                for entry in entries
            ]

            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)

            logger.debug(f"Saved {len(entries)} user entries to {self.path}")

        except Exception as e:
            logger.error(f"Failed to save users file {self.path}: {e}", exc_info=True)
            raise

    def load_users(self) -> list[UserRecord]:
        """
        Load all readable users from the JSON file.

        Returns:
            list of UserRecord

        A missing file is created empty. An unreadable file or a file that
        does not hold a list yields an empty list.
        """
        return [entry for entry in self._load_entries() if isinstance(entry, UserRecord)]

    def save_users(self, users: list[UserRecord]) -> None:
        """
        Write all users to the JSON file.

        Args:
            users: Complete user list (replaces file contents)
        """
        self._write_entries(users)

    def get_user(self, email: str) -> Optional[UserRecord]:
        """
        Get single user by email.

        Returns:
            UserRecord if found, None otherwise
        """
        with self._lock:
            return _find(self._load_entries(), email)

    def put_user(self, record: UserRecord) -> None:
        """Insert a new user or replace the one with the same email."""
        with self._lock:
            entries = self._load_entries()
            for i, entry in enumerate(entries):
                if isinstance(entry, UserRecord) and entry.email == record.email:
                    entries[i] = record
                    break
            else:
                entries.append(record)
            self._write_entries(entries)

    def create_user(self, record: UserRecord) -> None:
        """
        Add a new user.

        Raises:
            UserExistsError: If the email is already registered
        """
        with self._lock:
            entries = self._load_entries()
            if _find(entries, record.email) is not None:
                raise UserExistsError(record.email)
            entries.append(record)
            self._write_entries(entries)

    def update_user(self, email: str, mutate: Callable[[UserRecord], T]) -> T:
        """
        Atomically modify one user.

        Args:
            email: User to update
            mutate: Called with the loaded record; may change it in place

        Returns:
            Whatever mutate returns

        Raises:
            UserNotFoundError: If no user has this email
        """
        with self._lock:
            entries = self._load_entries()
            user = _find(entries, email)
            if user is None:
                raise UserNotFoundError(email)

            result = mutate(user)
            self._write_entries(entries)
            return result


def _find(entries: list[Any], email: str) -> Optional[UserRecord]:
    for entry in entries:
        if isinstance(entry, UserRecord) and entry.email == email:
            return entry
    return None


# ============================================================================
# Dependency
# ============================================================================

_user_store: Optional[JsonFileUserStore] = None


def get_user_store() -> UserStore:
    """Get shared user store (dependency injection)."""
    global _user_store
    if _user_store is None:
        _user_store = JsonFileUserStore(USERS_FILE)
    return _user_store
