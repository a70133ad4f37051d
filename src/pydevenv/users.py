"""In-memory user registry.

A ``User`` dataclass and a ``UserManager`` keyed by username. Nothing is
persisted; each manager owns its own dict.
"""

from __future__ import annotations

import dataclasses
import logging

logger = logging.getLogger(__name__)


class UserError(Exception):
    """Base exception for user registry operations."""


class DuplicateUserError(UserError):
    """A user with the same username is already registered."""


@dataclasses.dataclass
class User:
    """A registered user."""

    username: str
    email: str
    age: int | None = None
    is_active: bool = True

    def __post_init__(self) -> None:
        if not self.username.strip():
            msg = "username must not be empty"
            raise ValueError(msg)
        if "@" not in self.email:
            msg = f"Invalid email address {self.email!r}"
            raise ValueError(msg)


class UserManager:
    """Add, look up, remove and list users by username."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, username: object) -> bool:
        return username in self._users

    def add_user(self, user: User) -> None:
        """Register *user*.

        Raises:
            DuplicateUserError: If the username is already taken.
        """
        if user.username in self._users:
            msg = f"User {user.username!r} already exists"
            raise DuplicateUserError(msg)
        self._users[user.username] = user
        logger.debug("Added user %s", user.username)

    def get_user(self, username: str) -> User | None:
        return self._users.get(username)

    def remove_user(self, username: str) -> bool:
        """Remove a user. Returns ``False`` if no such user was registered."""
        removed = self._users.pop(username, None)
        if removed is None:
            return False
        logger.debug("Removed user %s", username)
        return True

    def list_users(self) -> list[User]:
        """Return all users in registration order."""
        return list(self._users.values())

    def active_users(self) -> list[User]:
        return [u for u in self._users.values() if u.is_active]
