"""Storage abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from models.user import User


class AbstractCredentialStore(ABC):
    """Interface for the durable collection of user records.

    Implementations normalize email addresses before every comparison and
    persist each mutation before returning.
    """

    @abstractmethod
    def find_by_email(self, email: str | None) -> User | None:
        """Return the user holding ``email`` (case-insensitive), if any."""

    @abstractmethod
    def find_by_id(self, user_id: int) -> User | None:
        """Return the user with ``user_id``, if any."""

    @abstractmethod
    def insert(self, user: User) -> User:
        """Assign an id when missing, persist the user and return it."""

    @abstractmethod
    def update(self, user_id: int, fields: dict[str, Any]) -> User:
        """Apply ``fields`` (column name -> value) to a user and persist it."""

    @abstractmethod
    def remove(self, email: str) -> bool:
        """Hard-delete the user holding ``email``. Return whether one existed."""

    @abstractmethod
    def list_all(self) -> Sequence[User]:
        """Return every user ordered by id."""
