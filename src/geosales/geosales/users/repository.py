from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import User

# Fields update_user accepts; everything else on User is identity.
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "password_hash",
        "department",
        "territory",
        "territory_name",
        "status",
        "current_location",
        "last_update",
        "mobile",
        "email",
        "assigned_clients",
    }
)


class UserRepository(Protocol):
    """Repository interface for users.

    Note (DIP): the service layer depends on this interface, not on a concrete store.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_employee_id(self, employee_id: str) -> Optional[User]:
        """Case-insensitive lookup."""
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def create_user(self, user: User) -> User:
        raise NotImplementedError

    def update_user(self, user_id: str, **fields: Any) -> Optional[User]:
        """Apply a partial update; returns the updated user or None if missing."""
        raise NotImplementedError

    def delete_by_id(self, user_id: str) -> bool:
        raise NotImplementedError
