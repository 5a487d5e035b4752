from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Optional, Sequence

from ..core.exceptions import ValidationError
from .model import User
from .repository import UPDATABLE_FIELDS, UserRepository


class InMemoryUserRepository(UserRepository):
    def __init__(self, users: Sequence[User] = ()):
        self._lock = threading.Lock()
        self._by_id: dict[str, User] = {}
        for u in users:
            self._by_id[u.user_id] = u

    def get_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._by_id.get(user_id)

    def get_by_employee_id(self, employee_id: str) -> Optional[User]:
        wanted = (employee_id or "").strip().lower()
        with self._lock:
            for u in self._by_id.values():
                if u.employee_id.lower() == wanted:
                    return u
        return None

    def list_all(self) -> Sequence[User]:
        with self._lock:
            return list(self._by_id.values())

    def create_user(self, user: User) -> User:
        with self._lock:
            self._by_id[user.user_id] = user
        return user

    def update_user(self, user_id: str, **fields: Any) -> Optional[User]:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        with self._lock:
            user = self._by_id.get(user_id)
            if not user:
                return None
            updated = replace(user, **fields)
            self._by_id[user_id] = updated
            return updated

    def delete_by_id(self, user_id: str) -> bool:
        with self._lock:
            return self._by_id.pop(user_id, None) is not None
