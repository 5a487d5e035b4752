from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import Role, UserStatus
from ..geo.model import Coordinate, Territory


@dataclass(frozen=True)
class User:
    """Domain entity: a salesman or an administrator.

    Plain data object, no storage code. Every location sample produces a new
    instance through the repository's update_user.
    """

    user_id: str
    employee_id: str
    name: str
    password_hash: str
    role: Role
    territory: Territory
    department: str = ""
    territory_name: Optional[str] = None
    status: UserStatus = UserStatus.OFFLINE
    current_location: Optional[Coordinate] = None
    last_update: Optional[datetime] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    assigned_clients: tuple[str, ...] = field(default_factory=tuple)

    def public_view(self) -> dict:
        return {
            "user_id": self.user_id,
            "employee_id": self.employee_id,
            "name": self.name,
            "role": self.role.value,
            "department": self.department,
            "territory_name": self.territory_name,
            "territory": self.territory.as_dict(),
            "status": self.status.value,
            "current_location": self.current_location.as_dict() if self.current_location else None,
            "last_update": self.last_update.isoformat() if self.last_update else None,
            "mobile": self.mobile,
            "email": self.email,
            "assigned_clients": list(self.assigned_clients),
        }
