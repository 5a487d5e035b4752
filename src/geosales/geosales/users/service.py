from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import coerce_float, require_min_length, require_non_empty
from ..core.constants import DEFAULT_TERRITORY_RADIUS_METERS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..geo.model import Coordinate, Territory
from ..geo.namer import LocationNamer
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
PROFILE_FIELDS = ("name", "department", "mobile", "email", "assigned_clients")


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: str
    employee_id: str
    name: str
    role: Role
    territory_name: Optional[str]


def parse_role(value: Any) -> Role:
    try:
        return Role(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown role: {value!r}")


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, role: Role | str, employee_id: str, password: str) -> SessionUser:
        role = parse_role(role)
        user = self._users.get_by_employee_id(employee_id or "")
        if not user or user.role != role:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")

        logger.info("User %s (%s) logged in", user.employee_id, user.role.value)
        return SessionUser(
            user_id=user.user_id,
            employee_id=user.employee_id,
            name=user.name,
            role=user.role,
            territory_name=user.territory_name,
        )


class UserService:
    """Use case: manage salesmen and their territories (admin)."""

    def __init__(
        self,
        users: UserRepository,
        *,
        namer: LocationNamer,
        default_radius_meters: float = DEFAULT_TERRITORY_RADIUS_METERS,
    ):
        self._users = users
        self._namer = namer
        self._default_radius = float(default_radius_meters)

    def resolve_territory(
        self,
        *,
        preset_name: Optional[str] = None,
        lat: Any = None,
        lng: Any = None,
        radius_meters: Any = None,
    ) -> tuple[Territory, str]:
        """Territory from a preset name or an explicit centre.

        Returns the territory and the label to show for it. With neither
        given the first preset is used.
        """
        radius = self._default_radius if radius_meters in (None, "") else coerce_float(radius_meters, "Radius")
        if radius <= 0:
            raise ValidationError("Radius must be positive")

        if preset_name:
            center = self._namer.preset(preset_name)
            if center is None:
                raise ValidationError(f"Unknown territory preset: {preset_name}")
            return Territory(center=center, radius_meters=radius), preset_name

        if lat not in (None, "") or lng not in (None, ""):
            center = Coordinate.of(coerce_float(lat, "Latitude"), coerce_float(lng, "Longitude"))
            return Territory(center=center, radius_meters=radius), self._namer.name_for(center)

        presets = self._namer.presets
        if not presets:
            raise ValidationError("A territory is required")
        first = next(iter(presets))
        return Territory(center=presets[first], radius_meters=radius), first

    def create_salesman(
        self,
        *,
        name: str,
        employee_id: str,
        password: str,
        department: str = "",
        mobile: Optional[str] = None,
        email: Optional[str] = None,
        assigned_clients: Iterable[str] = (),
        preset_name: Optional[str] = None,
        lat: Any = None,
        lng: Any = None,
        radius_meters: Any = None,
    ) -> User:
        name = require_non_empty(name, "Name")
        employee_id = require_non_empty(employee_id, "Employee ID")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_employee_id(employee_id):
            raise ValidationError("Employee ID already exists")

        territory, territory_name = self.resolve_territory(
            preset_name=preset_name, lat=lat, lng=lng, radius_meters=radius_meters
        )
        user = User(
            user_id=uuid.uuid4().hex,
            employee_id=employee_id,
            name=name,
            password_hash=generate_password_hash(password),
            role=Role.SALESMAN,
            territory=territory,
            department=(department or "").strip(),
            territory_name=territory_name,
            mobile=mobile or None,
            email=email or None,
            assigned_clients=_clean_clients(assigned_clients),
        )
        created = self._users.create_user(user)
        logger.info("Created salesman %s in %s", created.employee_id, territory_name)
        return created

    def update_profile(self, *, user_id: str, password: Optional[str] = None, **fields: Any) -> User:
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        changes: dict[str, Any] = {}
        for key, value in fields.items():
            if key == "name":
                changes["name"] = require_non_empty(value, "Name")
            elif key == "assigned_clients":
                changes["assigned_clients"] = _clean_clients(value or ())
            elif key == "department":
                changes["department"] = (value or "").strip()
            else:
                changes[key] = value or None
        if password:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
            changes["password_hash"] = generate_password_hash(password)

        updated = self._users.update_user(user_id, **changes)
        if not updated:
            raise NotFoundError("User not found")
        return updated

    def assign_territory(
        self,
        *,
        user_id: str,
        preset_name: Optional[str] = None,
        lat: Any = None,
        lng: Any = None,
        radius_meters: Any = None,
    ) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        moves_center = bool(preset_name) or lat not in (None, "") or lng not in (None, "")
        if radius_meters in (None, ""):
            if not moves_center:
                raise ValidationError("A preset or a centre is required")
            radius_meters = user.territory.radius_meters

        if moves_center:
            territory, territory_name = self.resolve_territory(
                preset_name=preset_name, lat=lat, lng=lng, radius_meters=radius_meters
            )
        else:
            radius = coerce_float(radius_meters, "Radius")
            if radius <= 0:
                raise ValidationError("Radius must be positive")
            territory = Territory(center=user.territory.center, radius_meters=radius)
            territory_name = user.territory_name or self._namer.name_for(user.territory.center)

        updated = self._users.update_user(user_id, territory=territory, territory_name=territory_name)
        if not updated:
            raise NotFoundError("User not found")
        logger.info(
            "Territory of %s set to %s (%.0f m)", updated.employee_id, territory_name, territory.radius_meters
        )
        return updated

    def list_users(self) -> Sequence[User]:
        return self._users.list_all()

    def list_salesmen(self) -> Sequence[User]:
        return [u for u in self._users.list_all() if u.role == Role.SALESMAN]

    def get_user(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def delete_user(self, *, current_role: Role, user_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if user.role == Role.ADMIN:
            raise ValidationError("Cannot delete an Admin account")

        if not self._users.delete_by_id(user_id):
            raise ValidationError("Failed to delete user")
        logger.info("Deleted user %s; attendance history retained", user.employee_id)


def _clean_clients(values: Iterable[str] | str) -> tuple[str, ...]:
    if isinstance(values, str):
        values = values.split(",")
    return tuple(v.strip() for v in values if v and v.strip())
