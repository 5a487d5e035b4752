from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from ..core.enums import Role, UserStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..geo.model import Coordinate, Territory
from .model import User
from .repository import UPDATABLE_FIELDS, UserRepository


def encode_clients(clients: Sequence[str]) -> str:
    return json.dumps(list(clients or ()))


def decode_clients(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(str(c) for c in json.loads(raw) if c)


_SELECT = """
    SELECT user_id, employee_id, name, password_hash, role, department,
           territory_name, territory_lat, territory_lng, territory_radius_m,
           status, current_lat, current_lng, last_update, mobile, email, assigned_clients
    FROM users
"""


def _row_to_user(row: dict) -> User:
    current = None
    if row.get("current_lat") is not None and row.get("current_lng") is not None:
        current = Coordinate.of(row["current_lat"], row["current_lng"])
    return User(
        user_id=str(row["user_id"]),
        employee_id=row["employee_id"],
        name=row["name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        territory=Territory(
            center=Coordinate.of(row["territory_lat"], row["territory_lng"]),
            radius_meters=float(row["territory_radius_m"]),
        ),
        department=row.get("department") or "",
        territory_name=row.get("territory_name"),
        status=UserStatus(row.get("status") or UserStatus.OFFLINE.value),
        current_location=current,
        last_update=row.get("last_update"),
        mobile=row.get("mobile"),
        email=row.get("email"),
        assigned_clients=decode_clients(row.get("assigned_clients")),
    )


def _field_columns(name: str, value: Any) -> dict[str, Any]:
    """Map one User field to the column(s) that store it."""
    if name == "territory":
        return {
            "territory_lat": value.center.lat,
            "territory_lng": value.center.lng,
            "territory_radius_m": value.radius_meters,
        }
    if name == "current_location":
        return {
            "current_lat": value.lat if value else None,
            "current_lng": value.lng if value else None,
        }
    if name == "status":
        return {"status": value.value}
    if name == "assigned_clients":
        return {"assigned_clients": encode_clients(value)}
    return {name: value}


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_employee_id(self, employee_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE LOWER(employee_id)=LOWER(%s)", ((employee_id or "").strip(),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY name ASC")
            return [_row_to_user(r) for r in fetchall(cur)]

    def create_user(self, user: User) -> User:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(
                    user_id, employee_id, name, password_hash, role, department,
                    territory_name, territory_lat, territory_lng, territory_radius_m,
                    status, current_lat, current_lng, last_update, mobile, email, assigned_clients
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user.user_id,
                    user.employee_id,
                    user.name,
                    user.password_hash,
                    user.role.value,
                    user.department,
                    user.territory_name,
                    user.territory.center.lat,
                    user.territory.center.lng,
                    user.territory.radius_meters,
                    user.status.value,
                    user.current_location.lat if user.current_location else None,
                    user.current_location.lng if user.current_location else None,
                    user.last_update,
                    user.mobile,
                    user.email,
                    encode_clients(user.assigned_clients),
                ),
            )
        return user

    def update_user(self, user_id: str, **fields: Any) -> Optional[User]:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        columns: dict[str, Any] = {}
        for name, value in fields.items():
            columns.update(_field_columns(name, value))

        if columns:
            assignments = ", ".join(f"{col}=%s" for col in columns)
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE users SET {assignments} WHERE user_id=%s",
                    (*columns.values(), user_id),
                )
        return self.get_by_id(user_id)

    def delete_by_id(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0
