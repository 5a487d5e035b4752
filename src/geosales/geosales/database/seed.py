"""Demo accounts shared by the in-memory store and the MySQL seeder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from werkzeug.security import generate_password_hash

from ..core.enums import Role, UserStatus
from ..geo.model import Coordinate, Territory
from ..users.model import User
from ..users.repository import UserRepository


@dataclass(frozen=True)
class DemoUser:
    user_id: str
    employee_id: str
    password: str
    name: str
    department: str
    role: Role
    territory_center: tuple[float, float]
    territory_name: Optional[str] = None
    status: UserStatus = UserStatus.OFFLINE
    assigned_clients: tuple[str, ...] = ()


DEMO_USERS: tuple[DemoUser, ...] = (
    DemoUser(
        user_id="u1",
        employee_id="EMP-MUM-001",
        password="password123",
        name="Rahul Sharma",
        department="South Mumbai Sales",
        role=Role.SALESMAN,
        territory_center=(18.9215, 72.8340),
        territory_name="Mumbai - South",
        assigned_clients=("Taj Retail", "Colaba Traders"),
    ),
    DemoUser(
        user_id="u2",
        employee_id="EMP-MUM-042",
        password="password123",
        name="Priya Patel",
        department="Bandra West Unit",
        role=Role.SALESMAN,
        territory_center=(19.0600, 72.8300),
        territory_name="Mumbai - Bandra",
        assigned_clients=("Linking Road Stores",),
    ),
    DemoUser(
        user_id="admin1",
        employee_id="admin@mumbai.com",
        password="admin",
        name="Operations Manager Mumbai",
        department="Operations",
        role=Role.ADMIN,
        territory_center=(19.0760, 72.8777),
    ),
)


def build_demo_user(demo: DemoUser, *, radius_meters: float) -> User:
    return User(
        user_id=demo.user_id,
        employee_id=demo.employee_id,
        name=demo.name,
        password_hash=generate_password_hash(demo.password),
        role=demo.role,
        territory=Territory(center=Coordinate.of(*demo.territory_center), radius_meters=radius_meters),
        department=demo.department,
        territory_name=demo.territory_name,
        status=demo.status,
        assigned_clients=demo.assigned_clients,
    )


def seed_users(users: UserRepository, *, radius_meters: float) -> int:
    """Create demo accounts that are missing; returns how many were added."""
    added = 0
    for demo in DEMO_USERS:
        if users.get_by_employee_id(demo.employee_id):
            continue
        users.create_user(build_demo_user(demo, radius_meters=radius_meters))
        added += 1
    return added
