from __future__ import annotations

import time
from datetime import datetime, timedelta

import pytest
from werkzeug.security import generate_password_hash

from src.geosales.geosales.attendance.classifier import AttendanceFlagClassifier
from src.geosales.geosales.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from src.geosales.geosales.attendance.service import AttendanceService
from src.geosales.geosales.core.constants import TERRITORY_PRESETS
from src.geosales.geosales.core.enums import LocationPermission, Role
from src.geosales.geosales.geo.model import Coordinate, Territory
from src.geosales.geosales.geo.namer import LocationNamer
from src.geosales.geosales.users.memory_user_repository import InMemoryUserRepository
from src.geosales.geosales.users.model import User

MUMBAI_CENTER = Coordinate(19.0760, 72.8777)
OUTSIDE_POINT = Coordinate(19.20, 72.90)


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class SlowProvider:
    """Answers every one-shot request after a fixed delay."""

    def __init__(self, point: Coordinate, delay: float):
        self._point = point
        self._delay = delay

    def request_permission(self) -> LocationPermission:
        return LocationPermission.GRANTED

    def get_current_position(self, *, timeout_seconds: float, high_accuracy: bool = True) -> Coordinate:
        time.sleep(self._delay)
        return self._point

    def subscribe(self, callback, *, high_accuracy: bool = True, on_error=None):
        return object()

    def unsubscribe(self, handle) -> None:
        return None


def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 10, 9, 30, 0)


@pytest.fixture
def clock(fixed_now) -> MutableClock:
    return MutableClock(fixed_now)


@pytest.fixture
def salesman() -> User:
    return User(
        user_id="u1",
        employee_id="EMP-MUM-001",
        name="Rahul Sharma",
        password_hash=generate_password_hash("password123"),
        role=Role.SALESMAN,
        territory=Territory(center=MUMBAI_CENTER, radius_meters=10_000.0),
        territory_name="Mumbai - Andheri",
    )


@pytest.fixture
def admin() -> User:
    return User(
        user_id="admin1",
        employee_id="admin@mumbai.com",
        name="Operations Manager",
        password_hash=generate_password_hash("admin"),
        role=Role.ADMIN,
        territory=Territory(center=MUMBAI_CENTER),
    )


@pytest.fixture
def users(salesman, admin) -> InMemoryUserRepository:
    return InMemoryUserRepository([salesman, admin])


@pytest.fixture
def attendance_repo() -> InMemoryAttendanceRepository:
    return InMemoryAttendanceRepository()


@pytest.fixture
def namer() -> LocationNamer:
    return LocationNamer(TERRITORY_PRESETS)


@pytest.fixture
def service(attendance_repo, users, namer, clock) -> AttendanceService:
    return AttendanceService(
        attendance_repo,
        users,
        classifier=AttendanceFlagClassifier(namer=namer),
        location_timeout_seconds=0.2,
        clock=clock,
    )


@pytest.fixture
def center() -> Coordinate:
    return MUMBAI_CENTER


@pytest.fixture
def outside() -> Coordinate:
    return OUTSIDE_POINT


@pytest.fixture
def eventually():
    return wait_until


@pytest.fixture
def slow_provider():
    return SlowProvider
