from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.classifier import AttendanceFlagClassifier
from .attendance.dedup import ViolationDeduplicator
from .attendance.factory import FlagStrategyFactory
from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.session import SessionStateTracker
from .common.locks import KeyedLocks
from .core.settings import EngineSettings
from .database.connection import DBConfig, DatabaseConnection
from .database.seed import seed_users
from .geo.namer import LocationNamer
from .location.pushed_provider import PushedLocationHub
from .meetings.memory_meeting_repository import InMemoryMeetingRepository
from .meetings.mysql_meeting_repository import MySQLMeetingRepository
from .meetings.repository import MeetingRepository
from .meetings.service import MeetingService
from .reports.service import ActivityReportService
from .tracking.coordinator import TrackingCoordinator
from .tracking.scheduler import SamplingScheduler
from .users.memory_user_repository import InMemoryUserRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService

logger = logging.getLogger(__name__)

MEMORY = "memory"
MYSQL = "mysql"


@dataclass(frozen=True)
class Container:
    engine: EngineSettings
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    meetings_repo: MeetingRepository

    namer: LocationNamer
    location_hub: PushedLocationHub

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    meeting_service: MeetingService
    report_service: ActivityReportService
    scheduler: SamplingScheduler
    tracking: TrackingCoordinator


def build_container(
    *,
    backend: str = MEMORY,
    db_config: Optional[Mapping[str, Any]] = None,
    engine: Optional[EngineSettings] = None,
    seed_memory: bool = True,
) -> Container:
    engine = engine or EngineSettings()
    backend = (backend or MEMORY).lower()

    conn: Optional[DatabaseConnection] = None
    if backend == MYSQL:
        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql backend")
        conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
        users_repo: UserRepository = MySQLUserRepository(conn)
        attendance_repo: AttendanceRepository = MySQLAttendanceRepository(conn)
        meetings_repo: MeetingRepository = MySQLMeetingRepository(conn)
    elif backend == MEMORY:
        users_repo = InMemoryUserRepository()
        attendance_repo = InMemoryAttendanceRepository()
        meetings_repo = InMemoryMeetingRepository()
        if seed_memory:
            seed_users(users_repo, radius_meters=engine.territory_radius_meters)
    else:
        raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")

    namer = LocationNamer(engine.presets)
    hub = PushedLocationHub(max_age_seconds=engine.location_max_age_seconds)
    sessions = SessionStateTracker()

    classifier = AttendanceFlagClassifier(
        namer=namer,
        strategy_factory=FlagStrategyFactory(
            work_start_hour=engine.work_start_hour,
            late_grace_minutes=engine.late_grace_minutes,
        ),
    )
    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        classifier=classifier,
        deduplicator=ViolationDeduplicator(engine.violation_cooldown_seconds),
        session_tracker=sessions,
        locks=KeyedLocks(),
        location_timeout_seconds=engine.location_timeout_seconds,
    )
    scheduler = SamplingScheduler(
        attendance_service,
        interval_seconds=engine.periodic_interval_seconds,
        location_timeout_seconds=engine.location_timeout_seconds,
    )

    logger.info("Container ready (backend=%s)", backend)
    return Container(
        engine=engine,
        conn=conn,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        meetings_repo=meetings_repo,
        namer=namer,
        location_hub=hub,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, namer=namer, default_radius_meters=engine.territory_radius_meters),
        attendance_service=attendance_service,
        meeting_service=MeetingService(meetings_repo, users_repo, attendance_service, namer=namer),
        report_service=ActivityReportService(attendance_repo, meetings_repo, users_repo, session_tracker=sessions),
        scheduler=scheduler,
        tracking=TrackingCoordinator(attendance_service, scheduler, hub.for_user),
    )
