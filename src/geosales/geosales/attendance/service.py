from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.locks import KeyedLocks
from ..core.constants import DEFAULT_LOCATION_TIMEOUT_SECONDS, SOS_FALLBACK_LAT, SOS_FALLBACK_LNG
from ..core.enums import AttendanceFlag, AttendanceType, UserStatus
from ..core.exceptions import LocationUnavailable, NotFoundError, SessionClosed, ValidationError
from ..geo.model import Coordinate
from ..location.provider import LocationProvider
from ..location.service import acquire_fix, ensure_permission
from ..users.model import User
from ..users.repository import UserRepository
from .classifier import AttendanceFlagClassifier
from .dedup import ViolationDeduplicator
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .session import SessionStateTracker

logger = logging.getLogger(__name__)

AUTOMATED_ALERT_FLAGS = frozenset({AttendanceFlag.OUT_OF_TERRITORY, AttendanceFlag.AUTOMATED_ALERT})


def parse_flags(values: Iterable[AttendanceFlag | str]) -> frozenset[AttendanceFlag]:
    """Caller-supplied tags; anything outside the closed set is rejected."""
    try:
        return AttendanceFlag.parse_many(values, strict=True)
    except ValueError as e:
        raise ValidationError(f"Unknown attendance flag: {e}") from e


class AttendanceService:
    """Manual actions (punch, SOS) and the automated sample pipelines.

    Every read-decide-append sequence for one user runs under that user's
    lock. Location fixes are taken before the lock is acquired.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        classifier: AttendanceFlagClassifier,
        deduplicator: ViolationDeduplicator | None = None,
        session_tracker: SessionStateTracker | None = None,
        locks: KeyedLocks | None = None,
        location_timeout_seconds: float = DEFAULT_LOCATION_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._users = users
        self._classifier = classifier
        self._dedup = deduplicator or ViolationDeduplicator()
        self._sessions = session_tracker or SessionStateTracker()
        self._locks = locks or KeyedLocks()
        self._timeout = float(location_timeout_seconds)
        self._clock = clock

    @property
    def location_timeout_seconds(self) -> float:
        return self._timeout

    def _now(self, now: datetime | None) -> datetime:
        return now or self._clock()

    def _require_user(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    # ---- reads -------------------------------------------------------------

    def session_state(self, user_id: str, now: datetime | None = None) -> AttendanceType:
        return self._sessions.state_for(self._attendance.get_last_for_user(user_id), self._now(now))

    def is_checked_in(self, user_id: str, now: datetime | None = None) -> bool:
        return self.session_state(user_id, now) == AttendanceType.CHECKED_IN

    def next_punch_type(self, user_id: str, now: datetime | None = None) -> AttendanceType:
        return self.session_state(user_id, now).toggled()

    def history(self, user_id: Optional[str] = None) -> Sequence[AttendanceRecord]:
        return self._attendance.get_history(user_id)

    def recent_history(self, user_id: str, *, limit: int) -> list[AttendanceRecord]:
        """Newest first."""
        return list(reversed(self._attendance.get_history(user_id)))[: max(int(limit), 0)]

    # ---- writes ------------------------------------------------------------

    def _append(
        self,
        user: User,
        *,
        record_type: AttendanceType,
        point: Coordinate,
        now: datetime,
        explicit_flags: frozenset[AttendanceFlag] = frozenset(),
    ) -> AttendanceRecord:
        result = self._classifier.classify(
            territory=user.territory,
            point=point,
            now=now,
            record_type=record_type,
            explicit_flags=explicit_flags,
        )
        record = AttendanceRecord(
            record_id=uuid.uuid4().hex,
            user_id=user.user_id,
            user_name=user.name,
            timestamp=now,
            type=record_type,
            location=point,
            location_name=result.location_name,
            flags=result.flags,
        )
        self._attendance.append_record(record)
        logger.info(
            "Recorded %s for %s at %s [%s]",
            record.type.value,
            user.employee_id,
            record.location_name,
            ",".join(record.flag_values()),
        )
        return record

    def record_attendance(
        self,
        user_id: str,
        record_type: AttendanceType,
        point: Coordinate,
        *,
        explicit_flags: Iterable[AttendanceFlag | str] = (),
        now: datetime | None = None,
        update_location: bool = True,
    ) -> AttendanceRecord:
        """Append one classified record and refresh the user's live state.

        Status becomes active on CHECKED_IN and idle on CHECKED_OUT.
        """
        flags = parse_flags(explicit_flags)
        with self._locks.hold(user_id):
            user = self._require_user(user_id)
            now = self._now(now)
            record = self._append(user, record_type=record_type, point=point, now=now, explicit_flags=flags)

            changes: dict = {
                "status": UserStatus.ACTIVE if record_type == AttendanceType.CHECKED_IN else UserStatus.IDLE,
                "last_update": now,
            }
            if update_location:
                changes["current_location"] = point
            self._users.update_user(user_id, **changes)
            return record

    def punch(self, user_id: str, provider: LocationProvider, now: datetime | None = None) -> AttendanceRecord:
        """Manual check-in/out; the type toggles the current session state.

        PermissionDenied and LocationUnavailable propagate and nothing is written.
        """
        self._require_user(user_id)
        point = acquire_fix(provider, timeout_seconds=self._timeout, high_accuracy=True)

        with self._locks.hold(user_id):
            now = self._now(now)
            record_type = self._sessions.next_punch_type(self._attendance.get_last_for_user(user_id), now)
            return self.record_attendance(user_id, record_type, point, now=now)

    def trigger_sos(
        self,
        user_id: str,
        provider: LocationProvider,
        *,
        confirmed: bool,
        now: datetime | None = None,
    ) -> Optional[AttendanceRecord]:
        """Emergency record. Without a fix it is still sent, at (0, 0)."""
        if not confirmed:
            return None
        self._require_user(user_id)
        ensure_permission(provider)

        try:
            point = acquire_fix(provider, timeout_seconds=self._timeout, high_accuracy=True)
            flags = {AttendanceFlag.EMERGENCY_SOS}
            gps_ok = True
        except LocationUnavailable as e:
            logger.warning("SOS from %s without GPS fix: %s", user_id, e)
            point = Coordinate.of(SOS_FALLBACK_LAT, SOS_FALLBACK_LNG)
            flags = {AttendanceFlag.EMERGENCY_SOS, AttendanceFlag.GPS_FAIL_SOS}
            gps_ok = False

        record = self.record_attendance(
            user_id,
            AttendanceType.CHECKED_IN,
            point,
            explicit_flags=flags,
            now=now,
            update_location=gps_ok,
        )
        logger.warning("EMERGENCY SOS from %s at %s", record.user_name, record.location_name)
        return record

    # ---- automated pipelines ----------------------------------------------

    def _require_open_session(self, user_id: str, now: datetime) -> None:
        if not self._sessions.is_checked_in(self._attendance.get_last_for_user(user_id), now):
            raise SessionClosed(f"User {user_id} is not checked in")

    def handle_watch_sample(
        self,
        user_id: str,
        point: Coordinate,
        now: datetime | None = None,
    ) -> Optional[AttendanceRecord]:
        """Continuous-watch pipeline.

        Refreshes the live location; out of territory emits an automated alert
        unless one was raised within the cooldown. Raises SessionClosed once the
        session is no longer open.
        """
        with self._locks.hold(user_id):
            user = self._require_user(user_id)
            now = self._now(now)
            self._require_open_session(user_id, now)

            self._users.update_user(user_id, current_location=point, last_update=now, status=UserStatus.ACTIVE)

            flag, d = self._classifier.territory_flag(point, user.territory)
            if flag == AttendanceFlag.IN_TERRITORY:
                return None

            last = self._attendance.get_last_for_user(user_id)
            if self._dedup.is_recently_flagged(last, now):
                logger.debug("Suppressed repeat territory alert for %s (%.0f m out)", user.employee_id, d)
                return None

            return self._append(
                user,
                record_type=AttendanceType.CHECKED_IN,
                point=point,
                now=now,
                explicit_flags=AUTOMATED_ALERT_FLAGS,
            )

    def handle_periodic_sample(
        self,
        user_id: str,
        point: Coordinate,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Periodic poll: always emits PERIODIC_CHECK plus the territory flag."""
        with self._locks.hold(user_id):
            user = self._require_user(user_id)
            now = self._now(now)
            self._require_open_session(user_id, now)
            return self._append(
                user,
                record_type=AttendanceType.CHECKED_IN,
                point=point,
                now=now,
                explicit_flags=frozenset({AttendanceFlag.PERIODIC_CHECK}),
            )
