from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..attendance.session import SessionStateTracker
from ..core.enums import AttendanceFlag, AttendanceType, Role
from ..core.exceptions import ValidationError
from ..meetings.repository import MeetingRepository
from ..users.repository import UserRepository

ATTENDANCE = "ATTENDANCE"
MEETING = "MEETING"


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]
    totals: dict


class ActivityReportService:
    """Admin read side: activity timeline, per-salesman summary and alerts."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        meetings: MeetingRepository,
        users: UserRepository,
        *,
        session_tracker: SessionStateTracker | None = None,
    ):
        self._attendance = attendance
        self._meetings = meetings
        self._users = users
        self._sessions = session_tracker or SessionStateTracker()

    def build_activity_report(
        self,
        *,
        start: date,
        end: date,
        user_id: Optional[str] = None,
    ) -> ReportData:
        """Attendance and meetings between start and end (whole days, inclusive).

        Rows are newest first. Violations count records flagged OUT_OF_TERRITORY.
        """
        if end < start:
            raise ValidationError("End date must not be before start date")
        lo = datetime.combine(start, time.min)
        hi = datetime.combine(end, time.max)

        rows: list[dict] = []
        for r in self._attendance.get_history(user_id):
            if lo <= r.timestamp <= hi:
                row = r.as_dict()
                row["log_type"] = ATTENDANCE
                row["_ts"] = r.timestamp
                rows.append(row)
        for m in self._meetings.get_meetings(user_id):
            if lo <= m.timestamp <= hi:
                row = m.as_dict()
                row["log_type"] = MEETING
                row["_ts"] = m.timestamp
                rows.append(row)
        rows.sort(key=lambda row: row["_ts"], reverse=True)
        for row in rows:
            del row["_ts"]

        salesmen = [u for u in self._users.list_all() if u.role == Role.SALESMAN]
        if user_id is not None:
            salesmen = [u for u in salesmen if u.user_id == user_id]

        summary = []
        for u in salesmen:
            mine = [row for row in rows if row["user_id"] == u.user_id]
            summary.append(
                {
                    "user_id": u.user_id,
                    "name": u.name,
                    "employee_id": u.employee_id,
                    "attendance": sum(1 for row in mine if row["log_type"] == ATTENDANCE),
                    "meetings": sum(1 for row in mine if row["log_type"] == MEETING),
                    "violations": sum(1 for row in mine if _has(row, AttendanceFlag.OUT_OF_TERRITORY)),
                }
            )

        totals = {
            "attendance": sum(1 for row in rows if row["log_type"] == ATTENDANCE),
            "meetings": sum(1 for row in rows if row["log_type"] == MEETING),
            "violations": sum(1 for row in rows if _has(row, AttendanceFlag.OUT_OF_TERRITORY)),
            "sos": sum(1 for row in rows if _has(row, AttendanceFlag.EMERGENCY_SOS)),
        }
        return ReportData(rows=rows, summary=summary, totals=totals)

    def emergency_alerts(self) -> list[dict]:
        """Every SOS ever raised, newest first."""
        alerts = [r for r in self._attendance.get_history() if r.has_flag(AttendanceFlag.EMERGENCY_SOS)]
        return [r.as_dict() for r in reversed(alerts)]

    def find_unresolved_sessions(self, user_id: str, today: date) -> list[date]:
        """Past days whose last record left the user checked in.

        Those sessions were closed implicitly at midnight; nothing is written
        for them, they are only reported.
        """
        last_by_day: dict[date, AttendanceType] = {}
        for r in self._attendance.get_history(user_id):
            last_by_day[r.timestamp.date()] = r.type
        return sorted(d for d, t in last_by_day.items() if d < today and t == AttendanceType.CHECKED_IN)

    def live_board(self, now: datetime) -> list[dict]:
        """Salesmen with their live status and derived session state."""
        out = []
        for u in self._users.list_all():
            if u.role != Role.SALESMAN:
                continue
            view = u.public_view()
            view["session"] = self._sessions.state_for(self._attendance.get_last_for_user(u.user_id), now).value
            out.append(view)
        return out


def _has(row: dict, flag: AttendanceFlag) -> bool:
    return flag.value in (row.get("flags") or ())
