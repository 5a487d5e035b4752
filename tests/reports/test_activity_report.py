from datetime import date, datetime, timedelta

import pytest

from src.geosales.geosales.core.enums import AttendanceType
from src.geosales.geosales.core.exceptions import ValidationError
from src.geosales.geosales.geo.model import Coordinate
from src.geosales.geosales.meetings.memory_meeting_repository import InMemoryMeetingRepository
from src.geosales.geosales.meetings.model import MeetingRecord
from src.geosales.geosales.reports.service import ATTENDANCE, MEETING, ActivityReportService


@pytest.fixture
def meetings():
    return InMemoryMeetingRepository()


@pytest.fixture
def report_service(attendance_repo, meetings, users):
    return ActivityReportService(attendance_repo, meetings, users)


def _meeting(user_id, ts):
    return MeetingRecord(
        meeting_id=f"m-{ts:%H%M}",
        user_id=user_id,
        user_name="Rahul Sharma",
        client_name="Tata Motors",
        notes="",
        timestamp=ts,
        location=Coordinate(19.07, 72.87),
        location_name="Mumbai - Bandra",
    )


def test_report_merges_and_counts(report_service, service, meetings, center, outside, fixed_now):
    service.record_attendance("u1", AttendanceType.CHECKED_IN, center, now=fixed_now)
    service.handle_watch_sample("u1", outside, now=fixed_now + timedelta(minutes=5))
    service.record_attendance(
        "u1", AttendanceType.CHECKED_IN, outside, explicit_flags=["EMERGENCY_SOS"], now=fixed_now + timedelta(minutes=7)
    )
    meetings.add_meeting(_meeting("u1", fixed_now + timedelta(minutes=10)))

    data = report_service.build_activity_report(start=fixed_now.date(), end=fixed_now.date())

    assert [row["log_type"] for row in data.rows] == [MEETING, ATTENDANCE, ATTENDANCE, ATTENDANCE]
    assert data.totals == {"attendance": 3, "meetings": 1, "violations": 2, "sos": 1}
    assert data.summary == [
        {
            "user_id": "u1",
            "name": "Rahul Sharma",
            "employee_id": "EMP-MUM-001",
            "attendance": 3,
            "meetings": 1,
            "violations": 2,
        }
    ]


def test_report_window_is_inclusive_whole_days(report_service, service, center, fixed_now):
    service.record_attendance("u1", AttendanceType.CHECKED_IN, center, now=fixed_now - timedelta(days=2))
    service.record_attendance("u1", AttendanceType.CHECKED_IN, center, now=fixed_now.replace(hour=23, minute=59))

    data = report_service.build_activity_report(start=fixed_now.date(), end=fixed_now.date())
    assert data.totals["attendance"] == 1


def test_report_rejects_reversed_range(report_service):
    with pytest.raises(ValidationError):
        report_service.build_activity_report(start=date(2025, 3, 10), end=date(2025, 3, 9))


def test_emergency_alerts_newest_first(report_service, service, center, fixed_now):
    service.record_attendance("u1", AttendanceType.CHECKED_IN, center, explicit_flags=["EMERGENCY_SOS"], now=fixed_now)
    later = service.record_attendance(
        "u1",
        AttendanceType.CHECKED_IN,
        Coordinate(0.0, 0.0),
        explicit_flags=["EMERGENCY_SOS", "GPS_FAIL_SOS"],
        now=fixed_now + timedelta(hours=1),
    )

    alerts = report_service.emergency_alerts()
    assert [a["record_id"] for a in alerts][0] == later.record_id
    assert len(alerts) == 2


def test_unresolved_sessions_are_reported_not_closed(report_service, service, attendance_repo, center):
    service.record_attendance("u1", AttendanceType.CHECKED_IN, center, now=datetime(2025, 3, 8, 10, 0))
    service.record_attendance("u1", AttendanceType.CHECKED_IN, center, now=datetime(2025, 3, 9, 10, 0))
    service.record_attendance("u1", AttendanceType.CHECKED_OUT, center, now=datetime(2025, 3, 9, 18, 0))

    assert report_service.find_unresolved_sessions("u1", date(2025, 3, 10)) == [date(2025, 3, 8)]
    assert len(attendance_repo.get_history("u1")) == 3


def test_live_board_derives_session(report_service, service, center, fixed_now):
    service.record_attendance("u1", AttendanceType.CHECKED_IN, center, now=fixed_now)

    board = report_service.live_board(fixed_now)
    assert [row["user_id"] for row in board] == ["u1"]
    assert board[0]["session"] == "CHECKED_IN"
    assert board[0]["status"] == "active"

    assert report_service.live_board(fixed_now + timedelta(days=1))[0]["session"] == "CHECKED_OUT"
