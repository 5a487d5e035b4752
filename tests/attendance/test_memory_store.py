from dataclasses import replace
from datetime import datetime

from src.geosales.geosales.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from src.geosales.geosales.attendance.model import AttendanceRecord
from src.geosales.geosales.core.enums import AttendanceFlag, AttendanceType
from src.geosales.geosales.geo.model import Coordinate


def _record(record_id, user_id, ts):
    return AttendanceRecord(
        record_id=record_id,
        user_id=user_id,
        user_name=user_id,
        timestamp=ts,
        type=AttendanceType.CHECKED_IN,
        location=Coordinate(0.0, 0.0),
        location_name="Off-Territory Area",
        flags=frozenset({AttendanceFlag.OUT_OF_TERRITORY}),
    )


def test_history_is_ordered_by_timestamp_then_insertion():
    repo = InMemoryAttendanceRepository()
    t = datetime(2025, 1, 1, 12, 0)

    repo.append_record(_record("late", "u1", datetime(2025, 1, 1, 13, 0)))
    repo.append_record(_record("tie-a", "u1", t))
    history = repo.append_record(_record("tie-b", "u2", t))

    assert [r.record_id for r in history] == ["tie-a", "tie-b", "late"]


def test_history_filters_by_user_and_last_record():
    repo = InMemoryAttendanceRepository()
    repo.append_record(_record("a", "u1", datetime(2025, 1, 1, 9, 0)))
    repo.append_record(_record("b", "u2", datetime(2025, 1, 1, 10, 0)))
    repo.append_record(_record("c", "u1", datetime(2025, 1, 1, 11, 0)))

    assert [r.record_id for r in repo.get_history("u1")] == ["a", "c"]
    assert repo.get_last_for_user("u1").record_id == "c"
    assert repo.get_last_for_user("nobody") is None


def test_flag_values_follow_enum_order():
    record = _record("a", "u1", datetime(2025, 1, 1, 9, 0))
    record = replace(record, flags=frozenset({AttendanceFlag.AUTOMATED_ALERT, AttendanceFlag.OUT_OF_TERRITORY}))
    assert record.flag_values() == ["OUT_OF_TERRITORY", "AUTOMATED_ALERT"]
    assert record.as_dict()["flags"] == ["OUT_OF_TERRITORY", "AUTOMATED_ALERT"]


def test_parse_many_accepts_members_and_strings():
    parsed = AttendanceFlag.parse_many([AttendanceFlag.EMERGENCY_SOS, " GPS_FAIL_SOS ", ""])
    assert parsed == {AttendanceFlag.EMERGENCY_SOS, AttendanceFlag.GPS_FAIL_SOS}


def test_parse_many_lenient_mode_drops_unknown_tags():
    assert AttendanceFlag.parse_many(["PERIODIC_CHECK", "SNOOZED"], strict=False) == {AttendanceFlag.PERIODIC_CHECK}
