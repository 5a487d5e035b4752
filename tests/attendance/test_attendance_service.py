import threading
from datetime import datetime, timedelta

import pytest

from src.geosales.geosales.core.enums import (
    AttendanceFlag,
    AttendanceType,
    LocationPermission,
    UserStatus,
)
from src.geosales.geosales.core.exceptions import (
    LocationUnavailable,
    NotFoundError,
    PermissionDenied,
    SessionClosed,
    ValidationError,
)
from src.geosales.geosales.geo.model import Coordinate
from src.geosales.geosales.location.fixed_provider import FixedPositionProvider

F = AttendanceFlag


def _check_in(service, center, now):
    return service.record_attendance("u1", AttendanceType.CHECKED_IN, center, now=now)


def test_punch_toggles_between_checkin_and_checkout(service, users, center, clock):
    first = service.punch("u1", FixedPositionProvider(center))
    assert first.type == AttendanceType.CHECKED_IN
    assert users.get_by_id("u1").status == UserStatus.ACTIVE
    assert users.get_by_id("u1").current_location == center

    clock.advance(hours=8)
    second = service.punch("u1", FixedPositionProvider(center))
    assert second.type == AttendanceType.CHECKED_OUT
    assert users.get_by_id("u1").status == UserStatus.IDLE
    assert users.get_by_id("u1").last_update == clock.now


def test_punch_with_permission_denied_writes_nothing(service, attendance_repo, center):
    provider = FixedPositionProvider(center, permission=LocationPermission.DENIED)
    with pytest.raises(PermissionDenied):
        service.punch("u1", provider)
    assert attendance_repo.get_history() == []


def test_punch_without_fix_writes_nothing(service, attendance_repo):
    with pytest.raises(LocationUnavailable):
        service.punch("u1", FixedPositionProvider(None))
    assert attendance_repo.get_history() == []


def test_late_punch_is_flagged(service, center, clock):
    clock.now = clock.now.replace(hour=10, minute=20)
    record = service.punch("u1", FixedPositionProvider(center))
    assert record.flags == {F.IN_TERRITORY, F.LATE_ARRIVAL}


def test_unknown_user_is_rejected(service, center):
    with pytest.raises(NotFoundError):
        service.punch("ghost", FixedPositionProvider(center))


def test_unknown_flag_from_caller_is_rejected(service, center):
    with pytest.raises(ValidationError):
        service.record_attendance("u1", AttendanceType.CHECKED_IN, center, explicit_flags=["BOGUS"])


def test_unconfirmed_sos_is_a_noop(service, attendance_repo, center):
    assert service.trigger_sos("u1", FixedPositionProvider(center), confirmed=False) is None
    assert attendance_repo.get_history() == []


def test_sos_with_fix(service, outside):
    record = service.trigger_sos("u1", FixedPositionProvider(outside), confirmed=True)
    assert record.type == AttendanceType.CHECKED_IN
    assert record.flags == {F.EMERGENCY_SOS, F.OUT_OF_TERRITORY}
    assert record.location == outside


def test_sos_with_gps_failure_is_still_sent(service, attendance_repo, users, center):
    _check_in(service, center, None)
    record = service.trigger_sos("u1", FixedPositionProvider(None), confirmed=True)

    assert record.location == Coordinate(0.0, 0.0)
    assert {F.EMERGENCY_SOS, F.GPS_FAIL_SOS} <= record.flags
    assert record.location_name == "Off-Territory Area"
    sos = [r for r in attendance_repo.get_history() if r.has_flag(F.EMERGENCY_SOS)]
    assert len(sos) == 1
    # last known position is kept rather than replaced by (0, 0)
    assert users.get_by_id("u1").current_location == center


def test_sos_with_permission_denied_raises(service, attendance_repo, center):
    provider = FixedPositionProvider(center, permission=LocationPermission.DENIED)
    with pytest.raises(PermissionDenied):
        service.trigger_sos("u1", provider, confirmed=True)
    assert attendance_repo.get_history() == []


def test_watch_sample_requires_open_session(service, outside):
    with pytest.raises(SessionClosed):
        service.handle_watch_sample("u1", outside)


def test_watch_sample_in_territory_only_refreshes_location(service, attendance_repo, users, center, clock):
    _check_in(service, center, None)
    clock.advance(minutes=5)
    inside = Coordinate(19.08, 72.88)

    assert service.handle_watch_sample("u1", inside) is None
    assert len(attendance_repo.get_history()) == 1
    user = users.get_by_id("u1")
    assert user.current_location == inside
    assert user.last_update == clock.now
    assert user.status == UserStatus.ACTIVE


def test_watch_violation_is_deduplicated_within_cooldown(service, attendance_repo, center, outside, clock):
    _check_in(service, center, None)

    clock.advance(minutes=1)
    first = service.handle_watch_sample("u1", outside)
    assert first.flags == {F.OUT_OF_TERRITORY, F.AUTOMATED_ALERT}
    assert first.type == AttendanceType.CHECKED_IN

    clock.advance(minutes=10)
    assert service.handle_watch_sample("u1", outside) is None

    clock.advance(minutes=5)
    again = service.handle_watch_sample("u1", outside)
    assert again is not None
    alerts = [r for r in attendance_repo.get_history() if r.has_flag(F.AUTOMATED_ALERT)]
    assert len(alerts) == 2


def test_periodic_checks_are_never_suppressed(service, attendance_repo, center, outside, clock):
    _check_in(service, center, None)
    clock.advance(minutes=1)
    service.handle_watch_sample("u1", outside)

    clock.advance(seconds=30)
    p1 = service.handle_periodic_sample("u1", outside)
    clock.advance(seconds=30)
    p2 = service.handle_periodic_sample("u1", outside)

    assert p1.flags == {F.PERIODIC_CHECK, F.OUT_OF_TERRITORY}
    assert p2.flags == {F.PERIODIC_CHECK, F.OUT_OF_TERRITORY}
    history = attendance_repo.get_history()
    assert len(history) == 4
    assert [r.record_id for r in history[-2:]] == [p1.record_id, p2.record_id]

    clock.advance(seconds=30)
    p3 = service.handle_periodic_sample("u1", center)
    assert p3.flags == {F.PERIODIC_CHECK, F.IN_TERRITORY}


def test_periodic_check_after_checkout_is_dropped(service, attendance_repo, center, clock):
    _check_in(service, center, None)
    clock.advance(hours=1)
    service.record_attendance("u1", AttendanceType.CHECKED_OUT, center)

    with pytest.raises(SessionClosed):
        service.handle_periodic_sample("u1", center)
    assert len(attendance_repo.get_history()) == 2


def test_yesterdays_checkin_is_forgiven_without_a_synthetic_record(service, attendance_repo, center, clock):
    _check_in(service, center, clock.now - timedelta(days=1))

    assert service.session_state("u1") == AttendanceType.CHECKED_OUT
    assert service.next_punch_type("u1") == AttendanceType.CHECKED_IN
    assert len(attendance_repo.get_history()) == 1

    record = service.punch("u1", FixedPositionProvider(center))
    assert record.type == AttendanceType.CHECKED_IN


def test_concurrent_watch_samples_raise_a_single_alert(service, attendance_repo, center, outside, clock):
    _check_in(service, center, None)
    clock.advance(minutes=1)
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        service.handle_watch_sample("u1", outside)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    alerts = [r for r in attendance_repo.get_history() if r.has_flag(F.AUTOMATED_ALERT)]
    assert len(alerts) == 1


def test_recent_history_is_newest_first(service, center, clock):
    for _ in range(3):
        service.punch("u1", FixedPositionProvider(center))
        clock.advance(minutes=1)

    recent = service.recent_history("u1", limit=2)
    assert [r.type for r in recent] == [AttendanceType.CHECKED_IN, AttendanceType.CHECKED_OUT]
    assert recent[0].timestamp > recent[1].timestamp
