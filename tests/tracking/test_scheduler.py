import time

import pytest

from src.geosales.geosales.core.enums import AttendanceFlag, AttendanceType
from src.geosales.geosales.core.exceptions import LocationUnavailable
from src.geosales.geosales.location.fixed_provider import FixedPositionProvider
from src.geosales.geosales.location.pushed_provider import PushedLocationHub
from src.geosales.geosales.tracking.scheduler import SamplingScheduler


@pytest.fixture
def checked_in(service, center):
    service.record_attendance("u1", AttendanceType.CHECKED_IN, center)


def _with_flag(repo, flag):
    return [r for r in repo.get_history() if r.has_flag(flag)]


def test_watch_sample_outside_raises_automated_alert(service, attendance_repo, checked_in, outside, eventually):
    hub = PushedLocationHub()
    scheduler = SamplingScheduler(service, interval_seconds=60)
    handle = scheduler.start("u1", hub.for_user("u1"))
    try:
        assert hub.publish("u1", outside) == 1
        assert eventually(lambda: len(_with_flag(attendance_repo, AttendanceFlag.AUTOMATED_ALERT)) == 1)
    finally:
        scheduler.stop(handle)
        handle.join(1)


def test_periodic_poll_emits_until_stopped(service, attendance_repo, checked_in, center, eventually):
    scheduler = SamplingScheduler(service, interval_seconds=0.02, location_timeout_seconds=0.1)
    handle = scheduler.start("u1", FixedPositionProvider(center))

    assert eventually(lambda: len(_with_flag(attendance_repo, AttendanceFlag.PERIODIC_CHECK)) >= 2)
    scheduler.stop(handle)
    handle.join(1)

    count = len(attendance_repo.get_history())
    time.sleep(0.1)
    assert len(attendance_repo.get_history()) == count
    assert {AttendanceFlag.PERIODIC_CHECK, AttendanceFlag.IN_TERRITORY} <= attendance_repo.get_history()[-1].flags


def test_failed_poll_skips_the_tick(service, attendance_repo, checked_in):
    scheduler = SamplingScheduler(service, interval_seconds=0.02, location_timeout_seconds=0.01)
    handle = scheduler.start("u1", FixedPositionProvider(None))
    try:
        time.sleep(0.15)
        assert handle.active
        assert len(attendance_repo.get_history()) == 1
    finally:
        scheduler.stop(handle)
        handle.join(1)


def test_watch_error_keeps_watching(service, attendance_repo, checked_in, outside, eventually):
    hub = PushedLocationHub()
    scheduler = SamplingScheduler(service, interval_seconds=60)
    handle = scheduler.start("u1", hub.for_user("u1"))
    try:
        hub.publish_error("u1", LocationUnavailable("tunnel"))
        assert handle.active

        hub.publish("u1", outside)
        assert eventually(lambda: len(_with_flag(attendance_repo, AttendanceFlag.AUTOMATED_ALERT)) == 1)
    finally:
        scheduler.stop(handle)
        handle.join(1)


def test_closed_session_stops_sampling(service, attendance_repo, checked_in, center, outside, clock, eventually):
    hub = PushedLocationHub()
    scheduler = SamplingScheduler(service, interval_seconds=60)
    handle = scheduler.start("u1", hub.for_user("u1"))

    clock.advance(hours=1)
    service.record_attendance("u1", AttendanceType.CHECKED_OUT, center)
    hub.publish("u1", outside)

    assert eventually(lambda: not handle.active)
    handle.join(1)
    assert hub.subscriber_count("u1") == 0
    assert _with_flag(attendance_repo, AttendanceFlag.AUTOMATED_ALERT) == []


def test_midnight_rollover_stops_sampling(service, attendance_repo, checked_in, outside, clock, eventually):
    hub = PushedLocationHub()
    scheduler = SamplingScheduler(service, interval_seconds=60)
    handle = scheduler.start("u1", hub.for_user("u1"))

    clock.advance(days=1)
    hub.publish("u1", outside)

    assert eventually(lambda: not handle.active)
    handle.join(1)
    assert len(attendance_repo.get_history()) == 1


def test_stop_is_idempotent_and_silences_the_watch(service, attendance_repo, checked_in, outside):
    hub = PushedLocationHub()
    scheduler = SamplingScheduler(service, interval_seconds=60)
    handle = scheduler.start("u1", hub.for_user("u1"))

    assert handle.stop() is True
    assert handle.stop() is False
    scheduler.stop(handle)
    handle.join(1)

    assert hub.publish("u1", outside) == 0
    assert not handle.enqueue("watch", outside)
    assert len(attendance_repo.get_history()) == 1


def test_slow_fix_does_not_stretch_the_interval(service, attendance_repo, checked_in, center, slow_provider):
    scheduler = SamplingScheduler(service, interval_seconds=0.1, location_timeout_seconds=1)
    handle = scheduler.start("u1", slow_provider(center, delay=0.08))

    # drifting ticks would land every 0.18s, about 5 in a second
    time.sleep(1.0)
    scheduler.stop(handle)
    handle.join(1)

    assert len(_with_flag(attendance_repo, AttendanceFlag.PERIODIC_CHECK)) >= 7
