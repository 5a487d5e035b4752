from datetime import datetime

from src.geosales.geosales.attendance.classifier import AttendanceFlagClassifier
from src.geosales.geosales.core.enums import AttendanceFlag, AttendanceType
from src.geosales.geosales.geo.model import Coordinate, Territory

F = AttendanceFlag


def _classify(namer, point, now, record_type=AttendanceType.CHECKED_IN, explicit=()):
    territory = Territory(center=Coordinate(19.0760, 72.8777), radius_meters=10_000.0)
    return AttendanceFlagClassifier(namer=namer).classify(
        territory=territory,
        point=point,
        now=now,
        record_type=record_type,
        explicit_flags=explicit,
    )


def test_checkin_at_1020_is_late(namer):
    result = _classify(namer, Coordinate(19.0760, 72.8777), datetime(2025, 1, 1, 10, 20))
    assert result.flags == {F.IN_TERRITORY, F.LATE_ARRIVAL}


def test_checkin_at_1014_is_on_time(namer):
    result = _classify(namer, Coordinate(19.0760, 72.8777), datetime(2025, 1, 1, 10, 14))
    assert result.flags == {F.IN_TERRITORY}


def test_known_outside_point_is_out_of_territory(namer):
    result = _classify(namer, Coordinate(19.20, 72.90), datetime(2025, 1, 1, 9, 0))
    assert result.flags == {F.OUT_OF_TERRITORY}
    assert not result.in_territory
    assert 13_500 < result.distance_meters < 14_500


def test_explicit_flags_disable_late_rule(namer):
    result = _classify(
        namer,
        Coordinate(19.0760, 72.8777),
        datetime(2025, 1, 1, 15, 0),
        explicit=(F.PERIODIC_CHECK,),
    )
    assert result.flags == {F.PERIODIC_CHECK, F.IN_TERRITORY}


def test_exactly_one_territory_flag(namer):
    result = _classify(
        namer,
        Coordinate(19.20, 72.90),
        datetime(2025, 1, 1, 12, 0),
        explicit=(F.OUT_OF_TERRITORY, F.AUTOMATED_ALERT),
    )
    assert result.flags == {F.OUT_OF_TERRITORY, F.AUTOMATED_ALERT}
    assert F.IN_TERRITORY not in result.flags


def test_location_name_is_resolved(namer):
    result = _classify(namer, Coordinate(19.1136, 72.8697), datetime(2025, 1, 1, 9, 0))
    assert result.location_name == "Mumbai - Andheri"


def test_checkout_after_hours_has_no_late_flag(namer):
    result = _classify(namer, Coordinate(19.0760, 72.8777), datetime(2025, 1, 1, 19, 0), AttendanceType.CHECKED_OUT)
    assert result.flags == {F.IN_TERRITORY}
