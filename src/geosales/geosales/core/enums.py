from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "ADMIN"
    SALESMAN = "SALESMAN"


class UserStatus(str, Enum):
    """Live presence shown on the admin board."""

    ACTIVE = "active"
    IDLE = "idle"
    OFFLINE = "offline"


class AttendanceType(str, Enum):
    """Record type; also the two states of a derived session."""

    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"

    def toggled(self) -> "AttendanceType":
        if self is AttendanceType.CHECKED_IN:
            return AttendanceType.CHECKED_OUT
        return AttendanceType.CHECKED_IN


class AttendanceFlag(str, Enum):
    """Closed set of tags an attendance record may carry."""

    IN_TERRITORY = "IN_TERRITORY"
    OUT_OF_TERRITORY = "OUT_OF_TERRITORY"
    LATE_ARRIVAL = "LATE_ARRIVAL"
    PERIODIC_CHECK = "PERIODIC_CHECK"
    AUTOMATED_ALERT = "AUTOMATED_ALERT"
    EMERGENCY_SOS = "EMERGENCY_SOS"
    GPS_FAIL_SOS = "GPS_FAIL_SOS"

    @classmethod
    def parse_many(
        cls, values: Iterable["AttendanceFlag | str"], *, strict: bool = True
    ) -> frozenset["AttendanceFlag"]:
        """Parse raw tag strings; members pass through unchanged.

        strict=True raises ValueError on the first unknown tag (caller input);
        strict=False drops unknown tags with a warning (stored data).
        """
        out: set[AttendanceFlag] = set()
        for raw in values:
            if isinstance(raw, cls):
                out.add(raw)
                continue
            value = str(raw).strip()
            if not value:
                continue
            try:
                out.add(cls(value))
            except ValueError:
                if strict:
                    raise
                logger.warning("Ignoring unknown attendance flag %r", value)
        return frozenset(out)

    @classmethod
    def ordered(cls, flags: Iterable["AttendanceFlag"]) -> list["AttendanceFlag"]:
        order = list(cls)
        return sorted(set(flags), key=order.index)


class LocationPermission(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
