from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..core.enums import AttendanceFlag, AttendanceType
from ..geo.model import Coordinate


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one immutable attendance event.

    Records are only ever appended; the session state is derived from them.
    """

    record_id: str
    user_id: str
    user_name: str
    timestamp: datetime
    type: AttendanceType
    location: Coordinate
    location_name: str
    flags: frozenset[AttendanceFlag] = field(default_factory=frozenset)

    def has_flag(self, flag: AttendanceFlag) -> bool:
        return flag in self.flags

    def flag_values(self) -> list[str]:
        return [f.value for f in AttendanceFlag.ordered(self.flags)]

    def as_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "location": self.location.as_dict(),
            "location_name": self.location_name,
            "flags": self.flag_values(),
        }
