from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import same_local_day
from ..core.enums import AttendanceType
from .model import AttendanceRecord


class SessionStateTracker:
    """Derives CHECKED_IN / CHECKED_OUT from the last record; never stored.

    A check-in left open on an earlier day counts as checked out; no closing
    record is written for it.
    """

    def state_for(self, last: Optional[AttendanceRecord], now: datetime) -> AttendanceType:
        if last is None:
            return AttendanceType.CHECKED_OUT
        if last.type == AttendanceType.CHECKED_IN and same_local_day(last.timestamp, now):
            return AttendanceType.CHECKED_IN
        return AttendanceType.CHECKED_OUT

    def from_history(self, history: Sequence[AttendanceRecord], now: datetime) -> AttendanceType:
        return self.state_for(history[-1] if history else None, now)

    def is_checked_in(self, last: Optional[AttendanceRecord], now: datetime) -> bool:
        return self.state_for(last, now) == AttendanceType.CHECKED_IN

    def next_punch_type(self, last: Optional[AttendanceRecord], now: datetime) -> AttendanceType:
        return self.state_for(last, now).toggled()
