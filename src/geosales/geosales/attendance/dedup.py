from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_VIOLATION_COOLDOWN_SECONDS
from ..core.enums import AttendanceFlag
from .model import AttendanceRecord


class ViolationDeduplicator:
    """Suppresses repeat out-of-territory alerts within a cooldown window.

    Only the continuous-watch path consults it.
    """

    def __init__(self, cooldown_seconds: float = DEFAULT_VIOLATION_COOLDOWN_SECONDS):
        self._cooldown = timedelta(seconds=float(cooldown_seconds))

    @property
    def cooldown(self) -> timedelta:
        return self._cooldown

    def is_recently_flagged(self, last: Optional[AttendanceRecord], now: datetime) -> bool:
        if last is None or not last.has_flag(AttendanceFlag.OUT_OF_TERRITORY):
            return False
        return now - last.timestamp < self._cooldown

    def should_emit(self, last: Optional[AttendanceRecord], now: datetime) -> bool:
        return not self.is_recently_flagged(last, now)
