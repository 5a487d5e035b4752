from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Collection

from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_WORK_START_HOUR
from ..core.enums import AttendanceFlag, AttendanceType
from .strategies.base import FlagStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy
from .strategies.tagged_strategy import TaggedStrategy


@dataclass
class FlagStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    work_start_hour: int = DEFAULT_WORK_START_HOUR
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES

    def is_late(self, now: datetime) -> bool:
        # minute precision: 10:15:59 is still on time
        return now.hour > self.work_start_hour or (
            now.hour == self.work_start_hour and now.minute > self.late_grace_minutes
        )

    def for_sample(
        self,
        *,
        now: datetime,
        record_type: AttendanceType,
        explicit_flags: Collection[AttendanceFlag] = (),
    ) -> FlagStrategy:
        if explicit_flags:
            return TaggedStrategy()
        if record_type == AttendanceType.CHECKED_IN and self.is_late(now):
            return LateStrategy()
        return NormalStrategy()
