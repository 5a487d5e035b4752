from __future__ import annotations

from datetime import datetime
from typing import Iterable

from ...core.enums import AttendanceFlag, AttendanceType
from .base import FlagDecision, FlagStrategy


class NormalStrategy(FlagStrategy):
    """On-time check-in or any check-out: nothing beyond the territory flag."""

    def decide(
        self,
        *,
        now: datetime,
        record_type: AttendanceType,
        explicit_flags: Iterable[AttendanceFlag],
    ) -> FlagDecision:
        return FlagDecision()
