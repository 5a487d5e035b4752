from __future__ import annotations

from datetime import datetime
from typing import Iterable

from ...core.enums import AttendanceFlag, AttendanceType
from .base import FlagDecision, FlagStrategy


class TaggedStrategy(FlagStrategy):
    """Records emitted by the engine itself (periodic, automated, SOS).

    The caller's tags are kept as given and the lateness rule does not apply.
    """

    def decide(
        self,
        *,
        now: datetime,
        record_type: AttendanceType,
        explicit_flags: Iterable[AttendanceFlag],
    ) -> FlagDecision:
        return FlagDecision(flags=frozenset(explicit_flags))
