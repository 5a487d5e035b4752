from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from ...core.enums import AttendanceFlag, AttendanceType


@dataclass(frozen=True)
class FlagDecision:
    flags: frozenset[AttendanceFlag] = field(default_factory=frozenset)


class FlagStrategy(ABC):
    """Strategy Pattern: encapsulate which non-territory flags a record gets."""

    @abstractmethod
    def decide(
        self,
        *,
        now: datetime,
        record_type: AttendanceType,
        explicit_flags: Iterable[AttendanceFlag],
    ) -> FlagDecision:
        raise NotImplementedError
