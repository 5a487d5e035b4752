from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from ..core.enums import AttendanceFlag, AttendanceType
from ..geo.distance import distance
from ..geo.model import Coordinate, Territory
from ..geo.namer import LocationNamer
from .factory import FlagStrategyFactory


@dataclass(frozen=True)
class Classification:
    flags: frozenset[AttendanceFlag]
    location_name: str
    in_territory: bool
    distance_meters: float


class AttendanceFlagClassifier:
    """Tags a sample: one territory flag, strategy flags and a location name."""

    def __init__(self, *, namer: LocationNamer, strategy_factory: FlagStrategyFactory | None = None):
        self._namer = namer
        self._factory = strategy_factory or FlagStrategyFactory()

    def territory_flag(self, point: Coordinate, territory: Territory) -> tuple[AttendanceFlag, float]:
        d = distance(point, territory.center)
        if d <= territory.radius_meters:
            return AttendanceFlag.IN_TERRITORY, d
        return AttendanceFlag.OUT_OF_TERRITORY, d

    def classify(
        self,
        *,
        territory: Territory,
        point: Coordinate,
        now: datetime,
        record_type: AttendanceType,
        explicit_flags: Iterable[AttendanceFlag] = (),
    ) -> Classification:
        explicit = frozenset(explicit_flags)
        strategy = self._factory.for_sample(now=now, record_type=record_type, explicit_flags=explicit)
        decision = strategy.decide(now=now, record_type=record_type, explicit_flags=explicit)

        flag, d = self.territory_flag(point, territory)
        return Classification(
            flags=decision.flags | {flag},
            location_name=self._namer.name_for(point),
            in_territory=flag == AttendanceFlag.IN_TERRITORY,
            distance_meters=d,
        )
