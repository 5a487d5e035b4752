from __future__ import annotations

from typing import Mapping, Union

from ..core.constants import (
    NAME_MATCH_RADIUS_METERS,
    NAME_SEARCH_CEILING_METERS,
    OFF_TERRITORY_LABEL,
    UNKNOWN_LOCATION_LABEL,
)
from .distance import distance
from .model import Coordinate

PresetPoint = Union[Coordinate, tuple[float, float]]


def _as_coordinate(value: PresetPoint) -> Coordinate:
    if isinstance(value, Coordinate):
        return value
    lat, lng = value
    return Coordinate.of(lat, lng)


def resolve_location_name(point: Coordinate, presets: Mapping[str, PresetPoint]) -> str:
    """Human label for a point: the nearest preset under 10 km, else off-territory.

    Presets are scanned in table order and only a strictly closer one replaces
    the current best, so the first preset wins ties.
    """
    nearest = UNKNOWN_LOCATION_LABEL
    min_distance = NAME_SEARCH_CEILING_METERS

    for name, coords in presets.items():
        d = distance(point, _as_coordinate(coords))
        if d < min_distance:
            min_distance = d
            nearest = name

    if min_distance < NAME_MATCH_RADIUS_METERS and nearest != UNKNOWN_LOCATION_LABEL:
        return nearest
    return OFF_TERRITORY_LABEL


class LocationNamer:
    """Binds a preset table so callers only pass the point."""

    def __init__(self, presets: Mapping[str, PresetPoint]):
        self._presets = {name: _as_coordinate(p) for name, p in presets.items()}

    @property
    def presets(self) -> Mapping[str, Coordinate]:
        return dict(self._presets)

    def preset(self, name: str) -> Coordinate | None:
        return self._presets.get(name)

    def name_for(self, point: Coordinate) -> str:
        return resolve_location_name(point, self._presets)
