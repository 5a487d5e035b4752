from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_TERRITORY_RADIUS_METERS


@dataclass(frozen=True)
class Coordinate:
    """A point in degrees. Range is not enforced (admin input is trusted as-is)."""

    lat: float
    lng: float

    @classmethod
    def of(cls, lat: float, lng: float) -> "Coordinate":
        return cls(lat=float(lat), lng=float(lng))

    def as_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Territory:
    """Circular zone a salesman is allowed to operate in."""

    center: Coordinate
    radius_meters: float = DEFAULT_TERRITORY_RADIUS_METERS

    def as_dict(self) -> dict:
        return {"center": self.center.as_dict(), "radius_meters": self.radius_meters}
