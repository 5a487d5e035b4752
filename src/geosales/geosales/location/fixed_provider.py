from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.validators import coerce_float
from ..core.enums import LocationPermission
from ..core.exceptions import LocationUnavailable, PermissionDenied
from ..geo.model import Coordinate
from .provider import ErrorCallback, PositionCallback


class FixedPositionProvider:
    """One-shot provider for a fix that arrived together with a request.

    A missing coordinate behaves like a GPS that could not get a fix.
    It never delivers continuous updates.
    """

    def __init__(
        self,
        coordinate: Optional[Coordinate],
        *,
        permission: LocationPermission = LocationPermission.GRANTED,
    ):
        self._coordinate = coordinate
        self._permission = permission

    def request_permission(self) -> LocationPermission:
        return self._permission

    def get_current_position(self, *, timeout_seconds: float, high_accuracy: bool = True) -> Coordinate:
        if self._permission != LocationPermission.GRANTED:
            raise PermissionDenied("Location permission is required")
        if self._coordinate is None:
            raise LocationUnavailable("Unable to fetch GPS location")
        return self._coordinate

    def subscribe(
        self,
        callback: PositionCallback,
        *,
        high_accuracy: bool = True,
        on_error: Optional[ErrorCallback] = None,
    ) -> Any:
        return object()

    def unsubscribe(self, handle: Any) -> None:
        return None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "FixedPositionProvider":
        """Build from request data: lat/lng (both or neither) and an optional permission."""
        permission = LocationPermission.GRANTED
        if str(payload.get("permission") or "").strip().lower() == LocationPermission.DENIED.value:
            permission = LocationPermission.DENIED

        lat, lng = payload.get("lat"), payload.get("lng")
        if lat in (None, "") and lng in (None, ""):
            return cls(None, permission=permission)
        return cls(Coordinate.of(coerce_float(lat, "lat"), coerce_float(lng, "lng")), permission=permission)
