from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from ..core.enums import LocationPermission
from ..core.exceptions import LocationError
from ..geo.model import Coordinate

PositionCallback = Callable[[Coordinate], None]
ErrorCallback = Callable[[LocationError], None]


class LocationProvider(Protocol):
    """Device location collaborator for one user's device.

    get_current_position raises PermissionDenied or LocationUnavailable;
    it must give up after timeout_seconds.
    """

    def request_permission(self) -> LocationPermission:
        raise NotImplementedError

    def get_current_position(self, *, timeout_seconds: float, high_accuracy: bool = True) -> Coordinate:
        raise NotImplementedError

    def subscribe(
        self,
        callback: PositionCallback,
        *,
        high_accuracy: bool = True,
        on_error: Optional[ErrorCallback] = None,
    ) -> Any:
        raise NotImplementedError

    def unsubscribe(self, handle: Any) -> None:
        raise NotImplementedError
