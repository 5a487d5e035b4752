from __future__ import annotations

import logging

from ..core.enums import LocationPermission
from ..core.exceptions import LocationError, LocationUnavailable, PermissionDenied
from ..geo.model import Coordinate
from .provider import LocationProvider

logger = logging.getLogger(__name__)


def ensure_permission(provider: LocationProvider) -> None:
    if provider.request_permission() != LocationPermission.GRANTED:
        raise PermissionDenied("Location permission is required")


def acquire_fix(provider: LocationProvider, *, timeout_seconds: float, high_accuracy: bool = True) -> Coordinate:
    """Permission check followed by a single bounded position request.

    Anything the provider raises that is not already a LocationError is
    reported as LocationUnavailable.
    """
    ensure_permission(provider)
    try:
        return provider.get_current_position(timeout_seconds=timeout_seconds, high_accuracy=high_accuracy)
    except LocationError:
        raise
    except Exception as e:
        logger.warning("Location provider failed: %s", e)
        raise LocationUnavailable(str(e) or "Location provider error") from e
