"""Location provider fed by samples that devices push over HTTP.

The server never talks to a GPS itself: the mobile client posts its position
(or the reason it has none) and the hub fans it out to whoever is watching
that user. One-shot requests accept a recent enough sample or wait for the
next one.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..core.constants import DEFAULT_LOCATION_MAX_AGE_SECONDS
from ..core.enums import LocationPermission
from ..core.exceptions import LocationError, LocationUnavailable, PermissionDenied
from ..geo.model import Coordinate
from .provider import ErrorCallback, PositionCallback

logger = logging.getLogger(__name__)


@dataclass
class _Subscriber:
    callback: PositionCallback
    on_error: Optional[ErrorCallback]


@dataclass
class _DeviceChannel:
    permission: LocationPermission = LocationPermission.GRANTED
    last_position: Optional[Coordinate] = None
    last_seen: float = 0.0
    version: int = 0
    subscribers: dict[int, _Subscriber] = field(default_factory=dict)


class PushedLocationHub:
    def __init__(
        self,
        *,
        max_age_seconds: float = DEFAULT_LOCATION_MAX_AGE_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self._max_age = float(max_age_seconds)
        self._monotonic = monotonic
        self._cond = threading.Condition()
        self._channels: dict[str, _DeviceChannel] = {}
        self._ids = itertools.count(1)

    def _channel(self, user_id: str) -> _DeviceChannel:
        ch = self._channels.get(user_id)
        if ch is None:
            ch = _DeviceChannel()
            self._channels[user_id] = ch
        return ch

    def for_user(self, user_id: str) -> "PushedLocationProvider":
        return PushedLocationProvider(self, str(user_id))

    def publish(self, user_id: str, coordinate: Coordinate) -> int:
        """Record a fresh position and deliver it. Returns the number of watchers notified."""
        with self._cond:
            ch = self._channel(user_id)
            ch.permission = LocationPermission.GRANTED
            ch.last_position = coordinate
            ch.last_seen = self._monotonic()
            ch.version += 1
            subscribers = list(ch.subscribers.values())
            self._cond.notify_all()

        for sub in subscribers:
            sub.callback(coordinate)
        return len(subscribers)

    def publish_error(self, user_id: str, error: LocationError) -> int:
        with self._cond:
            ch = self._channel(user_id)
            if isinstance(error, PermissionDenied):
                ch.permission = LocationPermission.DENIED
            subscribers = list(ch.subscribers.values())
            self._cond.notify_all()

        logger.info("Device of user %s reported location failure: %s", user_id, error)
        for sub in subscribers:
            if sub.on_error is not None:
                sub.on_error(error)
        return len(subscribers)

    def permission(self, user_id: str) -> LocationPermission:
        with self._cond:
            return self._channel(user_id).permission

    def wait_for_position(self, user_id: str, *, timeout_seconds: float) -> Coordinate:
        deadline = self._monotonic() + max(float(timeout_seconds), 0.0)
        with self._cond:
            ch = self._channel(user_id)
            if ch.permission != LocationPermission.GRANTED:
                raise PermissionDenied("Location permission was revoked on the device")
            if ch.last_position is not None and self._monotonic() - ch.last_seen <= self._max_age:
                return ch.last_position

            seen_version = ch.version
            while True:
                remaining = deadline - self._monotonic()
                if remaining <= 0:
                    raise LocationUnavailable(f"No position from device within {timeout_seconds:.0f}s")
                self._cond.wait(remaining)
                if ch.permission != LocationPermission.GRANTED:
                    raise PermissionDenied("Location permission was revoked on the device")
                if ch.version != seen_version and ch.last_position is not None:
                    return ch.last_position

    def add_subscriber(self, user_id: str, callback: PositionCallback, on_error: Optional[ErrorCallback]) -> int:
        with self._cond:
            sub_id = next(self._ids)
            self._channel(user_id).subscribers[sub_id] = _Subscriber(callback=callback, on_error=on_error)
            return sub_id

    def remove_subscriber(self, user_id: str, sub_id: int) -> None:
        with self._cond:
            self._channel(user_id).subscribers.pop(sub_id, None)

    def subscriber_count(self, user_id: str) -> int:
        with self._cond:
            return len(self._channel(user_id).subscribers)


class PushedLocationProvider:
    """LocationProvider view of one user's channel on the hub."""

    def __init__(self, hub: PushedLocationHub, user_id: str):
        self._hub = hub
        self._user_id = user_id

    def request_permission(self) -> LocationPermission:
        return self._hub.permission(self._user_id)

    def get_current_position(self, *, timeout_seconds: float, high_accuracy: bool = True) -> Coordinate:
        return self._hub.wait_for_position(self._user_id, timeout_seconds=timeout_seconds)

    def subscribe(
        self,
        callback: PositionCallback,
        *,
        high_accuracy: bool = True,
        on_error: Optional[ErrorCallback] = None,
    ) -> Any:
        return self._hub.add_subscriber(self._user_id, callback, on_error)

    def unsubscribe(self, handle: Any) -> None:
        self._hub.remove_subscriber(self._user_id, int(handle))
