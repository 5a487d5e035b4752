from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from ..attendance.service import AttendanceService
from ..location.provider import LocationProvider
from .scheduler import SamplingHandle, SamplingScheduler

logger = logging.getLogger(__name__)


class TrackingCoordinator:
    """Keeps exactly one sampling session per checked-in user.

    sync() is called after every action that may change the session state
    (login, punch, SOS); it starts or stops sampling to match.
    """

    def __init__(
        self,
        service: AttendanceService,
        scheduler: SamplingScheduler,
        provider_for_user: Callable[[str], LocationProvider],
    ):
        self._service = service
        self._scheduler = scheduler
        self._provider_for_user = provider_for_user
        self._lock = threading.Lock()
        self._handles: dict[str, SamplingHandle] = {}

    def sync(self, user_id: str, now: Optional[datetime] = None) -> bool:
        """Returns whether the user is being tracked afterwards."""
        checked_in = self._service.is_checked_in(user_id, now)
        stale: Optional[SamplingHandle] = None

        with self._lock:
            handle = self._handles.get(user_id)
            if handle is not None and not handle.active:
                del self._handles[user_id]
                handle = None

            if checked_in and handle is None:
                self._handles[user_id] = self._scheduler.start(user_id, self._provider_for_user(user_id))
            elif not checked_in and handle is not None:
                stale = self._handles.pop(user_id)

        # stop() waits for an in-flight sample; never under self._lock
        if stale is not None:
            self._scheduler.stop(stale)
        return checked_in

    def stop(self, user_id: str) -> None:
        with self._lock:
            handle = self._handles.pop(user_id, None)
        self._scheduler.stop(handle)

    def stop_all(self, join_timeout: Optional[float] = None) -> None:
        """Stop every session and wait for its threads.

        A poller blocked in a fix gets the location timeout plus one second.
        """
        if join_timeout is None:
            join_timeout = self._scheduler.location_timeout_seconds + 1.0
        with self._lock:
            handles = list(self._handles.values())
            self._handles.clear()
        for h in handles:
            self._scheduler.stop(h)
        for h in handles:
            h.join(join_timeout)
        if handles:
            logger.info("Stopped %d sampling session(s)", len(handles))

    def is_tracking(self, user_id: str) -> bool:
        with self._lock:
            handle = self._handles.get(user_id)
            return handle is not None and handle.active

    def handle_for(self, user_id: str) -> Optional[SamplingHandle]:
        with self._lock:
            return self._handles.get(user_id)
