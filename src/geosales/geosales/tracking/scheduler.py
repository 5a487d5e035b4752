"""Background sampling for one checked-in user.

Two producers feed a single consumer thread per session: the device watch
callback and a fixed-interval poller. The consumer runs the attendance
pipelines one sample at a time, so a user's samples never race each other.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Optional

from ..attendance.service import AttendanceService
from ..core.constants import DEFAULT_PERIODIC_INTERVAL_SECONDS
from ..core.exceptions import LocationError, SessionClosed
from ..geo.model import Coordinate
from ..location.provider import LocationProvider
from ..location.service import acquire_fix

logger = logging.getLogger(__name__)

WATCH = "watch"
PERIODIC = "periodic"

_STOP = object()


@dataclass(frozen=True)
class Sample:
    kind: str
    point: Coordinate


class SamplingHandle:
    """A running sampling session. stop() is idempotent and safe from any thread."""

    def __init__(self, user_id: str, provider: LocationProvider):
        self.user_id = user_id
        self._provider = provider
        self._queue: queue.Queue = queue.Queue()
        self._stopped = threading.Event()
        self._state_lock = threading.Lock()
        # held while a sample is processed; stop() waits on it
        self._processing = threading.RLock()
        self._subscription: Any = None
        self._threads: list[threading.Thread] = []

    @property
    def active(self) -> bool:
        return not self._stopped.is_set()

    def enqueue(self, kind: str, point: Coordinate) -> bool:
        if self._stopped.is_set():
            return False
        self._queue.put(Sample(kind=kind, point=point))
        return True

    def stop(self) -> bool:
        """Returns False when the handle was already stopped."""
        with self._state_lock:
            if self._stopped.is_set():
                return False
            self._stopped.set()

        if self._subscription is not None:
            try:
                self._provider.unsubscribe(self._subscription)
            except Exception:
                logger.exception("Failed to cancel location watch for %s", self.user_id)

        with self._processing:
            pass

        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
                dropped += 1
            except queue.Empty:
                break
        self._queue.put(_STOP)

        logger.info("Sampling stopped for %s (%d queued samples discarded)", self.user_id, dropped)
        return True

    def is_alive(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def join(self, timeout: Optional[float] = None) -> None:
        for t in self._threads:
            if t is not threading.current_thread():
                t.join(timeout)


class SamplingScheduler:
    def __init__(
        self,
        service: AttendanceService,
        *,
        interval_seconds: float = DEFAULT_PERIODIC_INTERVAL_SECONDS,
        location_timeout_seconds: Optional[float] = None,
    ):
        self._service = service
        self._interval = float(interval_seconds)
        self._timeout = (
            float(location_timeout_seconds)
            if location_timeout_seconds is not None
            else service.location_timeout_seconds
        )

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def location_timeout_seconds(self) -> float:
        return self._timeout

    def start(self, user_id: str, provider: LocationProvider) -> SamplingHandle:
        handle = SamplingHandle(user_id, provider)

        def on_position(point: Coordinate) -> None:
            handle.enqueue(WATCH, point)

        def on_error(error: LocationError) -> None:
            logger.warning("Location watch error for %s: %s", user_id, error)

        handle._subscription = provider.subscribe(on_position, high_accuracy=True, on_error=on_error)
        handle._threads = [
            threading.Thread(target=self._consume, args=(handle,), name=f"sampling-{user_id}", daemon=True),
            threading.Thread(target=self._poll, args=(handle,), name=f"periodic-{user_id}", daemon=True),
        ]
        for t in handle._threads:
            t.start()

        logger.info("Sampling started for %s (periodic every %.0fs)", user_id, self._interval)
        return handle

    def stop(self, handle: Optional[SamplingHandle]) -> None:
        if handle is not None:
            handle.stop()

    def _poll(self, handle: SamplingHandle) -> None:
        """Fixed cadence: ticks are scheduled from the start, not from the last fix."""
        next_tick = time.monotonic()
        while True:
            next_tick += self._interval
            if handle._stopped.wait(max(next_tick - time.monotonic(), 0.0)):
                return
            try:
                point = acquire_fix(handle._provider, timeout_seconds=self._timeout, high_accuracy=True)
            except LocationError as e:
                logger.debug("Periodic check for %s skipped: %s", handle.user_id, e)
            else:
                handle.enqueue(PERIODIC, point)

            # a fix that overran whole intervals drops those ticks
            now = time.monotonic()
            while next_tick + self._interval < now:
                next_tick += self._interval

    def _consume(self, handle: SamplingHandle) -> None:
        while True:
            item = handle._queue.get()
            if item is _STOP:
                return
            with handle._processing:
                if handle._stopped.is_set():
                    return
                self._process(handle, item)

    def _process(self, handle: SamplingHandle, sample: Sample) -> None:
        try:
            if sample.kind == WATCH:
                self._service.handle_watch_sample(handle.user_id, sample.point)
            else:
                self._service.handle_periodic_sample(handle.user_id, sample.point)
        except SessionClosed:
            logger.info("Session of %s is closed; sampling ends", handle.user_id)
            handle.stop()
        except Exception:
            logger.exception("Failed to process %s sample for %s", sample.kind, handle.user_id)
