from __future__ import annotations

import bisect
import threading
from typing import Optional, Sequence

from .model import AttendanceRecord
from .repository import AttendanceRepository


class InMemoryAttendanceRepository(AttendanceRepository):
    def __init__(self, records: Sequence[AttendanceRecord] = ()):
        self._lock = threading.Lock()
        self._records: list[AttendanceRecord] = []
        self._keys: list[tuple] = []
        self._seq = 0
        for r in records:
            self._insert(r)

    def _insert(self, record: AttendanceRecord) -> None:
        # (timestamp, seq) keeps the sort stable for equal timestamps
        self._seq += 1
        key = (record.timestamp, self._seq)
        idx = bisect.bisect_right(self._keys, key)
        self._keys.insert(idx, key)
        self._records.insert(idx, record)

    def get_history(self, user_id: Optional[str] = None) -> Sequence[AttendanceRecord]:
        with self._lock:
            if user_id is None:
                return list(self._records)
            return [r for r in self._records if r.user_id == user_id]

    def append_record(self, record: AttendanceRecord) -> Sequence[AttendanceRecord]:
        with self._lock:
            self._insert(record)
            return list(self._records)

    def get_last_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        with self._lock:
            for r in reversed(self._records):
                if r.user_id == user_id:
                    return r
        return None
