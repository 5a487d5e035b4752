from __future__ import annotations

import threading
from typing import Optional, Sequence

from .model import MeetingRecord
from .repository import MeetingRepository


class InMemoryMeetingRepository(MeetingRepository):
    def __init__(self, meetings: Sequence[MeetingRecord] = ()):
        self._lock = threading.Lock()
        self._meetings: list[MeetingRecord] = sorted(meetings, key=lambda m: m.timestamp)

    def get_meetings(self, user_id: Optional[str] = None) -> Sequence[MeetingRecord]:
        with self._lock:
            if user_id is None:
                return list(self._meetings)
            return [m for m in self._meetings if m.user_id == user_id]

    def add_meeting(self, meeting: MeetingRecord) -> Sequence[MeetingRecord]:
        with self._lock:
            self._meetings.append(meeting)
            # sort() is stable, so equal timestamps keep insertion order
            self._meetings.sort(key=lambda m: m.timestamp)
            return list(self._meetings)
