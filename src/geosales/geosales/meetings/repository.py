from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MeetingRecord


class MeetingRepository(Protocol):
    def get_meetings(self, user_id: Optional[str] = None) -> Sequence[MeetingRecord]:
        """Ascending by timestamp."""
        raise NotImplementedError

    def add_meeting(self, meeting: MeetingRecord) -> Sequence[MeetingRecord]:
        raise NotImplementedError
