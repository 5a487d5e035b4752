from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Append-only attendance log.

    Histories are ascending by timestamp; records sharing a timestamp keep
    their insertion order.
    """

    def get_history(self, user_id: Optional[str] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def append_record(self, record: AttendanceRecord) -> Sequence[AttendanceRecord]:
        """Append and return the updated full history."""
        raise NotImplementedError

    def get_last_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError
