from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from ..geo.model import Coordinate
from .model import MeetingRecord
from .repository import MeetingRepository

_SELECT = """
    SELECT meeting_id, user_id, user_name, client_name, notes, recorded_at, lat, lng, location_name
    FROM meetings
"""
_ORDER = " ORDER BY recorded_at ASC, seq ASC"


def _row_to_meeting(r: dict) -> MeetingRecord:
    return MeetingRecord(
        meeting_id=str(r["meeting_id"]),
        user_id=str(r["user_id"]),
        user_name=r.get("user_name") or "",
        client_name=r["client_name"],
        notes=r.get("notes") or "",
        timestamp=r["recorded_at"],
        location=Coordinate.of(r["lat"], r["lng"]),
        location_name=r.get("location_name") or "",
    )


class MySQLMeetingRepository(MeetingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_meetings(self, user_id: Optional[str] = None) -> Sequence[MeetingRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            if user_id is None:
                cur.execute(_SELECT + _ORDER)
            else:
                cur.execute(_SELECT + " WHERE user_id=%s" + _ORDER, (user_id,))
            return [_row_to_meeting(r) for r in fetchall(cur)]

    def add_meeting(self, meeting: MeetingRecord) -> Sequence[MeetingRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO meetings(
                    meeting_id, user_id, user_name, client_name, notes, recorded_at, lat, lng, location_name
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    meeting.meeting_id,
                    meeting.user_id,
                    meeting.user_name,
                    meeting.client_name,
                    meeting.notes,
                    meeting.timestamp,
                    meeting.location.lat,
                    meeting.location.lng,
                    meeting.location_name,
                ),
            )
        return self.get_meetings()
