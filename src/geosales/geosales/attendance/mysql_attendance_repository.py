from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AttendanceFlag, AttendanceType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..geo.model import Coordinate
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT record_id, user_id, user_name, recorded_at, record_type, lat, lng, location_name, flags
    FROM attendance_records
"""
_ORDER = " ORDER BY recorded_at ASC, seq ASC"


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=str(r["record_id"]),
        user_id=str(r["user_id"]),
        user_name=r.get("user_name") or "",
        timestamp=r["recorded_at"],
        type=AttendanceType(r["record_type"]),
        location=Coordinate.of(r["lat"], r["lng"]),
        location_name=r.get("location_name") or "",
        # stored rows may predate the current flag set
        flags=AttendanceFlag.parse_many((r.get("flags") or "").split(","), strict=False),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_history(self, user_id: Optional[str] = None) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            if user_id is None:
                cur.execute(_SELECT + _ORDER)
            else:
                cur.execute(_SELECT + " WHERE user_id=%s" + _ORDER, (user_id,))
            return [_row_to_record(r) for r in fetchall(cur)]

    def append_record(self, record: AttendanceRecord) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    record_id, user_id, user_name, recorded_at, record_type, lat, lng, location_name, flags
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.record_id,
                    record.user_id,
                    record.user_name,
                    record.timestamp,
                    record.type.value,
                    record.location.lat,
                    record.location.lng,
                    record.location_name,
                    ",".join(record.flag_values()),
                ),
            )
        return self.get_history()

    def get_last_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE user_id=%s ORDER BY recorded_at DESC, seq DESC LIMIT 1",
                (user_id,),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None
