from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..geo.model import Coordinate


@dataclass(frozen=True)
class MeetingRecord:
    """A client visit logged by a salesman. Not subject to geofence rules."""

    meeting_id: str
    user_id: str
    user_name: str
    client_name: str
    notes: str
    timestamp: datetime
    location: Coordinate
    location_name: str

    def as_dict(self) -> dict:
        return {
            "meeting_id": self.meeting_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "client_name": self.client_name,
            "notes": self.notes,
            "timestamp": self.timestamp.isoformat(),
            "location": self.location.as_dict(),
            "location_name": self.location_name,
        }
