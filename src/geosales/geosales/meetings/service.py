from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..attendance.service import AttendanceService
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from ..geo.namer import LocationNamer
from ..location.provider import LocationProvider
from ..location.service import acquire_fix
from ..users.repository import UserRepository
from .model import MeetingRecord
from .repository import MeetingRepository

logger = logging.getLogger(__name__)


class MeetingService:
    def __init__(
        self,
        meetings: MeetingRepository,
        users: UserRepository,
        attendance: AttendanceService,
        *,
        namer: LocationNamer,
        clock: Callable[[], datetime] = now_local,
    ):
        self._meetings = meetings
        self._users = users
        self._attendance = attendance
        self._namer = namer
        self._clock = clock

    def record_meeting(
        self,
        user_id: str,
        provider: LocationProvider,
        *,
        client_name: str,
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> MeetingRecord:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if not self._attendance.is_checked_in(user_id, now):
            raise ValidationError("Please Punch In before recording a meeting.")
        client_name = require_non_empty(client_name, "Client")

        point = acquire_fix(provider, timeout_seconds=self._attendance.location_timeout_seconds)
        meeting = MeetingRecord(
            meeting_id=uuid.uuid4().hex,
            user_id=user.user_id,
            user_name=user.name,
            client_name=client_name,
            notes=(notes or "").strip(),
            timestamp=now or self._clock(),
            location=point,
            location_name=self._namer.name_for(point),
        )
        self._meetings.add_meeting(meeting)
        logger.info("Meeting with %s logged by %s at %s", client_name, user.employee_id, meeting.location_name)
        return meeting

    def meetings_for(self, user_id: Optional[str] = None) -> Sequence[MeetingRecord]:
        return self._meetings.get_meetings(user_id)
