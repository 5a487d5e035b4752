from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import current_user_id, login_required, payload, salesman_required
from ..container import Container
from ..core.enums import Role
from ..location.fixed_provider import FixedPositionProvider


def register(app: Flask, container: Container) -> None:
    @app.post("/api/meetings", endpoint="add_meeting")
    @salesman_required
    def add_meeting():
        data = payload()
        meeting = container.meeting_service.record_meeting(
            current_user_id(),
            FixedPositionProvider.from_payload(data),
            client_name=data.get("client_name", ""),
            notes=data.get("notes", ""),
        )
        return jsonify({"success": True, "meeting": meeting.as_dict()}), 201

    @app.get("/api/meetings", endpoint="list_meetings")
    @login_required
    def list_meetings():
        if session.get("role") == Role.ADMIN.value:
            user_id = request.args.get("user_id") or None
        else:
            user_id = current_user_id()
        meetings = container.meeting_service.meetings_for(user_id)
        return jsonify({"success": True, "meetings": [m.as_dict() for m in reversed(meetings)]})
