from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import coerce_float
from ..common.web import current_user_id, fail, login_required, payload, salesman_required
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceFlag
from ..core.exceptions import LocationUnavailable, PermissionDenied
from ..geo.model import Coordinate
from ..location.fixed_provider import FixedPositionProvider


def _truthy(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def register(app: Flask, container: Container) -> None:
    @app.get("/api/me/history", endpoint="my_history")
    @login_required
    def my_history():
        try:
            limit = int(request.args.get("limit", DEFAULT_HISTORY_LIMIT))
        except ValueError:
            return fail("limit must be an integer", 400)
        records = container.attendance_service.recent_history(current_user_id(), limit=limit)
        return jsonify({"success": True, "records": [r.as_dict() for r in records]})

    @app.post("/api/attendance/punch", endpoint="punch")
    @salesman_required
    def punch():
        user_id = current_user_id()
        provider = FixedPositionProvider.from_payload(payload())
        record = container.attendance_service.punch(user_id, provider)
        tracking = container.tracking.sync(user_id)
        return jsonify({"success": True, "record": record.as_dict(), "tracking": tracking}), 201

    @app.post("/api/attendance/sos", endpoint="sos")
    @salesman_required
    def sos():
        user_id = current_user_id()
        data = payload()
        record = container.attendance_service.trigger_sos(
            user_id,
            FixedPositionProvider.from_payload(data),
            confirmed=_truthy(data.get("confirm")),
        )
        if record is None:
            return jsonify({"success": False, "message": "SOS not confirmed"}), 200

        container.tracking.sync(user_id)
        if record.has_flag(AttendanceFlag.GPS_FAIL_SOS):
            message = "SOS SENT (GPS unavailable)."
        else:
            message = "SOS SIGNAL SENT."
        return jsonify({"success": True, "message": message, "record": record.as_dict()}), 201

    @app.post("/api/location", endpoint="push_location")
    @salesman_required
    def push_location():
        """Device pushes a watch sample (or the reason it has none) to the hub."""
        user_id = current_user_id()
        data = payload()
        hub = container.location_hub

        error = str(data.get("error") or "").strip().lower()
        if error:
            if error in {"denied", "permission_denied"}:
                hub.publish_error(user_id, PermissionDenied("Location permission denied on device"))
            else:
                hub.publish_error(user_id, LocationUnavailable(data.get("message") or "Device has no fix"))
            return jsonify({"success": True, "delivered": False})

        point = Coordinate.of(coerce_float(data.get("lat"), "lat"), coerce_float(data.get("lng"), "lng"))
        watchers = hub.publish(user_id, point)
        return jsonify({"success": True, "delivered": watchers > 0})
