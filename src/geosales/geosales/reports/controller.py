from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.web import admin_required, fail
from ..container import Container

DEFAULT_REPORT_DAYS = 30


def register(app: Flask, container: Container) -> None:
    @app.get("/api/admin/report", endpoint="admin_report")
    @admin_required
    def admin_report():
        today = now_local().date()
        try:
            start = parse_iso_date(request.args["start"]) if request.args.get("start") else None
            end = parse_iso_date(request.args["end"]) if request.args.get("end") else today
        except ValueError:
            return fail("Dates must be YYYY-MM-DD", 400)
        if start is None:
            start = end - timedelta(days=DEFAULT_REPORT_DAYS)

        data = container.report_service.build_activity_report(
            start=start,
            end=end,
            user_id=request.args.get("user_id") or None,
        )
        return jsonify(
            {
                "success": True,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "rows": data.rows,
                "summary": data.summary,
                "totals": data.totals,
            }
        )

    @app.get("/api/admin/alerts", endpoint="admin_alerts")
    @admin_required
    def admin_alerts():
        return jsonify({"success": True, "alerts": container.report_service.emergency_alerts()})

    @app.get("/api/admin/board", endpoint="admin_board")
    @admin_required
    def admin_board():
        return jsonify({"success": True, "salesmen": container.report_service.live_board(now_local())})

    @app.get("/api/admin/users/<user_id>/unresolved", endpoint="admin_unresolved_sessions")
    @admin_required
    def admin_unresolved_sessions(user_id: str):
        days = container.report_service.find_unresolved_sessions(user_id, now_local().date())
        return jsonify({"success": True, "days": [d.isoformat() for d in days]})
