from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import admin_required, current_user_id, fail, login_required, payload
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.post("/api/login", endpoint="login")
    def login():
        data = payload()
        s_user = container.auth_service.authenticate(
            data.get("role", ""),
            data.get("employee_id", ""),
            data.get("password", ""),
        )

        session.clear()
        session["user_id"] = s_user.user_id
        session["employee_id"] = s_user.employee_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

        tracking = False
        if s_user.role == Role.SALESMAN:
            # resume sampling if a session is still open today
            tracking = container.tracking.sync(s_user.user_id)

        return jsonify(
            {
                "success": True,
                "user": container.user_service.get_user(s_user.user_id).public_view(),
                "tracking": tracking,
            }
        )

    @app.post("/api/logout", endpoint="logout")
    def logout():
        user_id = session.get("user_id")
        if user_id:
            container.tracking.stop(str(user_id))
        session.clear()
        return jsonify({"success": True, "message": "Logged out"})

    @app.get("/api/me/status", endpoint="my_status")
    @login_required
    def my_status():
        user_id = current_user_id()
        user = container.user_service.get_user(user_id)
        state = container.attendance_service.session_state(user_id)
        return jsonify(
            {
                "success": True,
                "user": user.public_view(),
                "session": state.value,
                "next_action": state.toggled().value,
                "tracking": container.tracking.is_tracking(user_id),
            }
        )

    @app.get("/api/presets", endpoint="presets")
    @login_required
    def presets():
        return jsonify(
            {
                "success": True,
                "presets": {name: c.as_dict() for name, c in container.namer.presets.items()},
                "default_radius_meters": container.engine.territory_radius_meters,
            }
        )

    @app.get("/api/admin/users", endpoint="admin_users")
    @admin_required
    def admin_users():
        if request.args.get("role", "").upper() == Role.SALESMAN.value:
            users = container.user_service.list_salesmen()
        else:
            users = container.user_service.list_users()
        return jsonify({"success": True, "users": [u.public_view() for u in users]})

    @app.post("/api/admin/users", endpoint="add_user")
    @admin_required
    def add_user():
        data = payload()
        user = container.user_service.create_salesman(
            name=data.get("name", ""),
            employee_id=data.get("employee_id", ""),
            password=data.get("password", ""),
            department=data.get("department", ""),
            mobile=data.get("mobile"),
            email=data.get("email"),
            assigned_clients=data.get("assigned_clients") or (),
            preset_name=data.get("territory_name"),
            lat=data.get("lat"),
            lng=data.get("lng"),
            radius_meters=data.get("radius_meters"),
        )
        return jsonify({"success": True, "user": user.public_view()}), 201

    @app.patch("/api/admin/users/<user_id>", endpoint="update_user")
    @admin_required
    def update_user(user_id: str):
        data = payload()
        profile = {k: data[k] for k in ("name", "department", "mobile", "email", "assigned_clients") if k in data}

        user = container.user_service.get_user(user_id)
        if profile or data.get("password"):
            user = container.user_service.update_profile(user_id=user_id, password=data.get("password"), **profile)

        if any(data.get(k) not in (None, "") for k in ("territory_name", "lat", "lng", "radius_meters")):
            user = container.user_service.assign_territory(
                user_id=user_id,
                preset_name=data.get("territory_name"),
                lat=data.get("lat"),
                lng=data.get("lng"),
                radius_meters=data.get("radius_meters"),
            )
        return jsonify({"success": True, "user": user.public_view()})

    @app.delete("/api/admin/users/<user_id>", endpoint="delete_user")
    @admin_required
    def delete_user(user_id: str):
        if user_id == current_user_id():
            return fail("You cannot delete your own account", 400)
        container.user_service.delete_user(current_role=Role(session["role"]), user_id=user_id)
        container.tracking.stop(user_id)
        return jsonify({"success": True, "message": "Employee removed"})
