from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.web import error_response, login_required
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = request.get_json(silent=True) or {}
        try:
            s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
        except DomainError as e:
            return error_response(e)

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=7)

        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        return jsonify({"success": True, "user_id": s_user.user_id, "name": s_user.full_name, "role": s_user.role.value}), 200

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True}), 200

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required()
    def me():
        return jsonify({"user_id": session["user_id"], "name": session.get("name"), "role": session.get("role")}), 200
