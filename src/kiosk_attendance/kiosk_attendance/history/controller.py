from __future__ import annotations

from dataclasses import asdict

from flask import Flask, jsonify, request, session

from ..common.web import error_response, login_required
from ..container import Container
from ..core.constants import DEFAULT_STATISTICS_DAYS_BACK
from ..core.enums import Role
from ..core.exceptions import DomainError, InvalidInputError


def register(app: Flask, container: Container) -> None:
    guardian_required = login_required(Role.GUARDIAN)

    @app.route("/api/guardian/students", methods=["GET"], endpoint="guardian_students")
    @guardian_required
    def guardian_students():
        try:
            students = container.history_service.assigned_students(int(session["user_id"]))
        except DomainError as e:
            return error_response(e)
        return jsonify({"students": [{"student_id": s.student_id, "name": s.display_name} for s in students]}), 200

    @app.route("/api/guardian/students/<student_id>/history", methods=["GET"], endpoint="guardian_history")
    @guardian_required
    def guardian_history(student_id: str):
        locale = request.args.get("lang") or request.accept_languages.best_match(["en", "ja"]) or "en"
        try:
            history = container.history_service.student_history(int(session["user_id"]), student_id, locale)
        except DomainError as e:
            return error_response(e)
        return jsonify({"student_name": history.student_name, "attendance": [r.to_dict() for r in history.rows]}), 200

    @app.route("/api/guardian/students/<student_id>/statistics", methods=["GET"], endpoint="guardian_statistics")
    @guardian_required
    def guardian_statistics(student_id: str):
        try:
            try:
                days = int(request.args.get("days", DEFAULT_STATISTICS_DAYS_BACK))
            except ValueError:
                raise InvalidInputError("days must be a number")
            stats = container.history_service.statistics(int(session["user_id"]), student_id, days_back=days)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, **asdict(stats)}), 200
