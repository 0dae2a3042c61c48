from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import DomainError
from ..common.web import error_response
from .service import KioskSession


def register(app: Flask, container: Container) -> None:
    @app.route("/api/kiosk/lookup", methods=["POST"], endpoint="kiosk_lookup")
    def kiosk_lookup():
        """Find the student for the typed ID and say what confirming would do."""
        data = request.get_json(silent=True) or {}
        kiosk = KioskSession(digits=str(data.get("child_id", "")).strip())
        try:
            confirmation = container.kiosk_service.lookup(kiosk)
        except DomainError as e:
            return error_response(e)

        return jsonify(
            {
                "success": True,
                "child_id": confirmation.child_id,
                "student_name": confirmation.student_name,
                "next_action": confirmation.next_action.value,
                "message": confirmation.message,
            }
        ), 200

    @app.route("/api/kiosk/confirm", methods=["POST"], endpoint="kiosk_confirm")
    def kiosk_confirm():
        data = request.get_json(silent=True) or {}
        kiosk = KioskSession(digits=str(data.get("child_id", "")).strip())
        try:
            if data.get("action") is None:
                container.kiosk_service.lookup(kiosk)
            result = container.kiosk_service.confirm(kiosk, data.get("action"))
        except DomainError as e:
            return error_response(e)

        return jsonify(
            {
                "success": result.success,
                "action": result.action.value,
                "student_name": result.student_name,
                "timestamp": result.timestamp,
            }
        ), 200
