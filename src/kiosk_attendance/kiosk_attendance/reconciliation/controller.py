from __future__ import annotations

import json

import click
from flask import Flask, jsonify, request

from ..common.web import error_response, login_required
from ..container import Container
from ..core.constants import DEFAULT_STATS_DAYS
from ..core.enums import Role
from ..core.exceptions import DomainError, InvalidInputError


def register(app: Flask, container: Container) -> None:
    admin_required = login_required(Role.ADMIN)

    @app.route("/api/admin/reconciliation/run", methods=["POST"], endpoint="reconciliation_run")
    @admin_required
    def reconciliation_run():
        """Operator-initiated run of the nightly missing-logout check."""
        data = request.get_json(silent=True) or {}
        try:
            report = container.reconciliation_service.run_manual(data.get("date") or None)
        except DomainError as e:
            return error_response(e)
        return jsonify(report.to_dict()), 200

    @app.route("/api/admin/reconciliation/stats", methods=["GET"], endpoint="reconciliation_stats")
    @admin_required
    def reconciliation_stats():
        try:
            try:
                days = int(request.args.get("days", DEFAULT_STATS_DAYS))
            except ValueError:
                raise InvalidInputError("days must be a number")
            stats = container.reconciliation_service.system_check_stats(days)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, **stats.to_dict()}), 200

    @app.cli.command("reconcile")
    @click.option("--date", "day", default=None, help="Day to check (YYYY-MM-DD, JST). Defaults to today.")
    def reconcile_command(day):
        """Close forgotten logouts now."""
        report = container.reconciliation_service.run_manual(day)
        click.echo(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
