"""Run the missing-logout check once, outside the web process (e.g. from cron)."""

from __future__ import annotations

import importlib
import json
import logging
import sys
from pathlib import Path

import click

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.kiosk_attendance.kiosk_attendance.container import build_container


@click.command()
@click.option("--date", "day", default=None, help="JST day to check (YYYY-MM-DD). Defaults to today.")
@click.option("--stats-days", type=int, default=None, help="Print system-fix stats for the last N days instead.")
def main(day, stats_days) -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO))

    container = build_container(
        db_config=settings.DB_CONFIG,
        settings={"SYSTEM_LOGOUT_HOUR": settings.SYSTEM_LOGOUT_HOUR, "MAX_WRITE_ATTEMPTS": settings.MAX_WRITE_ATTEMPTS},
    )
    if stats_days is not None:
        result = container.reconciliation_service.system_check_stats(stats_days).to_dict()
    else:
        result = container.reconciliation_service.run(day, trigger_type="cron").to_dict()
    click.echo(json.dumps(result, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
