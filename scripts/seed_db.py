"""Load demo students and the demo admin/guardian accounts."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import click

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.kiosk_attendance.kiosk_attendance.database.bootstrap import apply_seed_sql, ensure_demo_users


@click.command()
@click.option("--students-only", is_flag=True, help="Skip the demo accounts and guardian links.")
def main(students_only: bool) -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    if not students_only:
        ensure_demo_users(db_config)
        click.echo("Demo logins: admin / admin123, hanako / guardian123 (kiosk IDs 1001, 1002)")

    click.echo(f"OK: Seeded {db_config.get('database')}")


if __name__ == "__main__":
    main()
