"""Create the kiosk attendance database and its tables."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import click

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.kiosk_attendance.kiosk_attendance.database.bootstrap import (
    apply_schema,
    apply_seed_sql,
    ensure_demo_users,
    list_tables,
)

REQUIRED_TABLES = ("students", "users", "guardian_students")


@click.command()
@click.option("--seed", is_flag=True, help="Also load demo students, accounts and guardian links.")
def main(seed: bool) -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = set(list_tables(db_config))
    missing = [t for t in REQUIRED_TABLES if t not in tables]
    if missing:
        raise click.ClickException(f"schema.sql did not create: {', '.join(missing)}")

    if seed:
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
        ensure_demo_users(db_config)

    click.echo(
        f"OK: {db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"ready (tables={len(tables)}, seeded={'yes' if seed else 'no'})"
    )


if __name__ == "__main__":
    main()
