"""Apply the SQL migrations that create the ticketing schema.

Run once per environment (``python bootstrap_script.py``) before starting the
API. Supabase exposes the Postgres database directly, so the tables and the
inventory functions are created over a plain psycopg connection.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence
from urllib.parse import quote_plus

from dotenv import load_dotenv
import psycopg
from psycopg import Connection


LOGGER = logging.getLogger(__name__)
MIGRATIONS_DIR = Path(__file__).with_name("migrations")


def load_configuration() -> str:
    """Resolve the migration connection string.

    ``DATABASE_URL`` is used as-is when present. Otherwise the DSN is assembled
    from the lowercase Supabase pooler settings:
    - user
    - password
    - host
    - port
    - dbname

    Returns:
        A ``postgresql://`` DSN with credentials URL-quoted.

    Raises:
        RuntimeError: If neither form of configuration is complete.
    """

    load_dotenv()
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    user = os.getenv("user")
    password = os.getenv("password")
    host = os.getenv("host")
    port = os.getenv("port")
    dbname = os.getenv("dbname")

    if not all([user, password, host, port, dbname]):
        raise RuntimeError(
            "Set DATABASE_URL, or all of 'user', 'password', 'host', 'port' and 'dbname'."
        )

    return (
        f"postgresql://{quote_plus(user)}:{quote_plus(password)}"  # type: ignore[arg-type]
        f"@{host}:{port}/{dbname}"
    )


def build_conninfo(db_url: str) -> str:
    """Normalize a Postgres connection string for psycopg (``postgres://`` is not accepted)."""

    if db_url.startswith("postgres://"):
        return db_url.replace("postgres://", "postgresql://", 1)
    return db_url


def ensure_schema_migrations_table(connection: Connection[Any]) -> None:
    """Make sure the bookkeeping table for applied migrations exists."""

    connection.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            migration_id TEXT PRIMARY KEY,
            applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        """
    )


def fetch_applied_migrations(connection: Connection[Any]) -> set[str]:
    """Filenames of the migrations recorded as applied."""

    rows = connection.execute("SELECT migration_id FROM schema_migrations;")
    return {row[0] for row in rows}


def discover_migrations(directory: Path) -> Sequence[Path]:
    """``*.sql`` files under ``directory``, ordered by their numeric prefix."""

    return sorted(directory.glob("*.sql"), key=lambda path: path.name)


def pending_migrations(migrations: Iterable[Path], applied: set[str]) -> list[Path]:
    """Keep the migrations whose filename is not recorded yet, preserving order."""

    return [migration for migration in migrations if migration.name not in applied]


def run_migration(connection: Connection[Any], migration_path: Path) -> None:
    """Execute a single migration and record it, within one transaction."""

    sql = migration_path.read_text(encoding="utf-8").strip()
    if not sql:
        LOGGER.info("Migration %s is empty, nothing to run", migration_path.name)
        return

    with connection.transaction():
        connection.execute(sql)  # type: ignore[arg-type]
        connection.execute(
            """
            INSERT INTO schema_migrations (migration_id, applied_at)
            VALUES (%s, NOW())
            ON CONFLICT (migration_id) DO NOTHING;
            """,
            (migration_path.name,),
        )


def apply_pending_migrations(connection: Connection[Any], migrations: Iterable[Path]) -> list[str]:
    """Run every migration missing from ``schema_migrations``, oldest first.

    Args:
        connection: Open psycopg connection to the park database.
        migrations: Candidate files, usually from ``discover_migrations``.

    Returns:
        Filenames run by this call, in the order they ran.

    Raises:
        RuntimeError: When a migration fails. Earlier migrations stay applied.
    """

    ensure_schema_migrations_table(connection)
    applied = fetch_applied_migrations(connection)
    newly_applied: list[str] = []
    for migration in pending_migrations(migrations, applied):
        LOGGER.info("Running migration %s", migration.name)
        try:
            run_migration(connection, migration)
        except Exception as exc:
            LOGGER.error("Migration %s failed, stopping", migration.name)
            raise RuntimeError(f"Migration {migration.name} failed") from exc
        newly_applied.append(migration.name)
    return newly_applied


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply ticketing schema migrations.")
    parser.add_argument(
        "--migrations-dir",
        type=Path,
        default=MIGRATIONS_DIR,
        help="Directory holding the *.sql migration files.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Command-line entry point: ``python bootstrap_script.py [--migrations-dir DIR]``."""

    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    conninfo = build_conninfo(load_configuration())
    migrations = discover_migrations(args.migrations_dir)
    if not migrations:
        LOGGER.info("No migrations found under %s", args.migrations_dir)
        return

    LOGGER.info("Connecting to the park database")
    with psycopg.connect(conninfo) as connection:
        applied = apply_pending_migrations(connection, migrations)
        if applied:
            LOGGER.info("Migrations run: %s", ", ".join(applied))
        else:
            LOGGER.info("No pending migrations")


if __name__ == "__main__":
    main()
