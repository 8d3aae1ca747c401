"""Maintenance commands for the quote database.

Usage::

    python -m printquote.tools.db doctor   [url-or-sqlite-path]
    python -m printquote.tools.db migrate  [url-or-sqlite-path]
    python -m printquote.tools.db init     [url-or-sqlite-path]

Without a target the configured ``DATABASE_URL`` is used.  A target
without ``://`` is taken as the path of a SQLite file.
"""

from __future__ import annotations

import sys
from typing import Callable, Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from .. import models  # noqa: F401  register tables on SQLModel.metadata
from ..config import get_engine
from ..db_safe_migrate import pending_sqlite_migrations, run_sqlite_safe_migrations

USAGE = "Usage: python -m printquote.tools.db [doctor|migrate|init] [url-or-sqlite-path]"


def _engine_for(target: Optional[str]) -> Engine:
    if not target:
        return get_engine()
    return create_engine(target if "://" in target else f"sqlite:///{target}")


def doctor(engine: Engine) -> None:
    """Report columns an older SQLite database is missing."""
    if engine.dialect.name != "sqlite":
        print("Non-SQLite database, nothing to do")
        return
    pending = pending_sqlite_migrations(engine)
    for table, column, ddl in pending:
        print(f"Missing column {table}.{column} ({ddl})")
    if not pending:
        print("No pending migrations")


def migrate(engine: Engine) -> None:
    if engine.dialect.name != "sqlite":
        print("Non-SQLite database, use alembic upgrade instead")
        return
    applied = run_sqlite_safe_migrations(engine)
    for table, column in applied:
        print(f"Added column {table}.{column}")
    if not applied:
        print("No migrations applied")


def init(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)
    print("Schema created")


COMMANDS: Dict[str, Callable[[Engine], None]] = {
    "doctor": doctor,
    "migrate": migrate,
    "init": init,
}


def main(argv: Optional[list[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(USAGE)
        return 2
    command = COMMANDS.get(args[0])
    if command is None:
        print("Unknown command", args[0])
        print(USAGE)
        return 2
    engine = _engine_for(args[1] if len(args) > 1 else None)
    try:
        print(f"Dialect: {engine.dialect.name}")
        command(engine)
    finally:
        if len(args) > 1:
            engine.dispose()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
