import sqlalchemy
from sqlalchemy import inspect, text
from sqlmodel import create_engine

from printquote.db_safe_migrate import pending_sqlite_migrations, run_sqlite_safe_migrations


def _engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=sqlalchemy.pool.StaticPool,
    )


def test_material_columns_added_and_backfilled():
    engine = _engine()
    with engine.begin() as conn:
        conn.execute(
            text('CREATE TABLE "materials" (id INTEGER PRIMARY KEY, name TEXT, cost_per_kg NUMERIC)')
        )
        conn.execute(text("INSERT INTO \"materials\"(name, cost_per_kg) VALUES ('PLA', 1), ('PETG', 2)"))

    pending = pending_sqlite_migrations(engine)
    assert ("materials", "active", "BOOLEAN NOT NULL DEFAULT 1") in pending

    applied = run_sqlite_safe_migrations(engine)
    assert ("materials", "created_at") in applied
    cols = {c["name"] for c in inspect(engine).get_columns("materials")}
    for col in ("notes", "active", "created_at", "updated_at"):
        assert col in cols
    with engine.begin() as conn:
        missing = conn.execute(
            text('SELECT COUNT(*) FROM "materials" WHERE "created_at" IS NULL')
        ).scalar()
        active = conn.execute(text('SELECT SUM(active) FROM "materials"')).scalar()
    assert missing == 0
    assert active == 2
    assert pending_sqlite_migrations(engine) == []


def test_legacy_quotes_table_gets_snapshot_columns():
    engine = _engine()
    with engine.begin() as conn:
        conn.execute(
            text('CREATE TABLE "quotes" (id INTEGER PRIMARY KEY, created_at DATETIME, title TEXT)')
        )
        conn.execute(text("INSERT INTO \"quotes\"(created_at, title) VALUES ('2024-01-01', 'Vieja')"))

    run_sqlite_safe_migrations(engine)

    with engine.begin() as conn:
        row = conn.execute(
            text('SELECT totals_json, breakdown_json, tax_enabled FROM "quotes"')
        ).one()
    assert row == ("{}", "{}", 0)


def test_missing_tables_are_skipped():
    engine = _engine()
    assert pending_sqlite_migrations(engine) == []
    assert run_sqlite_safe_migrations(engine) == []
