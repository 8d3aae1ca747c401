"""Application configuration values and helpers.

Centralizes runtime configuration for:
  - Database URL (local SQLite file by default, any SQLAlchemy URL allowed)
  - Environment mode (``dev`` bootstraps schema and seed data at startup)
  - Display currency

Values can be provided via environment variables or a user settings file at
``~/.printquote/settings.toml``.

Environment variables (quick overrides):
  - DATABASE_URL: full SQLAlchemy URL; overrides settings.toml
  - PRINTQUOTE_SETTINGS_PATH: alternative settings.toml location
  - PRINTQUOTE_ENV: ``dev`` (default) or ``prod``
  - PRINTQUOTE_CURRENCY: display currency (default ``COP``)
  - PRINTQUOTE_PORT: HTTP port for the development server (default 8080)
"""

from __future__ import annotations

import atexit
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import toml
from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlmodel import create_engine

logger = logging.getLogger(__name__)

DEFAULT_ENV = "dev"
DEFAULT_CURRENCY = "COP"
DEFAULT_PORT = 8080


def _determine_settings_path() -> Path:
    override = os.getenv("PRINTQUOTE_SETTINGS_PATH")
    if override:
        return Path(override).expanduser().resolve()
    return (Path.home() / ".printquote" / "settings.toml").resolve()


SETTINGS_PATH = _determine_settings_path()


def _ensure_sqlite_directory(url: str) -> str:
    try:
        url_obj = make_url(url)
    except Exception:
        return url
    if url_obj.get_backend_name() != "sqlite":
        return url
    database = url_obj.database or ""
    if not database or database == ":memory:" or database.startswith("file:"):
        return url
    db_path = Path(database)
    if not db_path.is_absolute():
        db_path = (SETTINGS_PATH.parent / db_path).resolve()
        url_obj = url_obj.set(database=db_path.as_posix())
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return url_obj.render_as_string(hide_password=False)


DEFAULT_URL = "sqlite:///printquote.db"


def _read_settings_dict() -> Dict[str, Any]:
    if not SETTINGS_PATH.exists():
        return {}
    try:
        with open(SETTINGS_PATH, "rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", SETTINGS_PATH, exc)
        return {}


def _from_settings(section: str, key: str, default: str) -> str:
    data = _read_settings_dict()
    return str(((data.get(section) or {}).get(key)) or default)


def load_settings() -> str:
    """Return database URL from env or settings.toml."""
    url = os.getenv("DATABASE_URL") or _from_settings("database", "url", DEFAULT_URL)
    return _ensure_sqlite_directory(url)


def save_database_url(url: str) -> None:
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    data = _read_settings_dict()
    database = dict(data.get("database", {}))
    database["url"] = url
    data["database"] = database
    with open(SETTINGS_PATH, "w", encoding="utf-8") as handle:
        toml.dump(data, handle)
    get_engine(load_settings())


def get_app_env() -> str:
    return (os.getenv("PRINTQUOTE_ENV") or _from_settings("app", "env", DEFAULT_ENV)).strip().lower()


def is_dev() -> bool:
    return get_app_env() == DEFAULT_ENV


def get_port() -> int:
    raw = os.getenv("PRINTQUOTE_PORT") or _from_settings("app", "port", str(DEFAULT_PORT))
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid port %r, using %s", raw, DEFAULT_PORT)
        return DEFAULT_PORT


def get_currency() -> str:
    return (
        os.getenv("PRINTQUOTE_CURRENCY") or _from_settings("app", "currency", DEFAULT_CURRENCY)
    ).strip().upper()


def _build_engine(url: str) -> Engine:
    connect_args: Dict[str, Any] = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(url, echo=False, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _sqlite_pragmas)
    return engine


def _sqlite_pragmas(dbapi_connection, connection_record) -> None:  # pragma: no cover - driver hook
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


DATABASE_URL = load_settings()
_ENGINE: Engine = _build_engine(DATABASE_URL)


def dispose_engine() -> None:
    """Dispose the global engine, releasing any pooled connections."""
    _ENGINE.dispose()


atexit.register(dispose_engine)


def get_engine(url: Optional[str] = None) -> Engine:
    """Return engine, recreating if the URL changed."""
    global _ENGINE, DATABASE_URL
    new_url = _ensure_sqlite_directory(url) if url is not None else load_settings()
    if new_url != DATABASE_URL:
        DATABASE_URL = new_url
        _ENGINE.dispose()
        _ENGINE = _build_engine(DATABASE_URL)
    return _ENGINE
