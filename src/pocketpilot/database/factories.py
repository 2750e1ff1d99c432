"""Database factory functions for creating database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from pocketpilot.database.models import create_session_factory
from pocketpilot.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

DB_PATH_ENV = "POCKETPILOT_DB_PATH"
DB_URL_ENV = "POCKETPILOT_DATABASE_URL"

# One engine and session factory per database URL for long-running processes
_session_factories: dict[str, sessionmaker[Session]] = {}


def sqlite_url(database_path: Optional[str] = None) -> str:
    """Build the SQLite URL for a database file.

    Args:
        database_path: Path to SQLite database file. If None, checks the
            POCKETPILOT_DB_PATH environment variable, then defaults to
            ~/.pocketpilot/pocketpilot.db
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV)

    if database_path is None:
        db_dir = Path.home() / ".pocketpilot"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "pocketpilot.db")

    logger.debug("Using SQLite database at %s", database_path)
    return f"sqlite:///{database_path}"


def database_url(database_path: Optional[str] = None) -> str:
    """POCKETPILOT_DATABASE_URL if set (any SQLAlchemy URL), else a SQLite URL."""
    url = os.environ.get(DB_URL_ENV)
    if url:
        logger.debug("Using database URL from %s", DB_URL_ENV)
        return url
    return sqlite_url(database_path)


def shared_session_factory(url: str) -> sessionmaker[Session]:
    """Get or create the session factory for ``url``, built once per process."""
    factory = _session_factories.get(url)
    if factory is None:
        factory = create_session_factory(url)
        _session_factories[url] = factory
    return factory


def dispose_shared_engines() -> None:
    """Close the pooled connections of every shared engine."""
    for factory in _session_factories.values():
        factory.kw["bind"].dispose()
    _session_factories.clear()


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file (see ``sqlite_url``)

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    return SQLAlchemyDatabase(sqlite_url(database_path))


def create_database(database_path: Optional[str] = None, shared: bool = False) -> SQLAlchemyDatabase:
    """Create a database from POCKETPILOT_DATABASE_URL, else a SQLite file.

    A configured URL (any SQLAlchemy URL, e.g. Postgres) takes precedence
    over the SQLite path.

    Args:
        database_path: Optional SQLite database path
        shared: Reuse the process-wide engine for this URL instead of
            building a new one. Used by the HTTP API, which opens a database
            handle per request.
    """
    url = database_url(database_path)
    if shared:
        return SQLAlchemyDatabase(url, session_factory=shared_session_factory(url))
    return SQLAlchemyDatabase(url)
