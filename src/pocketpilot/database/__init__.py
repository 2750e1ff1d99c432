"""Database layer for pocketpilot application."""

from pocketpilot.database.base import Database
from pocketpilot.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
