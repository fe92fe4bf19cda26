"""Database layer for pharmledger."""

from pharmledger.database.base import Database
from pharmledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
