"""Repository factory functions."""

import os
from typing import Optional

from finvault.config import default_database_url
from finvault.database.repository import RecordRepository


def create_repository(database_url: Optional[str] = None) -> RecordRepository:
    """Create a record repository.

    Args:
        database_url: SQLAlchemy URL. If None, checks FINVAULT_DATABASE_URL,
            then FINVAULT_DB_PATH (a SQLite file), then defaults to
            ~/.finvault/finvault.db

    Returns:
        RecordRepository instance
    """
    if database_url is None:
        database_url = os.environ.get("FINVAULT_DATABASE_URL")

    if database_url is None:
        database_url = default_database_url(os.environ.get("FINVAULT_DB_PATH"))

    return RecordRepository(database_url)
