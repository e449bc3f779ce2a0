"""Persistence layer for finvault."""

from finvault.database.repository import RecordRepository
from finvault.database.factories import create_repository

__all__ = ["RecordRepository", "create_repository"]
