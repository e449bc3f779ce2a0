"""Domain layer for finvault: plaintext entities, inputs, reports and errors."""

from finvault.domain import entities, inputs, notifications, reports
from finvault.domain.errors import (
    DomainError,
    ValidationError,
    NotFoundError,
    ConflictError,
    ConfigError,
    CryptoError,
)

__all__ = [
    "entities",
    "inputs",
    "notifications",
    "reports",
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ConfigError",
    "CryptoError",
]
