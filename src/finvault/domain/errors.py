"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ConfigError(DomainError):
    """Required configuration is missing or malformed."""


class CryptoError(Exception):
    """Encryption key missing or ciphertext unreadable.

    Not a DomainError: handlers for expected failures must never catch
    it.
    """


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def bill_not_found(bill_id: str) -> str:
    """Return message for missing bill."""
    return f"Bill {bill_id} not found"


def reorder_target_not_found(entity: str, entity_id: str) -> str:
    """Return message when a reorder batch references a missing row."""
    return f"Cannot reorder {entity}s: {entity} {entity_id} not found"


def invalid_month(month: str) -> str:
    """Return message for a malformed YYYY-MM month string."""
    return f"Invalid month '{month}': expected YYYY-MM"


def unknown_performance_period(period: str) -> str:
    """Return message for an unsupported performance lookback."""
    return f"Unknown performance period '{period}'"


def account_has_dependents(account_id: str, counts: dict[str, int]) -> str:
    """Return message when an account is still referenced by other records."""
    parts = ", ".join(f"{count} {name}" for name, count in counts.items() if count)
    return f"Cannot delete account {account_id}: it has {parts}"


def invalid_history_months(months: int) -> str:
    """Return message for a history window shorter than one month."""
    return f"History must cover at least 1 month, got {months}"
