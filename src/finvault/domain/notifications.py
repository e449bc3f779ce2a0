"""Notification types, per-type configuration and notification entities.

Each notification type owns one configuration class. Configurations are
persisted as a tagged JSON object ({"type": ..., **fields}) and parsed back
through CONFIG_CLASSES, which must cover every NotificationType.
"""

from dataclasses import dataclass, asdict, fields
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from finvault.domain.inputs import Settable, UNSET


class NotificationType(str, Enum):
    BILL_DUE = "bill_due"
    CREDIT_PAYMENT_DUE = "credit_payment_due"
    LOAN_PAYMENT_DUE = "loan_payment_due"
    HIGH_CREDIT_UTILIZATION = "high_credit_utilization"
    BUDGET_OVERSPEND = "budget_overspend"
    LARGE_TRANSACTION = "large_transaction"
    STATEMENT_REMINDER = "statement_reminder"
    MILESTONES = "milestones"


@dataclass(frozen=True)
class BillDueConfig:
    reminder_days_before: int = 3


@dataclass(frozen=True)
class CreditPaymentDueConfig:
    reminder_days_before: int = 3


@dataclass(frozen=True)
class LoanPaymentDueConfig:
    reminder_days_before: int = 3


@dataclass(frozen=True)
class HighCreditUtilizationConfig:
    thresholds: tuple[int, ...] = (30, 50, 75, 90)


@dataclass(frozen=True)
class BudgetOverspendConfig:
    warn_at_percent: int = 80
    alert_at_percent: int = 100


@dataclass(frozen=True)
class LargeTransactionConfig:
    threshold: Decimal = Decimal("500")


@dataclass(frozen=True)
class StatementReminderConfig:
    reminder_days_before: int = 3
    fallback_day_of_month: int = 28


@dataclass(frozen=True)
class MilestonesConfig:
    net_worth_milestones: tuple[Decimal, ...] = (
        Decimal("50000"),
        Decimal("100000"),
        Decimal("250000"),
        Decimal("500000"),
        Decimal("1000000"),
    )
    loan_payoff_percent_milestones: tuple[int, ...] = (25, 50, 75, 90, 100)


NotificationConfig = Union[
    BillDueConfig,
    CreditPaymentDueConfig,
    LoanPaymentDueConfig,
    HighCreditUtilizationConfig,
    BudgetOverspendConfig,
    LargeTransactionConfig,
    StatementReminderConfig,
    MilestonesConfig,
]

CONFIG_CLASSES: dict[NotificationType, type] = {
    NotificationType.BILL_DUE: BillDueConfig,
    NotificationType.CREDIT_PAYMENT_DUE: CreditPaymentDueConfig,
    NotificationType.LOAN_PAYMENT_DUE: LoanPaymentDueConfig,
    NotificationType.HIGH_CREDIT_UTILIZATION: HighCreditUtilizationConfig,
    NotificationType.BUDGET_OVERSPEND: BudgetOverspendConfig,
    NotificationType.LARGE_TRANSACTION: LargeTransactionConfig,
    NotificationType.STATEMENT_REMINDER: StatementReminderConfig,
    NotificationType.MILESTONES: MilestonesConfig,
}

# Fields whose JSON form needs converting back on parse
_DECIMAL_FIELDS = {"threshold"}
_DECIMAL_TUPLE_FIELDS = {"net_worth_milestones"}
_INT_TUPLE_FIELDS = {"thresholds", "loan_payoff_percent_milestones"}


def default_config(notification_type: NotificationType) -> NotificationConfig:
    """Return the default configuration for a notification type."""
    return CONFIG_CLASSES[NotificationType(notification_type)]()


def config_type(config: NotificationConfig) -> NotificationType:
    """Return the notification type a configuration belongs to."""
    for notification_type, cls in CONFIG_CLASSES.items():
        if type(config) is cls:
            return notification_type
    raise TypeError(f"Unknown notification config {type(config).__name__}")


def config_to_dict(config: NotificationConfig) -> dict[str, Any]:
    """Serialize a configuration to a tagged, JSON-safe dict."""
    data: dict[str, Any] = {"type": config_type(config).value}
    for key, value in asdict(config).items():
        if isinstance(value, Decimal):
            data[key] = str(value)
        elif isinstance(value, tuple):
            data[key] = [str(v) if isinstance(v, Decimal) else v for v in value]
        else:
            data[key] = value
    return data


def parse_config(notification_type: NotificationType, data: dict[str, Any]) -> NotificationConfig:
    """Parse a tagged dict back into the configuration class for its type.

    Missing fields take their defaults; unknown keys are ignored.

    Raises:
        ValueError: If the tag does not match notification_type
    """
    notification_type = NotificationType(notification_type)
    tag = data.get("type", notification_type.value)
    if tag != notification_type.value:
        raise ValueError(f"Config tagged '{tag}' cannot configure '{notification_type.value}'")

    cls = CONFIG_CLASSES[notification_type]
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        value = data[f.name]
        if f.name in _DECIMAL_FIELDS:
            value = Decimal(str(value))
        elif f.name in _DECIMAL_TUPLE_FIELDS:
            value = tuple(Decimal(str(v)) for v in value)
        elif f.name in _INT_TUPLE_FIELDS:
            value = tuple(int(v) for v in value)
        kwargs[f.name] = value
    return cls(**kwargs)


@dataclass(frozen=True)
class NotificationPreference:
    id: str
    type: NotificationType
    enabled: bool
    config: NotificationConfig
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class NotificationPreferenceUpdate:
    enabled: Settable[bool] = UNSET
    config: Settable[Optional[NotificationConfig]] = UNSET


@dataclass(frozen=True)
class NotificationLogEntry:
    id: str
    type: NotificationType
    title: str
    body: str
    is_read: bool
    sent_at: datetime
    metadata: Optional[dict[str, Any]]


@dataclass(frozen=True)
class NotificationLogCreate:
    type: NotificationType
    title: str
    body: str
    dedupe_key: str
    metadata: Optional[dict[str, Any]] = None
