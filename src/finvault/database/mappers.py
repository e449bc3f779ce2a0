"""Mapper functions between plaintext domain objects and encrypted rows.

This is the only place ciphertext is produced or read. Each entity has an
``encrypt_<entity>_for_create`` function returning the full column dict for
a new row, an ``encrypt_<entity>_for_update`` function returning only the
columns the caller provided, and a ``<entity>_to_domain`` function that
decrypts an ORM row into its domain entity.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Sequence

from finvault.codec import Codec
from finvault.domain import entities as domain
from finvault.domain import notifications
from finvault.domain.inputs import (
    AccountCreate,
    AccountUpdate,
    BalanceCreate,
    BillCreate,
    BillUpdate,
    BudgetCreate,
    BudgetUpdate,
    GoalCreate,
    GoalUpdate,
    HoldingCreate,
    HoldingUpdate,
    TransactionCreate,
    TransactionUpdate,
    provided_fields,
)
from finvault.database.models import (
    Account as ORMAccount,
    Balance as ORMBalance,
    BenchmarkHistory as ORMBenchmarkHistory,
    Bill as ORMBill,
    BillPayment as ORMBillPayment,
    Budget as ORMBudget,
    Goal as ORMGoal,
    Holding as ORMHolding,
    NotificationLog as ORMNotificationLog,
    NotificationPreference as ORMNotificationPreference,
    PriceHistory as ORMPriceHistory,
    TargetAllocation as ORMTargetAllocation,
    Transaction as ORMTransaction,
    utcnow,
)

STRING = "string"
NUMBER = "number"
DATE = "date"
JSON = "json"

ACCOUNT_FIELDS = {
    "name": STRING,
    "institution": STRING,
    "current_balance": NUMBER,
    "account_number": STRING,
    "estimated_value": NUMBER,
    "interest_rate": NUMBER,
    "original_balance": NUMBER,
    "origination_date": DATE,
    "maturity_date": DATE,
    "loan_type": STRING,
    "employer_name": STRING,
}

GOAL_FIELDS = {
    "name": STRING,
    "target_amount": NUMBER,
    "current_amount": NUMBER,
    "target_date": DATE,
    "start_date": DATE,
    "start_amount": NUMBER,
    "account_ids": JSON,
    "extra_payment": NUMBER,
    "monthly_contribution": NUMBER,
    "notes": STRING,
}

HOLDING_FIELDS = {
    "name": STRING,
    "ticker": STRING,
    "shares": NUMBER,
    "cost_basis": NUMBER,
    "current_price": NUMBER,
    "notes": STRING,
}

TRANSACTION_FIELDS = {
    "description": STRING,
    "amount": NUMBER,
    "notes": STRING,
}

BUDGET_FIELDS = {
    "amount": NUMBER,
    "notes": STRING,
}

BILL_FIELDS = {
    "name": STRING,
    "amount": NUMBER,
    "notes": STRING,
}

PROFILE_FIELDS: dict[type, dict[str, str]] = {
    domain.LoanProfile: {
        "period_start": DATE,
        "period_end": DATE,
        "interest_rate": NUMBER,
        "monthly_payment": NUMBER,
        "principal_paid": NUMBER,
        "interest_paid": NUMBER,
        "escrow_amount": NUMBER,
        "next_payment_date": DATE,
        "remaining_term_months": NUMBER,
    },
    domain.InvestmentProfile: {
        "period_start": DATE,
        "period_end": DATE,
        "rate_of_return": NUMBER,
        "ytd_return": NUMBER,
        "total_gain_loss": NUMBER,
        "contributions": NUMBER,
        "employer_match": NUMBER,
        "vesting_pct": NUMBER,
        "fees": NUMBER,
        "expense_ratio": NUMBER,
        "dividends": NUMBER,
        "capital_gains": NUMBER,
        "num_holdings": NUMBER,
    },
    domain.SavingsProfile: {
        "period_start": DATE,
        "period_end": DATE,
        "apy": NUMBER,
        "interest_earned": NUMBER,
        "interest_earned_ytd": NUMBER,
    },
    domain.CreditProfile: {
        "period_start": DATE,
        "period_end": DATE,
        "apr": NUMBER,
        "minimum_payment": NUMBER,
        "credit_limit": NUMBER,
        "available_credit": NUMBER,
        "interest_charged": NUMBER,
        "fees_charged": NUMBER,
        "rewards_earned": NUMBER,
        "payment_due_date": DATE,
    },
}

# Balance relationship attribute for each profile class
PROFILE_ATTRIBUTES: dict[type, str] = {
    domain.LoanProfile: "loan_profile",
    domain.InvestmentProfile: "investment_profile",
    domain.SavingsProfile: "savings_profile",
    domain.CreditProfile: "credit_profile",
}


def _encrypt_value(codec: Codec, kind: str, value: Any) -> Optional[str]:
    if kind == NUMBER:
        return codec.encrypt_optional_number(value)
    if kind == DATE:
        return codec.encrypt_optional_date(value)
    if kind == JSON:
        return codec.encrypt_optional_json(value)
    return codec.encrypt_optional_string(value)


def _decrypt_value(codec: Codec, kind: str, ciphertext: Optional[str]) -> Any:
    if kind == NUMBER:
        return codec.decrypt_optional_number(ciphertext)
    if kind == DATE:
        return codec.decrypt_optional_date(ciphertext)
    if kind == JSON:
        return codec.decrypt_optional_json(ciphertext)
    return codec.decrypt_optional_string(ciphertext)


def _plain(value: Any) -> Any:
    """Store enums by value; everything else plaintext as-is."""
    if isinstance(value, Enum):
        return value.value
    return value


def _encrypt_fields(codec: Codec, sensitive: dict[str, str], values: dict[str, Any]) -> dict[str, Any]:
    """Encrypt the sensitive keys of values, passing plaintext keys through."""
    return {
        key: _encrypt_value(codec, sensitive[key], value) if key in sensitive else _plain(value)
        for key, value in values.items()
    }


def _decrypt_fields(codec: Codec, sensitive: dict[str, str], row: Any) -> dict[str, Any]:
    return {key: _decrypt_value(codec, kind, getattr(row, key)) for key, kind in sensitive.items()}


def _with_plaintext_flags(values: dict[str, Any], data: Any, names: Sequence[str]) -> dict[str, Any]:
    """Add plaintext flags only when supplied, so column defaults apply otherwise."""
    for name in names:
        value = getattr(data, name)
        if value is not None:
            values[name] = value
    return values


def normalize_account_ids(account_ids: Optional[Sequence[str]]) -> Optional[list[str]]:
    """Treat an empty account list the same as no list."""
    if not account_ids:
        return None
    return list(account_ids)


# Accounts


def encrypt_account_for_create(codec: Codec, data: AccountCreate, sort_order: int) -> dict[str, Any]:
    values = {
        "name": codec.encrypt_string(data.name),
        "type": _plain(data.type),
        "institution": codec.encrypt_string(data.institution or ""),
        "current_balance": codec.encrypt_number(
            data.current_balance if data.current_balance is not None else Decimal("0")
        ),
        "csv_parser_id": data.csv_parser_id,
        "sort_order": sort_order,
    }
    for key in (
        "account_number",
        "estimated_value",
        "interest_rate",
        "original_balance",
        "origination_date",
        "maturity_date",
        "loan_type",
        "employer_name",
    ):
        values[key] = _encrypt_value(codec, ACCOUNT_FIELDS[key], getattr(data, key))
    return _with_plaintext_flags(
        values,
        data,
        ("is_active", "is_favorite", "exclude_from_income_sources", "dti_percentage"),
    )


def encrypt_account_for_update(codec: Codec, data: AccountUpdate) -> dict[str, Any]:
    return _encrypt_fields(codec, ACCOUNT_FIELDS, provided_fields(data))


def account_to_domain(codec: Codec, orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        type=domain.AccountType(orm_account.type),
        csv_parser_id=orm_account.csv_parser_id,
        is_active=orm_account.is_active,
        is_favorite=orm_account.is_favorite,
        exclude_from_income_sources=orm_account.exclude_from_income_sources,
        dti_percentage=orm_account.dti_percentage,
        sort_order=orm_account.sort_order,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
        **_decrypt_fields(codec, ACCOUNT_FIELDS, orm_account),
    )


# Balances and statement profiles


def encrypt_profile(codec: Codec, profile: Any) -> Optional[dict[str, Any]]:
    """Encrypt a statement profile, or return None if it carries no values."""
    if profile is None:
        return None
    sensitive = PROFILE_FIELDS[type(profile)]
    values = {key: getattr(profile, key) for key in sensitive}
    if all(value is None for value in values.values()):
        return None
    return _encrypt_fields(codec, sensitive, values)


def profile_to_domain(codec: Codec, profile_cls: type, orm_profile: Any) -> Any:
    """Decrypt a profile row; a profile that was never attached is None."""
    if orm_profile is None:
        return None
    return profile_cls(**_decrypt_fields(codec, PROFILE_FIELDS[profile_cls], orm_profile))


def encrypt_balance_for_create(codec: Codec, data: BalanceCreate) -> dict[str, Any]:
    return {
        "account_id": data.account_id,
        "balance": codec.encrypt_number(data.balance),
        "date": data.date,
    }


def balance_to_domain(codec: Codec, orm_balance: ORMBalance) -> domain.Balance:
    """Convert SQLAlchemy Balance model to domain Balance entity."""
    profiles = {
        attribute: profile_to_domain(codec, profile_cls, getattr(orm_balance, attribute))
        for profile_cls, attribute in PROFILE_ATTRIBUTES.items()
    }
    return domain.Balance(
        id=orm_balance.id,
        account_id=orm_balance.account_id,
        balance=codec.decrypt_number(orm_balance.balance),
        date=orm_balance.date,
        **profiles,
    )


# Goals


def encrypt_goal_for_create(codec: Codec, data: GoalCreate, sort_order: int) -> dict[str, Any]:
    values = {key: getattr(data, key) for key in GOAL_FIELDS}
    values["account_ids"] = normalize_account_ids(data.account_ids)
    encrypted = _encrypt_fields(codec, GOAL_FIELDS, values)
    encrypted["type"] = _plain(data.type)
    encrypted["sort_order"] = sort_order
    if data.priority is not None:
        encrypted["priority"] = data.priority
    return encrypted


def encrypt_goal_for_update(codec: Codec, data: GoalUpdate) -> dict[str, Any]:
    values = provided_fields(data)
    if "account_ids" in values:
        values["account_ids"] = normalize_account_ids(values["account_ids"])
    encrypted = _encrypt_fields(codec, GOAL_FIELDS, values)
    if "is_completed" in values:
        encrypted["completed_at"] = utcnow() if values["is_completed"] else None
    return encrypted


def goal_to_domain(codec: Codec, orm_goal: ORMGoal) -> domain.Goal:
    """Convert SQLAlchemy Goal model to domain Goal entity."""
    values = _decrypt_fields(codec, GOAL_FIELDS, orm_goal)
    account_ids = values.pop("account_ids")
    return domain.Goal(
        id=orm_goal.id,
        type=domain.GoalType(orm_goal.type),
        priority=orm_goal.priority,
        account_ids=tuple(account_ids) if account_ids else None,
        is_active=orm_goal.is_active,
        is_completed=orm_goal.is_completed,
        completed_at=orm_goal.completed_at,
        sort_order=orm_goal.sort_order,
        created_at=orm_goal.created_at,
        updated_at=orm_goal.updated_at,
        **values,
    )


# Holdings


def compute_holding_values(
    shares: Optional[Decimal],
    cost_basis: Optional[Decimal],
    current_price: Optional[Decimal],
) -> tuple[Optional[Decimal], Optional[Decimal], Optional[Decimal]]:
    """Return (market_value, gain_loss, gain_loss_pct) for a holding.

    All three are None unless shares and current_price are both known.
    Gain fields additionally need a cost basis.
    """
    if shares is None or current_price is None:
        return None, None, None
    market_value = shares * current_price
    if cost_basis is None:
        return market_value, None, None
    total_cost = shares * cost_basis
    gain_loss = market_value - total_cost
    gain_loss_pct = Decimal("0") if total_cost == 0 else gain_loss / total_cost * 100
    return market_value, gain_loss, gain_loss_pct


def encrypt_holding_for_create(codec: Codec, data: HoldingCreate, sort_order: int) -> dict[str, Any]:
    values = _encrypt_fields(codec, HOLDING_FIELDS, {key: getattr(data, key) for key in HOLDING_FIELDS})
    values.update(
        account_id=data.account_id,
        asset_class=_plain(data.asset_class),
        sort_order=sort_order,
    )
    return values


def encrypt_holding_for_update(codec: Codec, data: HoldingUpdate) -> dict[str, Any]:
    return _encrypt_fields(codec, HOLDING_FIELDS, provided_fields(data))


def holding_to_domain(codec: Codec, orm_holding: ORMHolding) -> domain.Holding:
    """Convert SQLAlchemy Holding model to domain Holding entity."""
    values = _decrypt_fields(codec, HOLDING_FIELDS, orm_holding)
    market_value, gain_loss, gain_loss_pct = compute_holding_values(
        values["shares"], values["cost_basis"], values["current_price"]
    )
    return domain.Holding(
        id=orm_holding.id,
        account_id=orm_holding.account_id,
        asset_class=domain.AssetClass(orm_holding.asset_class),
        sort_order=orm_holding.sort_order,
        created_at=orm_holding.created_at,
        updated_at=orm_holding.updated_at,
        market_value=market_value,
        gain_loss=gain_loss,
        gain_loss_pct=gain_loss_pct,
        **values,
    )


# Target allocations and price history


def target_allocation_to_domain(codec: Codec, orm_target: ORMTargetAllocation) -> domain.TargetAllocation:
    return domain.TargetAllocation(
        id=orm_target.id,
        account_id=orm_target.account_id,
        asset_class=domain.AssetClass(orm_target.asset_class),
        target_pct=codec.decrypt_number(orm_target.target_pct),
        created_at=orm_target.created_at,
        updated_at=orm_target.updated_at,
    )


def price_point_to_domain(codec: Codec, orm_price: ORMPriceHistory) -> domain.PricePoint:
    return domain.PricePoint(
        ticker=orm_price.ticker,
        price=codec.decrypt_number(orm_price.price),
        date=orm_price.date,
        source=orm_price.source,
    )


def benchmark_point_to_domain(codec: Codec, orm_point: ORMBenchmarkHistory) -> domain.BenchmarkPoint:
    return domain.BenchmarkPoint(
        symbol=orm_point.symbol,
        price=codec.decrypt_number(orm_point.price),
        date=orm_point.date,
    )


# Transactions


def encrypt_transaction_for_create(codec: Codec, data: TransactionCreate) -> dict[str, Any]:
    values = _encrypt_fields(
        codec, TRANSACTION_FIELDS, {key: getattr(data, key) for key in TRANSACTION_FIELDS}
    )
    values.update(
        account_id=data.account_id,
        date=data.date,
        category=data.category,
        dedupe_hash=data.dedupe_hash,
    )
    return values


def encrypt_transaction_for_update(codec: Codec, data: TransactionUpdate) -> dict[str, Any]:
    return _encrypt_fields(codec, TRANSACTION_FIELDS, provided_fields(data))


def transaction_to_domain(codec: Codec, orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        date=orm_transaction.date,
        category=orm_transaction.category,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
        **_decrypt_fields(codec, TRANSACTION_FIELDS, orm_transaction),
    )


# Budgets


def encrypt_budget_for_create(codec: Codec, data: BudgetCreate) -> dict[str, Any]:
    values = _encrypt_fields(codec, BUDGET_FIELDS, {key: getattr(data, key) for key in BUDGET_FIELDS})
    values.update(category=data.category, effective_from=data.effective_from)
    return values


def encrypt_budget_for_update(codec: Codec, data: BudgetUpdate) -> dict[str, Any]:
    return _encrypt_fields(codec, BUDGET_FIELDS, provided_fields(data))


def budget_to_domain(codec: Codec, orm_budget: ORMBudget) -> domain.Budget:
    return domain.Budget(
        id=orm_budget.id,
        category=orm_budget.category,
        effective_from=orm_budget.effective_from,
        created_at=orm_budget.created_at,
        updated_at=orm_budget.updated_at,
        **_decrypt_fields(codec, BUDGET_FIELDS, orm_budget),
    )


# Bills


def encrypt_bill_for_create(codec: Codec, data: BillCreate) -> dict[str, Any]:
    values = _encrypt_fields(codec, BILL_FIELDS, {key: getattr(data, key) for key in BILL_FIELDS})
    values.update(
        frequency=_plain(data.frequency),
        due_day=data.due_day,
        due_month=data.due_month,
        due_weekday=data.due_weekday,
        category=data.category,
        account_id=data.account_id,
    )
    return _with_plaintext_flags(values, data, ("is_active",))


def encrypt_bill_for_update(codec: Codec, data: BillUpdate) -> dict[str, Any]:
    return _encrypt_fields(codec, BILL_FIELDS, provided_fields(data))


def bill_to_domain(codec: Codec, orm_bill: ORMBill) -> domain.Bill:
    return domain.Bill(
        id=orm_bill.id,
        frequency=domain.BillFrequency(orm_bill.frequency),
        due_day=orm_bill.due_day,
        due_month=orm_bill.due_month,
        due_weekday=orm_bill.due_weekday,
        category=orm_bill.category,
        account_id=orm_bill.account_id,
        is_active=orm_bill.is_active,
        created_at=orm_bill.created_at,
        updated_at=orm_bill.updated_at,
        **_decrypt_fields(codec, BILL_FIELDS, orm_bill),
    )


def bill_payment_to_domain(codec: Codec, orm_payment: ORMBillPayment) -> domain.BillPayment:
    return domain.BillPayment(
        id=orm_payment.id,
        bill_id=orm_payment.bill_id,
        due_date=orm_payment.due_date,
        paid_date=orm_payment.paid_date,
        amount=codec.decrypt_number(orm_payment.amount),
    )


# Notifications


def encrypt_notification_config(
    codec: Codec, config: Optional[notifications.NotificationConfig]
) -> Optional[str]:
    if config is None:
        return None
    return codec.encrypt_json(notifications.config_to_dict(config))


def notification_preference_to_domain(
    codec: Codec, orm_preference: ORMNotificationPreference
) -> notifications.NotificationPreference:
    notification_type = notifications.NotificationType(orm_preference.type)
    data = codec.decrypt_optional_json(orm_preference.config)
    if data is None:
        config = notifications.default_config(notification_type)
    else:
        config = notifications.parse_config(notification_type, data)
    return notifications.NotificationPreference(
        id=orm_preference.id,
        type=notification_type,
        enabled=orm_preference.enabled,
        config=config,
        created_at=orm_preference.created_at,
        updated_at=orm_preference.updated_at,
    )


def encrypt_notification_log_for_create(
    codec: Codec, data: notifications.NotificationLogCreate
) -> dict[str, Any]:
    return {
        "type": _plain(data.type),
        "title": codec.encrypt_string(data.title),
        "body": codec.encrypt_string(data.body),
        "dedupe_key": data.dedupe_key,
        "metadata_": codec.encrypt_optional_json(data.metadata),
    }


def notification_log_to_domain(
    codec: Codec, orm_log: ORMNotificationLog
) -> notifications.NotificationLogEntry:
    return notifications.NotificationLogEntry(
        id=orm_log.id,
        type=notifications.NotificationType(orm_log.type),
        title=codec.decrypt_string(orm_log.title),
        body=codec.decrypt_string(orm_log.body),
        is_read=orm_log.is_read,
        sent_at=orm_log.sent_at,
        metadata=codec.decrypt_optional_json(orm_log.metadata_),
    )
