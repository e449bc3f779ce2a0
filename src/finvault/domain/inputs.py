"""Plaintext inputs accepted by the stores.

Create inputs list every field a new row may carry. Update inputs default
every field to UNSET: a field left UNSET is not touched, a field set to None
is cleared.
"""

from dataclasses import dataclass, fields
from datetime import datetime, date
from decimal import Decimal
from typing import Any, Optional, Sequence, TypeVar, Union

from finvault.domain.entities import (
    AccountType,
    AssetClass,
    BillFrequency,
    CreditProfile,
    GoalType,
    InvestmentProfile,
    LoanProfile,
    SavingsProfile,
)


class Unset:
    """Marker for a field the caller did not provide."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = Unset()

T = TypeVar("T")
Settable = Union[T, Unset]


def provided_fields(update: Any) -> dict[str, Any]:
    """Return only the fields of an update input that were explicitly set."""
    return {
        f.name: getattr(update, f.name)
        for f in fields(update)
        if getattr(update, f.name) is not UNSET
    }


@dataclass(frozen=True)
class SortOrderItem:
    id: str
    sort_order: int


@dataclass(frozen=True)
class AccountCreate:
    name: str
    type: AccountType
    institution: Optional[str] = None
    current_balance: Optional[Decimal] = None
    account_number: Optional[str] = None
    estimated_value: Optional[Decimal] = None
    interest_rate: Optional[Decimal] = None
    csv_parser_id: Optional[str] = None
    original_balance: Optional[Decimal] = None
    origination_date: Optional[date] = None
    maturity_date: Optional[date] = None
    loan_type: Optional[str] = None
    employer_name: Optional[str] = None
    is_active: Optional[bool] = None
    is_favorite: Optional[bool] = None
    exclude_from_income_sources: Optional[bool] = None
    dti_percentage: Optional[int] = None


@dataclass(frozen=True)
class AccountUpdate:
    name: Settable[str] = UNSET
    type: Settable[AccountType] = UNSET
    institution: Settable[str] = UNSET
    current_balance: Settable[Decimal] = UNSET
    account_number: Settable[Optional[str]] = UNSET
    estimated_value: Settable[Optional[Decimal]] = UNSET
    interest_rate: Settable[Optional[Decimal]] = UNSET
    csv_parser_id: Settable[Optional[str]] = UNSET
    original_balance: Settable[Optional[Decimal]] = UNSET
    origination_date: Settable[Optional[date]] = UNSET
    maturity_date: Settable[Optional[date]] = UNSET
    loan_type: Settable[Optional[str]] = UNSET
    employer_name: Settable[Optional[str]] = UNSET
    is_active: Settable[bool] = UNSET
    is_favorite: Settable[bool] = UNSET
    exclude_from_income_sources: Settable[bool] = UNSET
    dti_percentage: Settable[int] = UNSET


@dataclass(frozen=True)
class BalanceCreate:
    account_id: str
    balance: Decimal
    date: datetime
    loan_profile: Optional[LoanProfile] = None
    investment_profile: Optional[InvestmentProfile] = None
    savings_profile: Optional[SavingsProfile] = None
    credit_profile: Optional[CreditProfile] = None


@dataclass(frozen=True)
class GoalCreate:
    name: str
    type: GoalType
    target_amount: Decimal
    current_amount: Optional[Decimal] = None
    target_date: Optional[date] = None
    start_date: Optional[date] = None
    start_amount: Optional[Decimal] = None
    priority: Optional[int] = None
    account_ids: Optional[Sequence[str]] = None
    extra_payment: Optional[Decimal] = None
    monthly_contribution: Optional[Decimal] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class GoalUpdate:
    name: Settable[str] = UNSET
    type: Settable[GoalType] = UNSET
    target_amount: Settable[Decimal] = UNSET
    current_amount: Settable[Optional[Decimal]] = UNSET
    target_date: Settable[Optional[date]] = UNSET
    start_date: Settable[Optional[date]] = UNSET
    start_amount: Settable[Optional[Decimal]] = UNSET
    priority: Settable[int] = UNSET
    account_ids: Settable[Optional[Sequence[str]]] = UNSET
    extra_payment: Settable[Optional[Decimal]] = UNSET
    monthly_contribution: Settable[Optional[Decimal]] = UNSET
    notes: Settable[Optional[str]] = UNSET
    is_active: Settable[bool] = UNSET
    is_completed: Settable[bool] = UNSET


@dataclass(frozen=True)
class HoldingCreate:
    account_id: str
    name: str
    asset_class: AssetClass
    ticker: Optional[str] = None
    shares: Optional[Decimal] = None
    cost_basis: Optional[Decimal] = None
    current_price: Optional[Decimal] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class HoldingUpdate:
    name: Settable[str] = UNSET
    ticker: Settable[Optional[str]] = UNSET
    shares: Settable[Optional[Decimal]] = UNSET
    cost_basis: Settable[Optional[Decimal]] = UNSET
    current_price: Settable[Optional[Decimal]] = UNSET
    asset_class: Settable[AssetClass] = UNSET
    notes: Settable[Optional[str]] = UNSET


@dataclass(frozen=True)
class TransactionCreate:
    account_id: str
    date: date
    description: str
    amount: Decimal
    category: Optional[str] = None
    notes: Optional[str] = None
    dedupe_hash: Optional[str] = None


@dataclass(frozen=True)
class TransactionUpdate:
    category: Settable[Optional[str]] = UNSET
    notes: Settable[Optional[str]] = UNSET


@dataclass(frozen=True)
class BudgetCreate:
    category: str
    amount: Decimal
    effective_from: str
    notes: Optional[str] = None


@dataclass(frozen=True)
class BudgetUpdate:
    amount: Settable[Decimal] = UNSET
    notes: Settable[Optional[str]] = UNSET


@dataclass(frozen=True)
class BillCreate:
    name: str
    amount: Decimal
    frequency: BillFrequency
    due_day: int
    due_month: Optional[int] = None
    due_weekday: Optional[int] = None
    category: Optional[str] = None
    account_id: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


@dataclass(frozen=True)
class BillUpdate:
    name: Settable[str] = UNSET
    amount: Settable[Decimal] = UNSET
    frequency: Settable[BillFrequency] = UNSET
    due_day: Settable[int] = UNSET
    due_month: Settable[Optional[int]] = UNSET
    due_weekday: Settable[Optional[int]] = UNSET
    category: Settable[Optional[str]] = UNSET
    account_id: Settable[Optional[str]] = UNSET
    notes: Settable[Optional[str]] = UNSET
    is_active: Settable[bool] = UNSET
