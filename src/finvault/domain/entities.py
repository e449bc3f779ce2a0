"""Domain model entities for finvault.

These are pure data classes holding decrypted, plaintext values. Raw
persisted rows never cross the store boundary; everything above it works
with these types.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Kinds of financial account."""

    CHECKING = "checking"
    SAVINGS = "savings"
    HIGH_YIELD_SAVINGS = "high_yield_savings"
    CREDIT = "credit"
    INVESTMENT = "investment"
    LOAN = "loan"
    REAL_ESTATE = "real_estate"
    OTHER = "other"


LIABILITY_TYPES = frozenset({AccountType.CREDIT, AccountType.LOAN})
CASH_TYPES = frozenset({AccountType.SAVINGS, AccountType.HIGH_YIELD_SAVINGS})


def classify_account_type(account_type: AccountType) -> str:
    """Return 'liability' for credit and loan accounts, 'asset' otherwise."""
    return "liability" if account_type in LIABILITY_TYPES else "asset"


class GoalType(str, Enum):
    SAVINGS = "savings"
    DEBT_PAYOFF = "debt_payoff"
    NET_WORTH = "net_worth"
    CUSTOM = "custom"


class AssetClass(str, Enum):
    STOCKS = "stocks"
    BONDS = "bonds"
    REAL_ESTATE = "real_estate"
    CASH = "cash"
    CRYPTO = "crypto"
    COMMODITIES = "commodities"
    OTHER = "other"


ASSET_CLASS_LABELS = {
    AssetClass.STOCKS: "Stocks",
    AssetClass.BONDS: "Bonds",
    AssetClass.REAL_ESTATE: "Real Estate",
    AssetClass.CASH: "Cash",
    AssetClass.CRYPTO: "Crypto",
    AssetClass.COMMODITIES: "Commodities",
    AssetClass.OTHER: "Other",
}


class BillFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"


@dataclass(frozen=True)
class Account:
    """Financial account domain entity."""

    id: str
    name: str
    type: AccountType
    institution: str
    current_balance: Decimal
    account_number: Optional[str]
    estimated_value: Optional[Decimal]
    interest_rate: Optional[Decimal]
    csv_parser_id: Optional[str]
    original_balance: Optional[Decimal]
    origination_date: Optional[date]
    maturity_date: Optional[date]
    loan_type: Optional[str]
    employer_name: Optional[str]
    is_active: bool
    is_favorite: bool
    exclude_from_income_sources: bool
    dti_percentage: int
    sort_order: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class LoanProfile:
    """Loan statement details attached to a balance snapshot."""

    period_start: Optional[date] = None
    period_end: Optional[date] = None
    interest_rate: Optional[Decimal] = None
    monthly_payment: Optional[Decimal] = None
    principal_paid: Optional[Decimal] = None
    interest_paid: Optional[Decimal] = None
    escrow_amount: Optional[Decimal] = None
    next_payment_date: Optional[date] = None
    remaining_term_months: Optional[Decimal] = None


@dataclass(frozen=True)
class InvestmentProfile:
    """Investment statement details attached to a balance snapshot."""

    period_start: Optional[date] = None
    period_end: Optional[date] = None
    rate_of_return: Optional[Decimal] = None
    ytd_return: Optional[Decimal] = None
    total_gain_loss: Optional[Decimal] = None
    contributions: Optional[Decimal] = None
    employer_match: Optional[Decimal] = None
    vesting_pct: Optional[Decimal] = None
    fees: Optional[Decimal] = None
    expense_ratio: Optional[Decimal] = None
    dividends: Optional[Decimal] = None
    capital_gains: Optional[Decimal] = None
    num_holdings: Optional[Decimal] = None


@dataclass(frozen=True)
class SavingsProfile:
    """Savings statement details attached to a balance snapshot."""

    period_start: Optional[date] = None
    period_end: Optional[date] = None
    apy: Optional[Decimal] = None
    interest_earned: Optional[Decimal] = None
    interest_earned_ytd: Optional[Decimal] = None


@dataclass(frozen=True)
class CreditProfile:
    """Credit card statement details attached to a balance snapshot."""

    period_start: Optional[date] = None
    period_end: Optional[date] = None
    apr: Optional[Decimal] = None
    minimum_payment: Optional[Decimal] = None
    credit_limit: Optional[Decimal] = None
    available_credit: Optional[Decimal] = None
    interest_charged: Optional[Decimal] = None
    fees_charged: Optional[Decimal] = None
    rewards_earned: Optional[Decimal] = None
    payment_due_date: Optional[date] = None


@dataclass(frozen=True)
class Balance:
    """Append-only balance snapshot for an account."""

    id: str
    account_id: str
    balance: Decimal
    date: datetime
    loan_profile: Optional[LoanProfile] = None
    investment_profile: Optional[InvestmentProfile] = None
    savings_profile: Optional[SavingsProfile] = None
    credit_profile: Optional[CreditProfile] = None


@dataclass(frozen=True)
class Goal:
    """Financial goal domain entity."""

    id: str
    name: str
    type: GoalType
    target_amount: Decimal
    current_amount: Optional[Decimal]
    target_date: Optional[date]
    start_date: Optional[date]
    start_amount: Optional[Decimal]
    priority: int
    account_ids: Optional[tuple[str, ...]]
    extra_payment: Optional[Decimal]
    monthly_contribution: Optional[Decimal]
    notes: Optional[str]
    is_active: bool
    is_completed: bool
    completed_at: Optional[datetime]
    sort_order: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Holding:
    """Investment holding domain entity.

    market_value, gain_loss and gain_loss_pct are derived on read and are
    None unless both shares and current_price are known.
    """

    id: str
    account_id: str
    name: str
    ticker: Optional[str]
    shares: Optional[Decimal]
    cost_basis: Optional[Decimal]
    current_price: Optional[Decimal]
    asset_class: AssetClass
    notes: Optional[str]
    sort_order: int
    created_at: datetime
    updated_at: datetime
    market_value: Optional[Decimal] = None
    gain_loss: Optional[Decimal] = None
    gain_loss_pct: Optional[Decimal] = None


@dataclass(frozen=True)
class TargetAllocation:
    """Target percentage for an asset class; account_id None is portfolio-wide."""

    id: str
    account_id: Optional[str]
    asset_class: AssetClass
    target_pct: Decimal
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class PricePoint:
    """Closing price for a ticker on one day."""

    ticker: str
    price: Decimal
    date: date
    source: str


@dataclass(frozen=True)
class BenchmarkPoint:
    """Closing price for a benchmark index on one day."""

    symbol: str
    price: Decimal
    date: date


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: str
    account_id: str
    date: date
    description: str
    amount: Decimal
    category: Optional[str]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Budget:
    """Monthly budget for a category, effective from a YYYY-MM month."""

    id: str
    category: str
    amount: Decimal
    effective_from: str
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Bill:
    """Recurring bill domain entity."""

    id: str
    name: str
    amount: Decimal
    frequency: BillFrequency
    due_day: int
    due_month: Optional[int]
    due_weekday: Optional[int]
    category: Optional[str]
    account_id: Optional[str]
    notes: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class BillPayment:
    """Payment record for one due date of a bill."""

    id: str
    bill_id: str
    due_date: date
    paid_date: datetime
    amount: Decimal


@dataclass(frozen=True)
class UpcomingBillInstance:
    """A generated due date of a bill with its payment status."""

    bill_id: str
    bill_name: str
    amount: Decimal
    due_date: date
    is_paid: bool
    is_overdue: bool
    category: Optional[str]
    payment_id: Optional[str]
