"""Result types produced by the analytics engines. Never persisted."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from finvault.domain.entities import AccountType, AssetClass


@dataclass(frozen=True)
class NetWorthAccount:
    id: str
    name: str
    type: AccountType
    balance: Decimal
    previous_balance: Optional[Decimal]
    classification: str
    is_favorite: bool


@dataclass(frozen=True)
class NetWorthSummary:
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    accounts: tuple[NetWorthAccount, ...]


@dataclass(frozen=True)
class NetWorthPoint:
    """Net worth at the end of one YYYY-MM period."""

    date: str
    assets: Decimal
    liabilities: Decimal
    net_worth: Decimal


@dataclass(frozen=True)
class AccountBalancesPoint:
    date: str
    balances: dict[str, Decimal]


@dataclass(frozen=True)
class NetWorthHistory:
    history: tuple[NetWorthPoint, ...] = ()
    account_history: tuple[AccountBalancesPoint, ...] = ()


@dataclass(frozen=True)
class SpendingCategory:
    category: str
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class SpendingSummary:
    month: str
    categories: tuple[SpendingCategory, ...]
    total: Decimal


@dataclass(frozen=True)
class AllocationSlice:
    asset_class: AssetClass
    label: str
    market_value: Decimal
    percentage: Decimal
    target_pct: Optional[Decimal] = None
    drift: Optional[Decimal] = None


@dataclass(frozen=True)
class AssetAllocation:
    slices: tuple[AllocationSlice, ...]
    total_market_value: Decimal


class PerformancePeriod(str, Enum):
    ONE_MONTH = "1m"
    THREE_MONTHS = "3m"
    SIX_MONTHS = "6m"
    TWELVE_MONTHS = "12m"
    ALL = "all"


@dataclass(frozen=True)
class PerformancePoint:
    date: date
    portfolio_value: Decimal
    benchmark_value: Optional[Decimal] = None


@dataclass(frozen=True)
class PerformanceSummary:
    total_value: Decimal
    total_cost: Decimal
    total_return: Decimal
    total_return_pct: Decimal
    benchmark_return_pct: Optional[Decimal] = None


@dataclass(frozen=True)
class Performance:
    summary: PerformanceSummary
    series: tuple[PerformancePoint, ...]
    period: PerformancePeriod


class RebalanceAction(str, Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


@dataclass(frozen=True)
class RebalanceSuggestion:
    asset_class: AssetClass
    label: str
    current_pct: Decimal
    target_pct: Decimal
    drift: Decimal
    action: RebalanceAction
    amount: Decimal


@dataclass(frozen=True)
class RebalancePlan:
    suggestions: tuple[RebalanceSuggestion, ...] = field(default_factory=tuple)
    total_market_value: Decimal = Decimal("0")
