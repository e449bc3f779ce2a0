"""Portfolio analytics: asset allocation, performance and rebalancing."""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from finvault.analytics.rounding import ZERO, percent, round2
from finvault.config import DEFAULT_BENCHMARK_SYMBOL
from finvault.domain.entities import ASSET_CLASS_LABELS, AssetClass
from finvault.domain.errors import ValidationError, unknown_performance_period
from finvault.domain.reports import (
    AllocationSlice,
    AssetAllocation,
    Performance,
    PerformancePeriod,
    PerformancePoint,
    PerformanceSummary,
    RebalanceAction,
    RebalancePlan,
    RebalanceSuggestion,
)
from finvault.logging_config import get_logger
from finvault.stores.account import AccountStore
from finvault.stores.holding import HoldingStore
from finvault.stores.price_history import PriceHistoryStore
from finvault.stores.target_allocation import TargetAllocationStore

logger = get_logger(__name__)

ALL_TIME_START = date(2000, 1, 1)
PERIOD_MONTHS = {
    PerformancePeriod.ONE_MONTH: 1,
    PerformancePeriod.THREE_MONTHS: 3,
    PerformancePeriod.SIX_MONTHS: 6,
    PerformancePeriod.TWELVE_MONTHS: 12,
}
# Drift below this many percentage points is left alone
REBALANCE_THRESHOLD = Decimal("1")


def period_start(period: PerformancePeriod, today: date) -> date:
    """First day of a performance lookback window."""
    if period == PerformancePeriod.ALL:
        return ALL_TIME_START
    return today - relativedelta(months=PERIOD_MONTHS[period])


def _parse_period(period: Union[PerformancePeriod, str]) -> PerformancePeriod:
    try:
        return PerformancePeriod(period)
    except ValueError as e:
        raise ValidationError(unknown_performance_period(str(period))) from e


class PortfolioEngine:
    """Derives allocation, performance and rebalance plans from holdings.

    Queries without an account id cover the whole portfolio and count the
    balances of savings accounts as cash. Queries for one account never
    look at accounts.
    """

    def __init__(
        self,
        holdings: HoldingStore,
        accounts: AccountStore,
        targets: TargetAllocationStore,
        prices: PriceHistoryStore,
        benchmark_symbol: str = DEFAULT_BENCHMARK_SYMBOL,
    ):
        self.holdings = holdings
        self.accounts = accounts
        self.targets = targets
        self.prices = prices
        self.benchmark_symbol = benchmark_symbol

    def asset_allocation(self, account_id: Optional[str] = None) -> AssetAllocation:
        """Market value per asset class compared with target allocations.

        Asset classes with a target but no holdings appear at 0%. The cash
        slice from savings balances is only added for portfolio-wide queries
        and only when that balance is positive.
        """
        by_class: dict[AssetClass, Decimal] = {}
        total = ZERO
        for holding in self.holdings.list_holdings(account_id):
            value = holding.market_value or ZERO
            by_class[holding.asset_class] = by_class.get(holding.asset_class, ZERO) + value
            total += value

        if account_id is None:
            cash = self.accounts.get_cash_balance()
            if cash > 0:
                by_class[AssetClass.CASH] = by_class.get(AssetClass.CASH, ZERO) + cash
                total += cash

        targets = {target.asset_class: target.target_pct for target in self.targets.list_target_allocations(account_id)}

        slices = []
        for asset_class in list(by_class) + [c for c in targets if c not in by_class]:
            value = by_class.get(asset_class, ZERO)
            pct = percent(value, total)
            target_pct = targets.get(asset_class)
            slices.append(
                AllocationSlice(
                    asset_class=asset_class,
                    label=ASSET_CLASS_LABELS.get(asset_class, asset_class.value),
                    market_value=value,
                    percentage=round2(pct),
                    target_pct=target_pct,
                    drift=round2(pct - target_pct) if target_pct is not None else None,
                )
            )
        slices.sort(key=lambda s: s.market_value, reverse=True)
        return AssetAllocation(slices=tuple(slices), total_market_value=total)

    def performance(
        self,
        period: Union[PerformancePeriod, str] = PerformancePeriod.TWELVE_MONTHS,
        account_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Performance:
        """Portfolio value series over a lookback period with a benchmark line.

        Ticker holdings are valued from price history, carrying each ticker's
        last known price forward. Holdings without a ticker add their current
        market value to every point. The benchmark is rescaled so it starts
        at the portfolio's first value. Cash counts toward the summary totals
        but not toward the series.

        Raises:
            ValidationError: If period is not one of 1m, 3m, 6m, 12m, all
        """
        period = _parse_period(period)
        today = today or date.today()
        start = period_start(period, today)

        holdings = self.holdings.list_holdings(account_id)
        cash = self.accounts.get_cash_balance() if account_id is None else ZERO

        total_value = sum((h.market_value or ZERO for h in holdings), ZERO) + cash
        total_cost = (
            sum(
                (h.shares * h.cost_basis for h in holdings if h.shares is not None and h.cost_basis is not None),
                ZERO,
            )
            + cash
        )
        total_return = total_value - total_cost

        ticker_shares: dict[str, Decimal] = {}
        for holding in holdings:
            if holding.ticker and holding.shares is not None:
                ticker = holding.ticker.upper()
                ticker_shares[ticker] = ticker_shares.get(ticker, ZERO) + holding.shares
        flat_value = sum(
            (h.market_value for h in holdings if not h.ticker and h.market_value is not None),
            ZERO,
        )

        prices_by_date: dict[date, dict[str, Decimal]] = {}
        for ticker in ticker_shares:
            for point in self.prices.get_price_history(ticker, start, today):
                prices_by_date.setdefault(point.date, {})[ticker] = point.price
        benchmark = self.prices.get_benchmark_history(self.benchmark_symbol, start, today)
        benchmark_by_date = {point.date: point.price for point in benchmark}

        series: list[PerformancePoint] = []
        last_known: dict[str, Decimal] = {}
        first_benchmark: Optional[Decimal] = None
        for day in sorted(set(prices_by_date) | set(benchmark_by_date)):
            last_known.update(prices_by_date.get(day, {}))
            value = flat_value + sum(
                (shares * last_known[ticker] for ticker, shares in ticker_shares.items() if ticker in last_known),
                ZERO,
            )

            benchmark_value = None
            benchmark_price = benchmark_by_date.get(day)
            if benchmark_price is not None:
                if first_benchmark is None:
                    first_benchmark = benchmark_price
                if first_benchmark > 0:
                    anchor = series[0].portfolio_value if series else value
                    benchmark_value = anchor * benchmark_price / first_benchmark

            if value > 0 or benchmark_value is not None:
                series.append(PerformancePoint(date=day, portfolio_value=value, benchmark_value=benchmark_value))

        benchmark_return_pct = None
        if len(benchmark) >= 2 and benchmark[0].price > 0:
            first_price, last_price = benchmark[0].price, benchmark[-1].price
            benchmark_return_pct = round2((last_price - first_price) / first_price * 100)

        summary = PerformanceSummary(
            total_value=total_value,
            total_cost=total_cost,
            total_return=total_return,
            total_return_pct=round2(percent(total_return, total_cost)),
            benchmark_return_pct=benchmark_return_pct,
        )
        logger.debug("Built %s performance series with %d points", period.value, len(series))
        return Performance(summary=summary, series=tuple(series), period=period)

    def rebalance(self, account_id: Optional[str] = None) -> RebalancePlan:
        """Buy/sell/hold suggestion for every asset class that has a target.

        Drift is measured from the rounded allocation percentage. A drift
        under one percentage point is a hold; otherwise the amount is the
        drift's share of the total market value. Largest drift first.
        """
        allocation = self.asset_allocation(account_id)
        suggestions = []
        for slice_ in allocation.slices:
            if slice_.target_pct is None:
                continue
            drift = slice_.percentage - slice_.target_pct
            if abs(drift) < REBALANCE_THRESHOLD:
                action, amount = RebalanceAction.HOLD, ZERO
            else:
                action = RebalanceAction.SELL if drift > 0 else RebalanceAction.BUY
                amount = abs(drift) / 100 * allocation.total_market_value
            suggestions.append(
                RebalanceSuggestion(
                    asset_class=slice_.asset_class,
                    label=slice_.label,
                    current_pct=slice_.percentage,
                    target_pct=slice_.target_pct,
                    drift=round2(drift),
                    action=action,
                    amount=round2(amount),
                )
            )
        suggestions.sort(key=lambda s: abs(s.drift), reverse=True)
        return RebalancePlan(suggestions=tuple(suggestions), total_market_value=allocation.total_market_value)
