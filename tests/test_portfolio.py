"""Tests for allocation, performance and rebalancing."""

from datetime import date
from decimal import Decimal

import pytest

from finvault.analytics.portfolio import PortfolioEngine, period_start
from finvault.domain.entities import AccountType, AssetClass
from finvault.domain.errors import ValidationError
from finvault.domain.inputs import AccountCreate, HoldingCreate
from finvault.domain.reports import PerformancePeriod, RebalanceAction


def _holding(store, account_id, name, shares, price, asset_class=AssetClass.STOCKS, **kwargs):
    return store.create_holding(
        HoldingCreate(
            account_id=account_id,
            name=name,
            asset_class=asset_class,
            shares=Decimal(shares),
            current_price=Decimal(price),
            **kwargs,
        )
    )


class TestAssetAllocation:
    def test_portfolio_includes_savings_as_cash(
        self, portfolio_engine, holding_store, account_store, investment_account
    ):
        _holding(holding_store, investment_account.id, "Index fund", "12", "100")
        account_store.create_account(
            AccountCreate(name="Savings", type=AccountType.SAVINGS, current_balance=Decimal("5000"))
        )

        allocation = portfolio_engine.asset_allocation()

        assert allocation.total_market_value == Decimal("6200")
        assert [(s.asset_class, s.percentage) for s in allocation.slices] == [
            (AssetClass.CASH, Decimal("80.65")),
            (AssetClass.STOCKS, Decimal("19.35")),
        ]
        assert allocation.slices[0].label == "Cash"

    def test_account_query_never_reads_cash(
        self, portfolio_engine, holding_store, account_store, investment_account, monkeypatch
    ):
        _holding(holding_store, investment_account.id, "Index fund", "12", "100")

        def fail():
            raise AssertionError("cash balance must not be read for an account query")

        monkeypatch.setattr(account_store, "get_cash_balance", fail)

        allocation = portfolio_engine.asset_allocation(investment_account.id)

        assert allocation.total_market_value == Decimal("1200")
        assert [s.asset_class for s in allocation.slices] == [AssetClass.STOCKS]

    def test_zero_cash_is_omitted(self, portfolio_engine, holding_store, investment_account):
        _holding(holding_store, investment_account.id, "Index fund", "1", "10")

        assert [s.asset_class for s in portfolio_engine.asset_allocation().slices] == [AssetClass.STOCKS]

    def test_targets_without_holdings_and_drift(
        self, portfolio_engine, holding_store, target_store, investment_account
    ):
        _holding(holding_store, investment_account.id, "Index fund", "1", "100")
        target_store.set_target_allocations(
            None, [(AssetClass.STOCKS, Decimal("80")), (AssetClass.BONDS, Decimal("20"))]
        )

        slices = {s.asset_class: s for s in portfolio_engine.asset_allocation().slices}

        assert slices[AssetClass.STOCKS].drift == Decimal("20.00")
        assert slices[AssetClass.BONDS].market_value == Decimal("0")
        assert slices[AssetClass.BONDS].percentage == Decimal("0.00")
        assert slices[AssetClass.BONDS].drift == Decimal("-20.00")

    def test_empty_portfolio(self, portfolio_engine):
        allocation = portfolio_engine.asset_allocation()

        assert allocation.slices == ()
        assert allocation.total_market_value == Decimal("0")


class TestPerformance:
    @pytest.fixture
    def priced_portfolio(self, holding_store, price_store, investment_account):
        _holding(holding_store, investment_account.id, "AAA Corp", "10", "110", ticker="AAA", cost_basis=Decimal("100"))
        _holding(holding_store, investment_account.id, "BBB Corp", "5", "60", ticker="bbb", cost_basis=Decimal("50"))
        _holding(
            holding_store,
            investment_account.id,
            "Private note",
            "1",
            "500",
            asset_class=AssetClass.OTHER,
            cost_basis=Decimal("400"),
        )
        for day, price in [(1, "100"), (15, "105"), (29, "110")]:
            price_store.upsert_price("AAA", Decimal(price), date(2024, 3, day))
        price_store.upsert_price("BBB", Decimal("50"), date(2024, 3, 1))
        price_store.upsert_price("BBB", Decimal("60"), date(2024, 3, 29))
        price_store.upsert_benchmark_price("SPY", Decimal("400"), date(2024, 3, 1))
        price_store.upsert_benchmark_price("SPY", Decimal("440"), date(2024, 3, 29))
        # Outside the one month window
        price_store.upsert_price("AAA", Decimal("1"), date(2024, 1, 2))

    def test_series_and_benchmark(self, portfolio_engine, priced_portfolio):
        performance = portfolio_engine.performance("1m", today=date(2024, 3, 31))

        assert performance.period == PerformancePeriod.ONE_MONTH
        assert [(p.date.day, p.portfolio_value) for p in performance.series] == [
            (1, Decimal("1750")),
            (15, Decimal("1800")),
            (29, Decimal("1900")),
        ]
        assert [p.benchmark_value for p in performance.series] == [Decimal("1750"), None, Decimal("1925")]

    def test_summary(self, portfolio_engine, priced_portfolio):
        summary = portfolio_engine.performance("1m", today=date(2024, 3, 31)).summary

        assert summary.total_value == Decimal("1900")
        assert summary.total_cost == Decimal("1650")
        assert summary.total_return == Decimal("250")
        assert summary.total_return_pct == Decimal("15.15")
        assert summary.benchmark_return_pct == Decimal("10.00")

    def test_other_benchmark_symbol(
        self, holding_store, account_store, target_store, price_store, priced_portfolio
    ):
        engine = PortfolioEngine(holding_store, account_store, target_store, price_store, benchmark_symbol="QQQ")

        performance = engine.performance("1m", today=date(2024, 3, 31))

        assert all(p.benchmark_value is None for p in performance.series)
        assert performance.summary.benchmark_return_pct is None

    def test_cash_in_totals_not_series(self, portfolio_engine, account_store, priced_portfolio):
        account_store.create_account(
            AccountCreate(name="HYS", type=AccountType.HIGH_YIELD_SAVINGS, current_balance=Decimal("100"))
        )

        performance = portfolio_engine.performance("1m", today=date(2024, 3, 31))

        assert performance.summary.total_value == Decimal("2000")
        assert performance.summary.total_cost == Decimal("1750")
        assert performance.series[-1].portfolio_value == Decimal("1900")

    def test_unknown_period(self, portfolio_engine):
        with pytest.raises(ValidationError):
            portfolio_engine.performance("2w")

    def test_period_start(self):
        today = date(2024, 3, 31)

        assert period_start(PerformancePeriod.ONE_MONTH, today) == date(2024, 2, 29)
        assert period_start(PerformancePeriod.TWELVE_MONTHS, today) == date(2023, 3, 31)
        assert period_start(PerformancePeriod.ALL, today) == date(2000, 1, 1)


class TestRebalance:
    def _portfolio(self, holding_store, target_store, account_id, stocks, bonds):
        _holding(holding_store, account_id, "Stocks", "1", stocks)
        _holding(holding_store, account_id, "Bonds", "1", bonds, asset_class=AssetClass.BONDS)
        target_store.set_target_allocations(
            None, [(AssetClass.STOCKS, Decimal("60")), (AssetClass.BONDS, Decimal("40"))]
        )

    def test_one_point_drift_trades(self, portfolio_engine, holding_store, target_store, investment_account):
        self._portfolio(holding_store, target_store, investment_account.id, "6100", "3900")

        plan = portfolio_engine.rebalance()

        actions = {s.asset_class: (s.action, s.drift, s.amount) for s in plan.suggestions}
        assert actions == {
            AssetClass.STOCKS: (RebalanceAction.SELL, Decimal("1.00"), Decimal("100.00")),
            AssetClass.BONDS: (RebalanceAction.BUY, Decimal("-1.00"), Decimal("100.00")),
        }
        assert plan.total_market_value == Decimal("10000")

    def test_small_drift_holds(self, portfolio_engine, holding_store, target_store, investment_account):
        self._portfolio(holding_store, target_store, investment_account.id, "6099", "3901")

        plan = portfolio_engine.rebalance()

        assert {s.action for s in plan.suggestions} == {RebalanceAction.HOLD}
        assert all(s.amount == Decimal("0.00") for s in plan.suggestions)

    def test_sorted_by_absolute_drift(self, portfolio_engine, holding_store, target_store, investment_account):
        _holding(holding_store, investment_account.id, "Stocks", "1", "50")
        _holding(holding_store, investment_account.id, "Bonds", "1", "30", asset_class=AssetClass.BONDS)
        _holding(holding_store, investment_account.id, "Gold", "1", "20", asset_class=AssetClass.COMMODITIES)
        target_store.set_target_allocations(
            None,
            [
                (AssetClass.STOCKS, Decimal("55")),
                (AssetClass.BONDS, Decimal("20")),
                (AssetClass.COMMODITIES, Decimal("25")),
            ],
        )

        plan = portfolio_engine.rebalance()

        assert [s.asset_class for s in plan.suggestions] == [
            AssetClass.BONDS,
            AssetClass.STOCKS,
            AssetClass.COMMODITIES,
        ]

    def test_classes_without_target_are_skipped(self, portfolio_engine, holding_store, investment_account):
        _holding(holding_store, investment_account.id, "Stocks", "1", "100")

        assert portfolio_engine.rebalance().suggestions == ()
