"""Tests for holdings, target allocations and price history."""

from datetime import date
from decimal import Decimal

import pytest

from finvault.domain.entities import AccountType, AssetClass
from finvault.domain.errors import NotFoundError
from finvault.domain.inputs import AccountCreate, HoldingCreate, HoldingUpdate, SortOrderItem


def _holding(store, account_id, name, **kwargs):
    kwargs.setdefault("asset_class", AssetClass.STOCKS)
    return store.create_holding(HoldingCreate(account_id=account_id, name=name, **kwargs))


class TestHoldingStore:
    def test_derived_values(self, holding_store, investment_account):
        holding = _holding(
            holding_store,
            investment_account.id,
            "Total Market",
            ticker="VTI",
            shares=Decimal("10"),
            cost_basis=Decimal("2000"),
            current_price=Decimal("250"),
        )

        assert holding.market_value == Decimal("2500")
        assert holding.gain_loss == Decimal("500")
        assert holding.gain_loss_pct == Decimal("25")

    def test_derived_values_need_price(self, holding_store, investment_account):
        holding = _holding(holding_store, investment_account.id, "Private fund", shares=Decimal("3"))

        assert holding.market_value is None
        assert holding.gain_loss is None

    def test_sort_order_scoped_per_account(self, holding_store, account_store, investment_account):
        other = account_store.create_account(AccountCreate(name="IRA", type=AccountType.INVESTMENT))

        assert _holding(holding_store, investment_account.id, "A").sort_order == 0
        assert _holding(holding_store, investment_account.id, "B").sort_order == 1
        assert _holding(holding_store, other.id, "C").sort_order == 0

    def test_list_by_account(self, holding_store, account_store, investment_account):
        other = account_store.create_account(AccountCreate(name="IRA", type=AccountType.INVESTMENT))
        _holding(holding_store, investment_account.id, "A")
        _holding(holding_store, other.id, "B")

        assert [h.name for h in holding_store.list_holdings(investment_account.id)] == ["A"]
        assert len(holding_store.list_holdings()) == 2

    def test_list_with_tickers(self, holding_store, investment_account):
        _holding(holding_store, investment_account.id, "Fund", ticker="VTI")
        _holding(holding_store, investment_account.id, "Gold bar", asset_class=AssetClass.COMMODITIES)

        assert [h.ticker for h in holding_store.list_holdings_with_tickers()] == ["VTI"]

    def test_update_price(self, holding_store, investment_account):
        holding = _holding(
            holding_store, investment_account.id, "Fund", shares=Decimal("2"), current_price=Decimal("10")
        )

        updated = holding_store.update_holding_price(holding.id, Decimal("12.5"))

        assert updated.current_price == Decimal("12.5")
        assert updated.market_value == Decimal("25")
        assert updated.shares == Decimal("2")

    def test_update_and_delete_missing(self, holding_store):
        assert holding_store.update_holding("missing", HoldingUpdate(name="x")) is None
        assert holding_store.update_holding_price("missing", 1) is None
        assert holding_store.delete_holding("missing") is False

    def test_reorder_missing_rolls_back(self, holding_store, investment_account):
        holding = _holding(holding_store, investment_account.id, "A")

        with pytest.raises(NotFoundError):
            holding_store.reorder_holdings([SortOrderItem(holding.id, 4), SortOrderItem("missing", 0)])

        assert holding_store.get_holding(holding.id).sort_order == 0


class TestTargetAllocationStore:
    def test_set_replaces_scope(self, target_store):
        target_store.set_target_allocations(None, [(AssetClass.STOCKS, Decimal("70")), (AssetClass.BONDS, Decimal("30"))])
        target_store.set_target_allocations(None, [(AssetClass.STOCKS, Decimal("60"))])

        [target] = target_store.list_target_allocations()
        assert target.asset_class == AssetClass.STOCKS
        assert target.target_pct == Decimal("60")

    def test_scopes_are_independent(self, target_store, investment_account):
        target_store.set_target_allocations(None, [(AssetClass.STOCKS, Decimal("100"))])
        target_store.set_target_allocations(investment_account.id, [(AssetClass.BONDS, Decimal("100"))])

        assert [t.asset_class for t in target_store.list_target_allocations()] == [AssetClass.STOCKS]
        assert [t.asset_class for t in target_store.list_target_allocations(investment_account.id)] == [
            AssetClass.BONDS
        ]


class TestPriceHistoryStore:
    def test_upsert_overwrites_same_day(self, price_store):
        price_store.upsert_price("vti", Decimal("200"), date(2024, 1, 2))
        price_store.upsert_price("VTI", Decimal("201.5"), date(2024, 1, 2), source="quote")

        [point] = price_store.get_price_history("VTI")
        assert point.ticker == "VTI"
        assert point.price == Decimal("201.5")
        assert point.source == "quote"

    def test_history_range_ascending(self, price_store):
        for day, price in [(3, "3"), (1, "1"), (2, "2"), (5, "5")]:
            price_store.upsert_price("VTI", Decimal(price), date(2024, 1, day))

        points = price_store.get_price_history("VTI", date(2024, 1, 1), date(2024, 1, 3))

        assert [p.date.day for p in points] == [1, 2, 3]

    def test_benchmark_history(self, price_store):
        price_store.upsert_benchmark_price("spy", Decimal("400"), date(2024, 1, 2))
        price_store.upsert_benchmark_price("SPY", Decimal("410"), date(2024, 1, 2))

        [point] = price_store.get_benchmark_history("SPY")
        assert point.symbol == "SPY"
        assert point.price == Decimal("410")
