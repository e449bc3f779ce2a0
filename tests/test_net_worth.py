"""Tests for the net worth summary and history."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from finvault.domain.entities import AccountType
from finvault.domain.errors import ValidationError
from finvault.domain.inputs import AccountCreate, BalanceCreate


def _account(store, name, account_type, balance, **kwargs):
    return store.create_account(
        AccountCreate(name=name, type=account_type, current_balance=Decimal(balance), **kwargs)
    )


def _snapshot(store, account_id, amount, when):
    store.create_balance(BalanceCreate(account_id=account_id, balance=Decimal(amount), date=when))


class TestSummary:
    def test_assets_and_liabilities(self, net_worth_engine, account_store):
        _account(account_store, "Checking", AccountType.CHECKING, "2500.10")
        _account(account_store, "Visa", AccountType.CREDIT, "-400.05")
        _account(account_store, "Car loan", AccountType.LOAN, "8000")
        _account(account_store, "Closed", AccountType.SAVINGS, "999", is_active=False)

        summary = net_worth_engine.summary(today=date(2024, 3, 15))

        assert summary.total_assets == Decimal("2500.10")
        assert summary.total_liabilities == Decimal("8400.05")
        assert summary.net_worth == Decimal("-5899.95")
        assert len(summary.accounts) == 3

    def test_real_estate_counts_equity(self, net_worth_engine, account_store):
        _account(
            account_store,
            "House",
            AccountType.REAL_ESTATE,
            "300000",
            estimated_value=Decimal("500000"),
        )

        summary = net_worth_engine.summary(today=date(2024, 3, 15))

        assert summary.total_assets == Decimal("200000.00")
        assert summary.accounts[0].balance == Decimal("200000")

    def test_previous_balance_from_last_month(self, net_worth_engine, account_store, balance_store, sample_account):
        _snapshot(balance_store, sample_account.id, "800", datetime(2024, 1, 31, 9))
        _snapshot(balance_store, sample_account.id, "900", datetime(2024, 2, 20, 9))
        _snapshot(balance_store, sample_account.id, "1000", datetime(2024, 3, 2, 9))

        [row] = net_worth_engine.summary(today=date(2024, 3, 15)).accounts

        assert row.previous_balance == Decimal("900")
        assert row.classification == "asset"

    def test_previous_balance_missing(self, net_worth_engine, sample_account):
        [row] = net_worth_engine.summary(today=date(2024, 3, 15)).accounts

        assert row.previous_balance is None


class TestHistory:
    def test_empty_without_snapshots(self, net_worth_engine, sample_account):
        history = net_worth_engine.history(months=3, today=date(2024, 3, 15))

        assert history.history == ()
        assert history.account_history == ()

    def test_rejects_non_positive_months(self, net_worth_engine, balance_store, sample_account):
        _snapshot(balance_store, sample_account.id, "1000", datetime(2024, 2, 10))

        for months in (0, -3):
            with pytest.raises(ValidationError, match="at least 1 month"):
                net_worth_engine.history(months=months, today=date(2024, 3, 15))

    def test_carry_forward_and_latest_in_month(self, net_worth_engine, account_store, balance_store, sample_account):
        credit = _account(account_store, "Visa", AccountType.CREDIT, "-200")
        _snapshot(balance_store, sample_account.id, "1000", datetime(2023, 12, 20))
        _snapshot(balance_store, credit.id, "-200", datetime(2024, 1, 5))
        _snapshot(balance_store, sample_account.id, "1500", datetime(2024, 2, 10))
        _snapshot(balance_store, sample_account.id, "1600", datetime(2024, 2, 25))

        history = net_worth_engine.history(months=3, today=date(2024, 3, 15))

        assert [(p.date, p.net_worth) for p in history.history] == [
            ("2024-01", Decimal("800.00")),
            ("2024-02", Decimal("1400.00")),
            ("2024-03", Decimal("1400.00")),
        ]
        assert history.history[0].liabilities == Decimal("200.00")
        assert history.account_history[1].balances == {
            sample_account.id: Decimal("1600.00"),
            credit.id: Decimal("200.00"),
        }

    def test_inactive_accounts_ignored(self, net_worth_engine, account_store, balance_store):
        closed = _account(account_store, "Old savings", AccountType.SAVINGS, "0", is_active=False)
        _snapshot(balance_store, closed.id, "5000", datetime(2024, 1, 10))

        history = net_worth_engine.history(months=2, today=date(2024, 2, 15))

        assert [p.net_worth for p in history.history] == [Decimal("0.00"), Decimal("0.00")]

    def test_snapshots_after_today_month_ignored(self, net_worth_engine, balance_store, sample_account):
        _snapshot(balance_store, sample_account.id, "100", datetime(2024, 1, 10))
        _snapshot(balance_store, sample_account.id, "9999", datetime(2024, 4, 1))

        history = net_worth_engine.history(months=1, today=date(2024, 3, 31))

        assert [p.net_worth for p in history.history] == [Decimal("100.00")]
