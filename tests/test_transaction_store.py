"""Tests for the transaction store."""

from datetime import date
from decimal import Decimal

import pytest

from finvault.database.models import Transaction as ORMTransaction
from finvault.domain.errors import ConflictError
from finvault.domain.inputs import TransactionCreate, TransactionUpdate


def _input(account_id, day, description, amount, **kwargs):
    return TransactionCreate(
        account_id=account_id,
        date=day,
        description=description,
        amount=Decimal(amount),
        **kwargs,
    )


class TestCreateTransaction:
    def test_round_trip(self, transaction_store, sample_account):
        created = transaction_store.create_transaction(
            _input(sample_account.id, date(2024, 1, 15), "Grocery Store", "-82.10", category="Groceries")
        )

        loaded = transaction_store.get_transaction(created.id)
        assert loaded.description == "Grocery Store"
        assert loaded.amount == Decimal("-82.10")
        assert loaded.category == "Groceries"
        assert loaded.date == date(2024, 1, 15)

    def test_description_and_amount_are_ciphertext(self, transaction_store, repository, sample_account):
        created = transaction_store.create_transaction(
            _input(sample_account.id, date(2024, 1, 15), "Pharmacy", "-12.00", category="Health")
        )

        with repository.session() as session:
            row = session.get(ORMTransaction, created.id)
            assert row.description != "Pharmacy"
            assert row.category == "Health"

    def test_duplicate_dedupe_hash_conflicts(self, transaction_store, sample_account):
        data = _input(sample_account.id, date(2024, 1, 15), "Coffee", "-4", dedupe_hash="abc")
        transaction_store.create_transaction(data)

        with pytest.raises(ConflictError):
            transaction_store.create_transaction(data)

    def test_transactions_without_hash_never_conflict(self, transaction_store, sample_account):
        data = _input(sample_account.id, date(2024, 1, 15), "Coffee", "-4")
        transaction_store.create_transaction(data)
        transaction_store.create_transaction(data)

        assert transaction_store.list_transactions()[1] == 2


class TestBulkCreate:
    def test_skips_known_and_repeated_hashes(self, transaction_store, sample_account):
        transaction_store.create_transaction(
            _input(sample_account.id, date(2024, 1, 1), "Rent", "-1500", dedupe_hash="h1")
        )

        inserted = transaction_store.bulk_create_transactions(
            [
                _input(sample_account.id, date(2024, 1, 1), "Rent", "-1500", dedupe_hash="h1"),
                _input(sample_account.id, date(2024, 1, 2), "Salary", "3000", dedupe_hash="h2"),
                _input(sample_account.id, date(2024, 1, 2), "Salary", "3000", dedupe_hash="h2"),
                _input(sample_account.id, date(2024, 1, 3), "Cash", "-20"),
            ]
        )

        assert inserted == 2
        assert transaction_store.list_transactions()[1] == 3

    def test_same_hash_in_other_account_is_kept(self, transaction_store, sample_account, investment_account):
        inserted = transaction_store.bulk_create_transactions(
            [
                _input(sample_account.id, date(2024, 1, 1), "Fee", "-1", dedupe_hash="same"),
                _input(investment_account.id, date(2024, 1, 1), "Fee", "-1", dedupe_hash="same"),
            ]
        )

        assert inserted == 2


class TestListTransactions:
    @pytest.fixture
    def populated(self, transaction_store, sample_account):
        transaction_store.bulk_create_transactions(
            [
                _input(sample_account.id, date(2024, 1, 5), "Corner Coffee", "-4.50", category="Dining"),
                _input(sample_account.id, date(2024, 1, 20), "Paycheck", "2500", category="Income"),
                _input(sample_account.id, date(2024, 2, 3), "COFFEE beans", "-18", category="Groceries"),
                _input(sample_account.id, date(2024, 2, 14), "Dinner out", "-75", category="Dining"),
            ]
        )

    def test_newest_first_with_total(self, transaction_store, populated):
        transactions, total = transaction_store.list_transactions()

        assert total == 4
        assert [t.date for t in transactions] == [
            date(2024, 2, 14),
            date(2024, 2, 3),
            date(2024, 1, 20),
            date(2024, 1, 5),
        ]

    def test_date_range_and_category(self, transaction_store, populated):
        transactions, total = transaction_store.list_transactions(
            start_date=date(2024, 1, 1), end_date=date(2024, 1, 31), category="Dining"
        )

        assert total == 1
        assert transactions[0].description == "Corner Coffee"

    def test_pagination_reports_full_total(self, transaction_store, populated):
        transactions, total = transaction_store.list_transactions(limit=2, offset=1)

        assert total == 4
        assert [t.description for t in transactions] == ["COFFEE beans", "Paycheck"]

    def test_search_is_case_insensitive(self, transaction_store, populated):
        transactions, total = transaction_store.list_transactions(search="coffee")

        assert total == 2
        assert [t.description for t in transactions] == ["COFFEE beans", "Corner Coffee"]

    def test_search_with_limit(self, transaction_store, populated):
        transactions, total = transaction_store.list_transactions(search="coffee", limit=1)

        assert total == 2
        assert len(transactions) == 1


class TestUpdateTransactions:
    def test_update_category_and_notes(self, transaction_store, sample_account):
        created = transaction_store.create_transaction(
            _input(sample_account.id, date(2024, 3, 1), "Bookshop", "-30")
        )

        updated = transaction_store.update_transaction(
            created.id, TransactionUpdate(category="Books", notes="gift")
        )

        assert updated.category == "Books"
        assert updated.notes == "gift"
        assert updated.description == "Bookshop"

    def test_bulk_update_category(self, transaction_store, sample_account):
        first = transaction_store.create_transaction(_input(sample_account.id, date(2024, 3, 1), "A", "-1"))
        second = transaction_store.create_transaction(_input(sample_account.id, date(2024, 3, 2), "B", "-2"))
        transaction_store.create_transaction(_input(sample_account.id, date(2024, 3, 3), "C", "-3"))

        count = transaction_store.bulk_update_category([first.id, second.id, "missing"], "Misc")

        assert count == 2
        assert transaction_store.list_transactions(category="Misc")[1] == 2

    def test_bulk_update_nothing(self, transaction_store):
        assert transaction_store.bulk_update_category([], "Misc") == 0

    def test_missing(self, transaction_store):
        assert transaction_store.get_transaction("missing") is None
        assert transaction_store.update_transaction("missing", TransactionUpdate(notes="x")) is None
        assert transaction_store.delete_transaction("missing") is False

    def test_delete(self, transaction_store, sample_account):
        created = transaction_store.create_transaction(_input(sample_account.id, date(2024, 3, 1), "A", "-1"))

        assert transaction_store.delete_transaction(created.id) is True
        assert transaction_store.get_transaction(created.id) is None
