"""Shared pytest fixtures for finvault tests."""

import os
import tempfile
from decimal import Decimal

import pytest

from finvault.analytics.net_worth import NetWorthEngine
from finvault.analytics.portfolio import PortfolioEngine
from finvault.analytics.spending import SpendingEngine
from finvault.codec import Codec, generate_key
from finvault.database.factories import create_repository
from finvault.domain.entities import AccountType
from finvault.domain.inputs import AccountCreate
from finvault.stores.account import AccountStore
from finvault.stores.balance import BalanceStore
from finvault.stores.bill import BillStore
from finvault.stores.budget import BudgetStore
from finvault.stores.goal import GoalStore
from finvault.stores.holding import HoldingStore
from finvault.stores.notification import NotificationStore
from finvault.stores.price_history import PriceHistoryStore
from finvault.stores.target_allocation import TargetAllocationStore
from finvault.stores.transaction import TransactionStore


@pytest.fixture
def temp_db_url():
    """Create a temporary SQLite database file and return its URL."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    yield f"sqlite:///{db_path}"

    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def repository(temp_db_url):
    """Create a record repository on the temporary database."""
    repo = create_repository(temp_db_url)
    yield repo
    repo.dispose()


@pytest.fixture
def encryption_key():
    return generate_key()


@pytest.fixture
def codec(encryption_key):
    return Codec(encryption_key)


@pytest.fixture
def account_store(repository, codec):
    return AccountStore(repository, codec)


@pytest.fixture
def balance_store(repository, codec):
    return BalanceStore(repository, codec)


@pytest.fixture
def goal_store(repository, codec):
    return GoalStore(repository, codec)


@pytest.fixture
def holding_store(repository, codec):
    return HoldingStore(repository, codec)


@pytest.fixture
def target_store(repository, codec):
    return TargetAllocationStore(repository, codec)


@pytest.fixture
def price_store(repository, codec):
    return PriceHistoryStore(repository, codec)


@pytest.fixture
def transaction_store(repository, codec):
    return TransactionStore(repository, codec)


@pytest.fixture
def budget_store(repository, codec):
    return BudgetStore(repository, codec)


@pytest.fixture
def bill_store(repository, codec):
    return BillStore(repository, codec)


@pytest.fixture
def notification_store(repository, codec):
    return NotificationStore(repository, codec)


@pytest.fixture
def net_worth_engine(account_store, balance_store):
    return NetWorthEngine(account_store, balance_store)


@pytest.fixture
def spending_engine(transaction_store):
    return SpendingEngine(transaction_store)


@pytest.fixture
def portfolio_engine(holding_store, account_store, target_store, price_store):
    return PortfolioEngine(holding_store, account_store, target_store, price_store)


@pytest.fixture
def sample_account(account_store):
    """Create a checking account for testing."""
    return account_store.create_account(
        AccountCreate(
            name="Everyday Checking",
            type=AccountType.CHECKING,
            institution="Test Bank",
            current_balance=Decimal("1000.00"),
        )
    )


@pytest.fixture
def investment_account(account_store):
    """Create a brokerage account for testing."""
    return account_store.create_account(
        AccountCreate(name="Brokerage", type=AccountType.INVESTMENT, institution="Broker")
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def cli_env(monkeypatch, temp_db_url, encryption_key):
    """Point the CLI at the temporary database and key."""
    monkeypatch.setenv("FINVAULT_DATABASE_URL", temp_db_url)
    monkeypatch.setenv("FINVAULT_ENCRYPTION_KEY", encryption_key)
    monkeypatch.delenv("FINVAULT_ENV", raising=False)
    monkeypatch.delenv("FINVAULT_DB_PATH", raising=False)
    return {"database_url": temp_db_url, "encryption_key": encryption_key}

