"""SQLAlchemy models for the finvault record store.

Columns holding sensitive values are Text and only ever contain codec
ciphertext. Plaintext columns are limited to ids, foreign keys, enums,
flags, sort indices, timestamps and the keys of compound unique indexes.
"""

import uuid
from datetime import datetime, UTC

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Boolean,
    Index,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what DateTime columns round-trip."""
    return datetime.now(UTC).replace(tzinfo=None)


class Account(Base):
    """Financial account model."""

    __tablename__ = "accounts"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    type = Column(String(32), nullable=False)
    institution = Column(Text, nullable=False)
    account_number = Column(Text, nullable=True)
    current_balance = Column(Text, nullable=False)
    estimated_value = Column(Text, nullable=True)
    interest_rate = Column(Text, nullable=True)
    csv_parser_id = Column(String, nullable=True)
    original_balance = Column(Text, nullable=True)
    origination_date = Column(Text, nullable=True)
    maturity_date = Column(Text, nullable=True)
    loan_type = Column(Text, nullable=True)
    employer_name = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_favorite = Column(Boolean, default=False, nullable=False)
    exclude_from_income_sources = Column(Boolean, default=False, nullable=False)
    dti_percentage = Column(Integer, default=100, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    balances = relationship("Balance", back_populates="account", cascade="all, delete-orphan")
    holdings = relationship("Holding", back_populates="account")
    transactions = relationship("Transaction", back_populates="account")


class Balance(Base):
    """Append-only balance snapshot model."""

    __tablename__ = "balances"

    id = Column(String(32), primary_key=True, default=new_id)
    account_id = Column(String(32), ForeignKey("accounts.id"), nullable=False)
    balance = Column(Text, nullable=False)
    date = Column(DateTime, nullable=False)

    __table_args__ = (Index("ix_balances_account_date", "account_id", "date"),)

    # Relationships
    account = relationship("Account", back_populates="balances")
    loan_profile = relationship(
        "LoanProfile", uselist=False, back_populates="balance", cascade="all, delete-orphan"
    )
    investment_profile = relationship(
        "InvestmentProfile", uselist=False, back_populates="balance", cascade="all, delete-orphan"
    )
    savings_profile = relationship(
        "SavingsProfile", uselist=False, back_populates="balance", cascade="all, delete-orphan"
    )
    credit_profile = relationship(
        "CreditProfile", uselist=False, back_populates="balance", cascade="all, delete-orphan"
    )


class LoanProfile(Base):
    """Loan statement details for a balance snapshot."""

    __tablename__ = "loan_profiles"

    id = Column(String(32), primary_key=True, default=new_id)
    balance_id = Column(String(32), ForeignKey("balances.id"), unique=True, nullable=False)
    period_start = Column(Text, nullable=True)
    period_end = Column(Text, nullable=True)
    interest_rate = Column(Text, nullable=True)
    monthly_payment = Column(Text, nullable=True)
    principal_paid = Column(Text, nullable=True)
    interest_paid = Column(Text, nullable=True)
    escrow_amount = Column(Text, nullable=True)
    next_payment_date = Column(Text, nullable=True)
    remaining_term_months = Column(Text, nullable=True)

    balance = relationship("Balance", back_populates="loan_profile")


class InvestmentProfile(Base):
    """Investment statement details for a balance snapshot."""

    __tablename__ = "investment_profiles"

    id = Column(String(32), primary_key=True, default=new_id)
    balance_id = Column(String(32), ForeignKey("balances.id"), unique=True, nullable=False)
    period_start = Column(Text, nullable=True)
    period_end = Column(Text, nullable=True)
    rate_of_return = Column(Text, nullable=True)
    ytd_return = Column(Text, nullable=True)
    total_gain_loss = Column(Text, nullable=True)
    contributions = Column(Text, nullable=True)
    employer_match = Column(Text, nullable=True)
    vesting_pct = Column(Text, nullable=True)
    fees = Column(Text, nullable=True)
    expense_ratio = Column(Text, nullable=True)
    dividends = Column(Text, nullable=True)
    capital_gains = Column(Text, nullable=True)
    num_holdings = Column(Text, nullable=True)

    balance = relationship("Balance", back_populates="investment_profile")


class SavingsProfile(Base):
    """Savings statement details for a balance snapshot."""

    __tablename__ = "savings_profiles"

    id = Column(String(32), primary_key=True, default=new_id)
    balance_id = Column(String(32), ForeignKey("balances.id"), unique=True, nullable=False)
    period_start = Column(Text, nullable=True)
    period_end = Column(Text, nullable=True)
    apy = Column(Text, nullable=True)
    interest_earned = Column(Text, nullable=True)
    interest_earned_ytd = Column(Text, nullable=True)

    balance = relationship("Balance", back_populates="savings_profile")


class CreditProfile(Base):
    """Credit card statement details for a balance snapshot."""

    __tablename__ = "credit_profiles"

    id = Column(String(32), primary_key=True, default=new_id)
    balance_id = Column(String(32), ForeignKey("balances.id"), unique=True, nullable=False)
    period_start = Column(Text, nullable=True)
    period_end = Column(Text, nullable=True)
    apr = Column(Text, nullable=True)
    minimum_payment = Column(Text, nullable=True)
    credit_limit = Column(Text, nullable=True)
    available_credit = Column(Text, nullable=True)
    interest_charged = Column(Text, nullable=True)
    fees_charged = Column(Text, nullable=True)
    rewards_earned = Column(Text, nullable=True)
    payment_due_date = Column(Text, nullable=True)

    balance = relationship("Balance", back_populates="credit_profile")


class Goal(Base):
    """Financial goal model."""

    __tablename__ = "goals"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    type = Column(String(32), nullable=False)
    target_amount = Column(Text, nullable=False)
    current_amount = Column(Text, nullable=True)
    target_date = Column(Text, nullable=True)
    start_date = Column(Text, nullable=True)
    start_amount = Column(Text, nullable=True)
    priority = Column(Integer, default=0, nullable=False)
    account_ids = Column(Text, nullable=True)
    extra_payment = Column(Text, nullable=True)
    monthly_contribution = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Holding(Base):
    """Investment holding model."""

    __tablename__ = "holdings"

    id = Column(String(32), primary_key=True, default=new_id)
    account_id = Column(String(32), ForeignKey("accounts.id"), nullable=False)
    name = Column(Text, nullable=False)
    ticker = Column(Text, nullable=True)
    shares = Column(Text, nullable=True)
    cost_basis = Column(Text, nullable=True)
    current_price = Column(Text, nullable=True)
    asset_class = Column(String(32), nullable=False)
    notes = Column(Text, nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    account = relationship("Account", back_populates="holdings")


class TargetAllocation(Base):
    """Target allocation model; a null account_id is the portfolio-wide scope."""

    __tablename__ = "target_allocations"

    id = Column(String(32), primary_key=True, default=new_id)
    account_id = Column(String(32), ForeignKey("accounts.id"), nullable=True)
    asset_class = Column(String(32), nullable=False)
    target_pct = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class PriceHistory(Base):
    """Daily ticker price model."""

    __tablename__ = "price_history"

    id = Column(String(32), primary_key=True, default=new_id)
    ticker = Column(String(32), nullable=False)
    date = Column(Date, nullable=False)
    price = Column(Text, nullable=False)
    source = Column(String(32), nullable=False)

    __table_args__ = (UniqueConstraint("ticker", "date", name="uq_price_history_ticker_date"),)


class BenchmarkHistory(Base):
    """Daily benchmark index price model."""

    __tablename__ = "benchmark_history"

    id = Column(String(32), primary_key=True, default=new_id)
    symbol = Column(String(32), nullable=False)
    date = Column(Date, nullable=False)
    price = Column(Text, nullable=False)

    __table_args__ = (UniqueConstraint("symbol", "date", name="uq_benchmark_history_symbol_date"),)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String(32), primary_key=True, default=new_id)
    account_id = Column(String(32), ForeignKey("accounts.id"), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    amount = Column(Text, nullable=False)
    category = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    dedupe_hash = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Unique constraint on account_id + dedupe_hash
    __table_args__ = (
        UniqueConstraint("account_id", "dedupe_hash", name="uq_transaction_account_dedupe"),
        Index("ix_transactions_date", "date"),
    )

    account = relationship("Account", back_populates="transactions")


class Budget(Base):
    """Category budget model."""

    __tablename__ = "budgets"

    id = Column(String(32), primary_key=True, default=new_id)
    category = Column(String, nullable=False)
    amount = Column(Text, nullable=False)
    effective_from = Column(String(7), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("category", "effective_from", name="uq_budget_category_effective_from"),
    )


class Bill(Base):
    """Recurring bill model."""

    __tablename__ = "bills"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    amount = Column(Text, nullable=False)
    frequency = Column(String(16), nullable=False)
    due_day = Column(Integer, nullable=False)
    due_month = Column(Integer, nullable=True)
    due_weekday = Column(Integer, nullable=True)
    category = Column(String, nullable=True)
    account_id = Column(String(32), ForeignKey("accounts.id"), nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    payments = relationship("BillPayment", back_populates="bill", cascade="all, delete-orphan")


class BillPayment(Base):
    """Payment record for one due date of a bill."""

    __tablename__ = "bill_payments"

    id = Column(String(32), primary_key=True, default=new_id)
    bill_id = Column(String(32), ForeignKey("bills.id"), nullable=False)
    due_date = Column(Date, nullable=False)
    paid_date = Column(DateTime, nullable=False)
    amount = Column(Text, nullable=False)

    __table_args__ = (UniqueConstraint("bill_id", "due_date", name="uq_bill_payment_bill_due_date"),)

    bill = relationship("Bill", back_populates="payments")


class NotificationPreference(Base):
    """Per-type notification preference model."""

    __tablename__ = "notification_preferences"

    id = Column(String(32), primary_key=True, default=new_id)
    type = Column(String(32), unique=True, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    config = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class NotificationLog(Base):
    """Sent notification model."""

    __tablename__ = "notification_logs"

    id = Column(String(32), primary_key=True, default=new_id)
    type = Column(String(32), nullable=False)
    title = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
    dedupe_key = Column(String, unique=True, nullable=False)
    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", Text, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    is_cleared = Column(Boolean, default=False, nullable=False)
    sent_at = Column(DateTime, default=utcnow, nullable=False)


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    # Hand transaction control to SQLAlchemy so BEGIN is emitted before the first read
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_immediate(conn) -> None:
    # Take the write lock up front; reads inside a transaction see no concurrent writer
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory.

    SQLite connections run every transaction as ``BEGIN IMMEDIATE``, so a
    read-compare-write sequence inside one transaction is serialized
    against other connections.
    """
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _configure_sqlite_connection)
        event.listen(engine, "begin", _begin_sqlite_immediate)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
