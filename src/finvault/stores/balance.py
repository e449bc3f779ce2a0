"""Balance snapshot store.

Snapshots are append-only. Each may carry statement profiles (loan,
investment, savings, credit) stored as separate encrypted rows.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from finvault.codec import Codec
from finvault.database.mappers import (
    balance_to_domain,
    encrypt_balance_for_create,
    encrypt_profile,
    profile_to_domain,
)
from finvault.database.models import (
    Balance as ORMBalance,
    CreditProfile as ORMCreditProfile,
    InvestmentProfile as ORMInvestmentProfile,
    LoanProfile as ORMLoanProfile,
    SavingsProfile as ORMSavingsProfile,
)
from finvault.database.repository import RecordRepository
from finvault.domain.entities import Balance, CreditProfile, LoanProfile
from finvault.domain.inputs import BalanceCreate
from finvault.logging_config import get_logger

logger = get_logger(__name__)

_PROFILE_MODELS = {
    "loan_profile": ORMLoanProfile,
    "investment_profile": ORMInvestmentProfile,
    "savings_profile": ORMSavingsProfile,
    "credit_profile": ORMCreditProfile,
}

_EAGER_PROFILES = [selectinload(getattr(ORMBalance, attribute)) for attribute in _PROFILE_MODELS]


class BalanceStore:
    """Store for balance snapshots and their statement profiles."""

    def __init__(self, repository: RecordRepository, codec: Codec):
        self.repository = repository
        self.codec = codec

    def create_balance(self, data: BalanceCreate) -> Balance:
        """Insert a snapshot plus every profile that carries at least one value."""
        with self.repository.transaction() as session:
            row = ORMBalance(**encrypt_balance_for_create(self.codec, data))
            for attribute, model in _PROFILE_MODELS.items():
                values = encrypt_profile(self.codec, getattr(data, attribute))
                if values is not None:
                    setattr(row, attribute, model(**values))
            session.add(row)
            session.flush()
            balance = balance_to_domain(self.codec, row)
        logger.debug("Created balance %s for account %s", balance.id, data.account_id)
        return balance

    def list_balances(
        self,
        account_id: Optional[str] = None,
        account_ids: Optional[Sequence[str]] = None,
        end: Optional[datetime] = None,
    ) -> list[Balance]:
        """List snapshots newest first.

        Args:
            account_id: Restrict to one account
            account_ids: Restrict to a set of accounts
            end: Only snapshots dated at or before this instant
        """
        stmt = select(ORMBalance).options(*_EAGER_PROFILES)
        if account_id is not None:
            stmt = stmt.where(ORMBalance.account_id == account_id)
        if account_ids is not None:
            stmt = stmt.where(ORMBalance.account_id.in_(list(account_ids)))
        if end is not None:
            stmt = stmt.where(ORMBalance.date <= end)
        stmt = stmt.order_by(ORMBalance.date.desc(), ORMBalance.id)
        with self.repository.session() as session:
            return [balance_to_domain(self.codec, row) for row in session.scalars(stmt)]

    def latest_balances(self, account_ids: Sequence[str], end: datetime) -> dict[str, Decimal]:
        """Latest snapshot value per account dated at or before end.

        Accounts without such a snapshot are absent from the result.
        """
        latest: dict[str, Decimal] = {}
        for balance in self.list_balances(account_ids=account_ids, end=end):
            latest.setdefault(balance.account_id, balance.balance)
        return latest

    def find_balance_by_date(self, account_id: str, day: date) -> Optional[Balance]:
        """Return the latest snapshot recorded on a calendar day, if any."""
        start = datetime.combine(day, time.min)
        stmt = (
            select(ORMBalance)
            .options(*_EAGER_PROFILES)
            .where(
                ORMBalance.account_id == account_id,
                ORMBalance.date >= start,
                ORMBalance.date < start + timedelta(days=1),
            )
            .order_by(ORMBalance.date.desc())
            .limit(1)
        )
        with self.repository.session() as session:
            row = session.scalars(stmt).first()
            if row is None:
                return None
            return balance_to_domain(self.codec, row)

    def latest_credit_profiles(self) -> dict[str, CreditProfile]:
        """Most recent credit profile per account."""
        return self._latest_profiles(ORMCreditProfile, CreditProfile)

    def latest_loan_profiles(self) -> dict[str, LoanProfile]:
        """Most recent loan profile per account."""
        return self._latest_profiles(ORMLoanProfile, LoanProfile)

    def _latest_profiles(self, model, profile_cls) -> dict:
        stmt = (
            select(ORMBalance.account_id, model)
            .join(model, model.balance_id == ORMBalance.id)
            .order_by(ORMBalance.date.desc())
        )
        latest = {}
        with self.repository.session() as session:
            for account_id, orm_profile in session.execute(stmt):
                if account_id not in latest:
                    latest[account_id] = profile_to_domain(self.codec, profile_cls, orm_profile)
        return latest
