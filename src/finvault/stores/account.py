"""Account store."""

from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.exc import NoResultFound

from finvault.codec import Codec, Number
from finvault.database.mappers import (
    account_to_domain,
    encrypt_account_for_create,
    encrypt_account_for_update,
    encrypt_balance_for_create,
)
from finvault.database.models import (
    Account as ORMAccount,
    Balance as ORMBalance,
    Bill as ORMBill,
    Holding as ORMHolding,
    TargetAllocation as ORMTargetAllocation,
    Transaction as ORMTransaction,
    utcnow,
)
from finvault.database.repository import RecordRepository
from finvault.domain.entities import Account, AccountType, CASH_TYPES
from finvault.domain.errors import (
    ConflictError,
    NotFoundError,
    account_has_dependents,
    reorder_target_not_found,
)
from finvault.domain.inputs import UNSET, AccountCreate, AccountUpdate, BalanceCreate, SortOrderItem
from finvault.logging_config import get_logger

logger = get_logger(__name__)


class AccountStore:
    """Store for financial accounts and their balance snapshot side effect."""

    def __init__(self, repository: RecordRepository, codec: Codec):
        """Initialize account store.

        Args:
            repository: Record repository
            codec: Field codec used for every sensitive column
        """
        self.repository = repository
        self.codec = codec

    def create_account(self, data: AccountCreate) -> Account:
        """Create an account at the end of the current ordering."""
        with self.repository.transaction() as session:
            sort_order = self.repository.next_sort_order(session, ORMAccount)
            row = ORMAccount(**encrypt_account_for_create(self.codec, data, sort_order))
            session.add(row)
            session.flush()
            account = account_to_domain(self.codec, row)
        logger.debug("Created account %s (sort_order=%d)", account.id, sort_order)
        return account

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID, or None if not found."""
        with self.repository.session() as session:
            row = session.get(ORMAccount, account_id)
            if row is None:
                return None
            return account_to_domain(self.codec, row)

    def list_accounts(
        self,
        is_active: Optional[bool] = None,
        account_type: Optional[AccountType] = None,
    ) -> list[Account]:
        """List accounts by sort order, filtered on plaintext columns only."""
        stmt = select(ORMAccount)
        if is_active is not None:
            stmt = stmt.where(ORMAccount.is_active == is_active)
        if account_type is not None:
            stmt = stmt.where(ORMAccount.type == AccountType(account_type).value)
        stmt = stmt.order_by(ORMAccount.sort_order, ORMAccount.created_at)
        with self.repository.session() as session:
            return [account_to_domain(self.codec, row) for row in session.scalars(stmt)]

    def update_account(self, account_id: str, data: AccountUpdate) -> Optional[Account]:
        """Apply a partial update to an account.

        When current_balance is provided and differs from the stored value, a
        balance snapshot dated now is inserted in the same transaction. The
        stored value is read under a row lock inside that transaction.

        Returns:
            Updated account, or None if the account does not exist
        """
        try:
            with self.repository.transaction() as session:
                row = self.repository.get_for_update(session, ORMAccount, account_id)
                previous_balance = self.codec.decrypt_number(row.current_balance)

                for key, value in encrypt_account_for_update(self.codec, data).items():
                    setattr(row, key, value)

                if data.current_balance is not UNSET and Decimal(str(data.current_balance)) != previous_balance:
                    snapshot = BalanceCreate(
                        account_id=account_id,
                        balance=data.current_balance,
                        date=utcnow(),
                    )
                    session.add(ORMBalance(**encrypt_balance_for_create(self.codec, snapshot)))
                    logger.info("Recorded balance snapshot for account %s", account_id)

                session.flush()
                account = account_to_domain(self.codec, row)
        except NoResultFound:
            logger.debug("Update skipped: account %s not found", account_id)
            return None
        return account

    def update_account_balance_only(self, account_id: str, balance: Number) -> Optional[Account]:
        """Set current_balance without recording a snapshot (import flows)."""
        try:
            with self.repository.transaction() as session:
                row = self.repository.update_by_id(
                    session,
                    ORMAccount,
                    account_id,
                    {"current_balance": self.codec.encrypt_number(balance)},
                )
                account = account_to_domain(self.codec, row)
        except NoResultFound:
            return None
        return account

    def delete_account(self, account_id: str) -> bool:
        """Delete an account and its balance history.

        Returns:
            True if deleted, False if the account does not exist

        Raises:
            ConflictError: If holdings, transactions or bills still reference it
        """
        try:
            with self.repository.transaction() as session:
                counts = {
                    "holdings": self._count(session, ORMHolding, account_id),
                    "transactions": self._count(session, ORMTransaction, account_id),
                    "bills": self._count(session, ORMBill, account_id),
                }
                if any(counts.values()) and session.get(ORMAccount, account_id) is not None:
                    raise ConflictError(account_has_dependents(account_id, counts))
                session.execute(
                    delete(ORMTargetAllocation).where(ORMTargetAllocation.account_id == account_id)
                )
                self.repository.delete_by_id(session, ORMAccount, account_id)
        except NoResultFound:
            return False
        logger.debug("Deleted account %s", account_id)
        return True

    def reorder_accounts(self, order: Sequence[SortOrderItem]) -> None:
        """Apply all sort order changes atomically.

        Raises:
            NotFoundError: If any id does not exist (nothing is changed)
        """
        with self.repository.transaction() as session:
            missing = self.repository.apply_sort_orders(session, ORMAccount, order)
            if missing is not None:
                raise NotFoundError(reorder_target_not_found("account", missing))
        logger.info("Reordered %d accounts", len(order))

    def get_cash_balance(self) -> Decimal:
        """Sum current balances of active savings and high-yield savings accounts."""
        stmt = select(ORMAccount.current_balance).where(
            ORMAccount.is_active.is_(True),
            ORMAccount.type.in_([t.value for t in CASH_TYPES]),
        )
        with self.repository.session() as session:
            balances = session.scalars(stmt).all()
        return sum((self.codec.decrypt_number(b) for b in balances), Decimal("0"))

    @staticmethod
    def _count(session, model, account_id: str) -> int:
        return session.scalar(
            select(func.count()).select_from(model).where(model.account_id == account_id)
        )
