"""Transaction store."""

from datetime import date
from typing import Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, NoResultFound

from finvault.codec import Codec
from finvault.database.mappers import (
    encrypt_transaction_for_create,
    encrypt_transaction_for_update,
    transaction_to_domain,
)
from finvault.database.models import Transaction as ORMTransaction
from finvault.database.repository import RecordRepository
from finvault.domain.entities import Transaction
from finvault.domain.errors import ConflictError
from finvault.domain.inputs import TransactionCreate, TransactionUpdate
from finvault.logging_config import get_logger

logger = get_logger(__name__)


class TransactionStore:
    """Store for account transactions.

    Description, amount and notes are encrypted; date, category and the
    dedupe hash stay plaintext so they can be filtered and indexed.
    """

    def __init__(self, repository: RecordRepository, codec: Codec):
        self.repository = repository
        self.codec = codec

    def create_transaction(self, data: TransactionCreate) -> Transaction:
        """Create a single transaction.

        Raises:
            ConflictError: If the account already has a transaction with this dedupe hash
        """
        try:
            with self.repository.transaction() as session:
                row = ORMTransaction(**encrypt_transaction_for_create(self.codec, data))
                session.add(row)
                session.flush()
                transaction = transaction_to_domain(self.codec, row)
        except IntegrityError as e:
            if data.dedupe_hash is None:
                raise
            raise ConflictError(
                f"Transaction with dedupe hash {data.dedupe_hash} already exists "
                f"for account {data.account_id}"
            ) from e
        logger.debug("Created transaction %s", transaction.id)
        return transaction

    def bulk_create_transactions(self, inputs: Sequence[TransactionCreate]) -> int:
        """Insert transactions, skipping any whose dedupe hash is already known.

        Returns:
            Number of transactions inserted
        """
        account_ids = {data.account_id for data in inputs}
        inserted = 0
        with self.repository.transaction() as session:
            seen = set(
                session.execute(
                    select(ORMTransaction.account_id, ORMTransaction.dedupe_hash).where(
                        ORMTransaction.account_id.in_(account_ids),
                        ORMTransaction.dedupe_hash.is_not(None),
                    )
                ).tuples()
            )
            for data in inputs:
                if data.dedupe_hash is not None:
                    key = (data.account_id, data.dedupe_hash)
                    if key in seen:
                        continue
                    seen.add(key)
                session.add(ORMTransaction(**encrypt_transaction_for_create(self.codec, data)))
                inserted += 1
        skipped = len(inputs) - inserted
        if skipped:
            logger.warning("Skipped %d duplicate transactions", skipped)
        logger.info("Imported %d transactions", inserted)
        return inserted

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        with self.repository.session() as session:
            row = session.get(ORMTransaction, transaction_id)
            if row is None:
                return None
            return transaction_to_domain(self.codec, row)

    def list_transactions(
        self,
        account_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[Transaction], int]:
        """List transactions newest first.

        Args:
            account_id: Filter by account
            start_date: Filter by start date (inclusive)
            end_date: Filter by end date (inclusive)
            category: Filter by category
            search: Case-insensitive substring of the description
            limit: Page size (None for everything)
            offset: Rows to skip

        Returns:
            (page of transactions, total number of matches)
        """
        stmt = select(ORMTransaction)
        if account_id is not None:
            stmt = stmt.where(ORMTransaction.account_id == account_id)
        if start_date is not None:
            stmt = stmt.where(ORMTransaction.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(ORMTransaction.date <= end_date)
        if category is not None:
            stmt = stmt.where(ORMTransaction.category == category)
        stmt = stmt.order_by(ORMTransaction.date.desc(), ORMTransaction.created_at.desc())

        with self.repository.session() as session:
            if search:
                # Descriptions are ciphertext, so search has to decrypt every candidate
                needle = search.lower()
                matches = [
                    transaction
                    for transaction in (transaction_to_domain(self.codec, row) for row in session.scalars(stmt))
                    if needle in transaction.description.lower()
                ]
                end = None if limit is None else offset + limit
                return matches[offset:end], len(matches)

            total = session.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
            if limit is not None:
                stmt = stmt.limit(limit)
            stmt = stmt.offset(offset)
            return [transaction_to_domain(self.codec, row) for row in session.scalars(stmt)], total

    def update_transaction(self, transaction_id: str, data: TransactionUpdate) -> Optional[Transaction]:
        try:
            with self.repository.transaction() as session:
                row = self.repository.update_by_id(
                    session,
                    ORMTransaction,
                    transaction_id,
                    encrypt_transaction_for_update(self.codec, data),
                )
                transaction = transaction_to_domain(self.codec, row)
        except NoResultFound:
            return None
        return transaction

    def bulk_update_category(self, transaction_ids: Sequence[str], category: Optional[str]) -> int:
        """Set the category of many transactions. Returns the number updated."""
        if not transaction_ids:
            return 0
        with self.repository.transaction() as session:
            result = session.execute(
                update(ORMTransaction)
                .where(ORMTransaction.id.in_(list(transaction_ids)))
                .values(category=category)
            )
            count = result.rowcount
        logger.debug("Recategorized %d transactions", count)
        return count

    def delete_transaction(self, transaction_id: str) -> bool:
        try:
            with self.repository.transaction() as session:
                self.repository.delete_by_id(session, ORMTransaction, transaction_id)
        except NoResultFound:
            return False
        logger.debug("Deleted transaction %s", transaction_id)
        return True
