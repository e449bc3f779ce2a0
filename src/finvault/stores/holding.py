"""Holding store."""

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import NoResultFound

from finvault.codec import Codec, Number
from finvault.database.mappers import (
    encrypt_holding_for_create,
    encrypt_holding_for_update,
    holding_to_domain,
)
from finvault.database.models import Holding as ORMHolding
from finvault.database.repository import RecordRepository
from finvault.domain.entities import Holding
from finvault.domain.errors import NotFoundError, reorder_target_not_found
from finvault.domain.inputs import HoldingCreate, HoldingUpdate, SortOrderItem
from finvault.logging_config import get_logger

logger = get_logger(__name__)


class HoldingStore:
    """Store for investment holdings.

    Sort order is scoped per account: a new holding goes after the last
    holding of the same account.
    """

    def __init__(self, repository: RecordRepository, codec: Codec):
        self.repository = repository
        self.codec = codec

    def create_holding(self, data: HoldingCreate) -> Holding:
        with self.repository.transaction() as session:
            sort_order = self.repository.next_sort_order(
                session, ORMHolding, ORMHolding.account_id == data.account_id
            )
            row = ORMHolding(**encrypt_holding_for_create(self.codec, data, sort_order))
            session.add(row)
            session.flush()
            holding = holding_to_domain(self.codec, row)
        logger.debug("Created holding %s in account %s", holding.id, data.account_id)
        return holding

    def get_holding(self, holding_id: str) -> Optional[Holding]:
        with self.repository.session() as session:
            row = session.get(ORMHolding, holding_id)
            if row is None:
                return None
            return holding_to_domain(self.codec, row)

    def list_holdings(self, account_id: Optional[str] = None) -> list[Holding]:
        """List holdings, optionally for one account, by account then sort order."""
        stmt = select(ORMHolding)
        if account_id is not None:
            stmt = stmt.where(ORMHolding.account_id == account_id)
        stmt = stmt.order_by(ORMHolding.account_id, ORMHolding.sort_order)
        with self.repository.session() as session:
            return [holding_to_domain(self.codec, row) for row in session.scalars(stmt)]

    def list_holdings_with_tickers(self) -> list[Holding]:
        """Holdings that have a ticker (filtered after decryption)."""
        return [holding for holding in self.list_holdings() if holding.ticker]

    def update_holding(self, holding_id: str, data: HoldingUpdate) -> Optional[Holding]:
        try:
            with self.repository.transaction() as session:
                row = self.repository.update_by_id(
                    session, ORMHolding, holding_id, encrypt_holding_for_update(self.codec, data)
                )
                holding = holding_to_domain(self.codec, row)
        except NoResultFound:
            logger.debug("Update skipped: holding %s not found", holding_id)
            return None
        return holding

    def update_holding_price(self, holding_id: str, price: Number) -> Optional[Holding]:
        """Set current_price only (price refresh flows)."""
        return self.update_holding(holding_id, HoldingUpdate(current_price=price))

    def delete_holding(self, holding_id: str) -> bool:
        try:
            with self.repository.transaction() as session:
                self.repository.delete_by_id(session, ORMHolding, holding_id)
        except NoResultFound:
            return False
        logger.debug("Deleted holding %s", holding_id)
        return True

    def reorder_holdings(self, order: Sequence[SortOrderItem]) -> None:
        """Apply all sort order changes atomically.

        Raises:
            NotFoundError: If any id does not exist (nothing is changed)
        """
        with self.repository.transaction() as session:
            missing = self.repository.apply_sort_orders(session, ORMHolding, order)
            if missing is not None:
                raise NotFoundError(reorder_target_not_found("holding", missing))
        logger.info("Reordered %d holdings", len(order))
