"""Target allocation store."""

from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import delete, select

from finvault.codec import Codec
from finvault.database.mappers import target_allocation_to_domain
from finvault.database.models import TargetAllocation as ORMTargetAllocation
from finvault.database.repository import RecordRepository
from finvault.domain.entities import AssetClass, TargetAllocation
from finvault.logging_config import get_logger

logger = get_logger(__name__)


def _scope(account_id: Optional[str]):
    if account_id is None:
        return ORMTargetAllocation.account_id.is_(None)
    return ORMTargetAllocation.account_id == account_id


class TargetAllocationStore:
    """Store for target allocations.

    Each scope (one account, or portfolio-wide when account_id is None) owns
    a set of asset class targets. Percentages summing to 100 is checked by
    callers.
    """

    def __init__(self, repository: RecordRepository, codec: Codec):
        self.repository = repository
        self.codec = codec

    def list_target_allocations(self, account_id: Optional[str] = None) -> list[TargetAllocation]:
        stmt = select(ORMTargetAllocation).where(_scope(account_id)).order_by(ORMTargetAllocation.asset_class)
        with self.repository.session() as session:
            return [target_allocation_to_domain(self.codec, row) for row in session.scalars(stmt)]

    def set_target_allocations(
        self,
        account_id: Optional[str],
        targets: Sequence[tuple[AssetClass, Decimal]],
    ) -> list[TargetAllocation]:
        """Replace every target in the scope in one transaction."""
        with self.repository.transaction() as session:
            session.execute(delete(ORMTargetAllocation).where(_scope(account_id)))
            rows = [
                ORMTargetAllocation(
                    account_id=account_id,
                    asset_class=AssetClass(asset_class).value,
                    target_pct=self.codec.encrypt_number(target_pct),
                )
                for asset_class, target_pct in targets
            ]
            session.add_all(rows)
            session.flush()
            result = [target_allocation_to_domain(self.codec, row) for row in rows]
        logger.info("Set %d target allocations for scope %s", len(result), account_id or "portfolio")
        return result
