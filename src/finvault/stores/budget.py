"""Budget store."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, NoResultFound

from finvault.codec import Codec
from finvault.database.mappers import budget_to_domain, encrypt_budget_for_create, encrypt_budget_for_update
from finvault.database.models import Budget as ORMBudget
from finvault.database.repository import RecordRepository
from finvault.domain.entities import Budget
from finvault.domain.errors import ConflictError
from finvault.domain.inputs import BudgetCreate, BudgetUpdate
from finvault.logging_config import get_logger
from finvault.utils.months import month_key, parse_month

logger = get_logger(__name__)


class BudgetStore:
    """Store for per-category monthly budgets.

    A budget applies from its effective_from month until a newer budget for
    the same category takes over.
    """

    def __init__(self, repository: RecordRepository, codec: Codec):
        self.repository = repository
        self.codec = codec

    def create_budget(self, data: BudgetCreate) -> Budget:
        """Create a budget.

        Raises:
            ValidationError: If effective_from is not a YYYY-MM month
            ConflictError: If the category already has a budget from that month
        """
        parse_month(data.effective_from)
        try:
            with self.repository.transaction() as session:
                row = ORMBudget(**encrypt_budget_for_create(self.codec, data))
                session.add(row)
                session.flush()
                budget = budget_to_domain(self.codec, row)
        except IntegrityError as e:
            raise ConflictError(
                f"Budget for '{data.category}' effective {data.effective_from} already exists"
            ) from e
        logger.debug("Created budget %s", budget.id)
        return budget

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        with self.repository.session() as session:
            row = session.get(ORMBudget, budget_id)
            if row is None:
                return None
            return budget_to_domain(self.codec, row)

    def list_budgets(self) -> list[Budget]:
        stmt = select(ORMBudget).order_by(ORMBudget.category, ORMBudget.effective_from.desc())
        with self.repository.session() as session:
            return [budget_to_domain(self.codec, row) for row in session.scalars(stmt)]

    def update_budget(self, budget_id: str, data: BudgetUpdate) -> Optional[Budget]:
        try:
            with self.repository.transaction() as session:
                row = self.repository.update_by_id(
                    session, ORMBudget, budget_id, encrypt_budget_for_update(self.codec, data)
                )
                budget = budget_to_domain(self.codec, row)
        except NoResultFound:
            return None
        return budget

    def delete_budget(self, budget_id: str) -> bool:
        try:
            with self.repository.transaction() as session:
                self.repository.delete_by_id(session, ORMBudget, budget_id)
        except NoResultFound:
            return False
        logger.debug("Deleted budget %s", budget_id)
        return True

    def get_active_budgets_for_month(self, month: str) -> list[Budget]:
        """Per category, the budget with the latest effective_from not after month."""
        key = month_key(parse_month(month))
        stmt = (
            select(ORMBudget)
            .where(ORMBudget.effective_from <= key)
            .order_by(ORMBudget.category, ORMBudget.effective_from.desc())
        )
        active: dict[str, Budget] = {}
        with self.repository.session() as session:
            for row in session.scalars(stmt):
                if row.category not in active:
                    active[row.category] = budget_to_domain(self.codec, row)
        return list(active.values())
