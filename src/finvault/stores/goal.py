"""Goal store."""

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import NoResultFound

from finvault.codec import Codec
from finvault.database.mappers import encrypt_goal_for_create, encrypt_goal_for_update, goal_to_domain
from finvault.database.models import Goal as ORMGoal
from finvault.database.repository import RecordRepository
from finvault.domain.entities import Goal, GoalType
from finvault.domain.errors import NotFoundError, reorder_target_not_found
from finvault.domain.inputs import GoalCreate, GoalUpdate, SortOrderItem
from finvault.logging_config import get_logger

logger = get_logger(__name__)


class GoalStore:
    """Store for financial goals."""

    def __init__(self, repository: RecordRepository, codec: Codec):
        self.repository = repository
        self.codec = codec

    def create_goal(self, data: GoalCreate) -> Goal:
        with self.repository.transaction() as session:
            sort_order = self.repository.next_sort_order(session, ORMGoal)
            row = ORMGoal(**encrypt_goal_for_create(self.codec, data, sort_order))
            session.add(row)
            session.flush()
            goal = goal_to_domain(self.codec, row)
        logger.debug("Created goal %s (sort_order=%d)", goal.id, sort_order)
        return goal

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        with self.repository.session() as session:
            row = session.get(ORMGoal, goal_id)
            if row is None:
                return None
            return goal_to_domain(self.codec, row)

    def list_goals(
        self,
        is_active: Optional[bool] = None,
        goal_type: Optional[GoalType] = None,
    ) -> list[Goal]:
        stmt = select(ORMGoal)
        if is_active is not None:
            stmt = stmt.where(ORMGoal.is_active == is_active)
        if goal_type is not None:
            stmt = stmt.where(ORMGoal.type == GoalType(goal_type).value)
        stmt = stmt.order_by(ORMGoal.sort_order, ORMGoal.created_at)
        with self.repository.session() as session:
            return [goal_to_domain(self.codec, row) for row in session.scalars(stmt)]

    def update_goal(self, goal_id: str, data: GoalUpdate) -> Optional[Goal]:
        """Apply a partial update.

        Providing is_completed=True stamps completed_at with the current time;
        providing False clears it.

        Returns:
            Updated goal, or None if the goal does not exist
        """
        try:
            with self.repository.transaction() as session:
                row = self.repository.update_by_id(
                    session, ORMGoal, goal_id, encrypt_goal_for_update(self.codec, data)
                )
                goal = goal_to_domain(self.codec, row)
        except NoResultFound:
            logger.debug("Update skipped: goal %s not found", goal_id)
            return None
        return goal

    def delete_goal(self, goal_id: str) -> bool:
        try:
            with self.repository.transaction() as session:
                self.repository.delete_by_id(session, ORMGoal, goal_id)
        except NoResultFound:
            return False
        logger.debug("Deleted goal %s", goal_id)
        return True

    def reorder_goals(self, order: Sequence[SortOrderItem]) -> None:
        """Apply all sort order changes atomically.

        Raises:
            NotFoundError: If any id does not exist (nothing is changed)
        """
        with self.repository.transaction() as session:
            missing = self.repository.apply_sort_orders(session, ORMGoal, order)
            if missing is not None:
                raise NotFoundError(reorder_target_not_found("goal", missing))
        logger.info("Reordered %d goals", len(order))
