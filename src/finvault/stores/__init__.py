"""Entity stores: the only callers of the mapper and repository layers."""

from finvault.stores.account import AccountStore
from finvault.stores.balance import BalanceStore
from finvault.stores.bill import BillStore, compute_upcoming_instances, generate_due_dates
from finvault.stores.budget import BudgetStore
from finvault.stores.goal import GoalStore
from finvault.stores.holding import HoldingStore
from finvault.stores.notification import NotificationStore
from finvault.stores.price_history import PriceHistoryStore
from finvault.stores.target_allocation import TargetAllocationStore
from finvault.stores.transaction import TransactionStore

__all__ = [
    "AccountStore",
    "BalanceStore",
    "BillStore",
    "BudgetStore",
    "GoalStore",
    "HoldingStore",
    "NotificationStore",
    "PriceHistoryStore",
    "TargetAllocationStore",
    "TransactionStore",
    "compute_upcoming_instances",
    "generate_due_dates",
]
