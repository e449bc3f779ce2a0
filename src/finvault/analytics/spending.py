"""Monthly spending aggregation by category."""

from decimal import Decimal

from finvault.analytics.rounding import ZERO, percent, round2
from finvault.domain.reports import SpendingCategory, SpendingSummary
from finvault.stores.transaction import TransactionStore
from finvault.utils.months import month_end, parse_month

UNCATEGORIZED = "Uncategorized"
# Card payments and moves between accounts; never counted as spending
TRANSFER_CATEGORY = "Transfer"


class SpendingEngine:
    """Sums negative transaction amounts per category for one month."""

    def __init__(self, transactions: TransactionStore):
        self.transactions = transactions

    def summary(self, month: str) -> SpendingSummary:
        """Spending per category for a YYYY-MM month, largest first.

        Raises:
            ValidationError: If month is not a YYYY-MM string
        """
        start = parse_month(month)
        transactions, _ = self.transactions.list_transactions(start_date=start, end_date=month_end(start))

        totals: dict[str, Decimal] = {}
        total = ZERO
        for transaction in transactions:
            category = transaction.category or UNCATEGORIZED
            if category == TRANSFER_CATEGORY or transaction.amount >= 0:
                continue
            spent = abs(transaction.amount)
            totals[category] = totals.get(category, ZERO) + spent
            total += spent

        categories = [
            SpendingCategory(
                category=category,
                amount=round2(amount),
                percentage=round2(percent(amount, total)),
            )
            for category, amount in sorted(totals.items(), key=lambda item: item[1], reverse=True)
        ]
        return SpendingSummary(month=month, categories=tuple(categories), total=round2(total))
