"""Net worth summary and month-by-month net worth history.

Both are computed from decrypted account state and balance snapshots on
every call; nothing derived is stored.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from finvault.analytics.rounding import ZERO, round2
from finvault.domain.entities import Account, AccountType, classify_account_type
from finvault.domain.errors import ValidationError, invalid_history_months
from finvault.domain.reports import (
    AccountBalancesPoint,
    NetWorthAccount,
    NetWorthHistory,
    NetWorthPoint,
    NetWorthSummary,
)
from finvault.logging_config import get_logger
from finvault.stores.account import AccountStore
from finvault.stores.balance import BalanceStore
from finvault.utils.months import end_of_month_instant, end_of_previous_month, month_key, month_starts

logger = get_logger(__name__)

DEFAULT_HISTORY_MONTHS = 12


def _equity_value(account: Account, balance: Decimal) -> Decimal:
    """Real estate with an estimated value counts as equity (value minus amount owed)."""
    if account.type == AccountType.REAL_ESTATE and account.estimated_value is not None:
        return account.estimated_value - balance
    return balance


class NetWorthEngine:
    """Computes net worth from active accounts and their balance snapshots."""

    def __init__(self, accounts: AccountStore, balances: BalanceStore):
        self.accounts = accounts
        self.balances = balances

    def summary(self, today: Optional[date] = None) -> NetWorthSummary:
        """Current net worth with each account's balance at the end of last month.

        An account with no snapshot on or before the end of the previous
        month gets previous_balance None rather than a guessed value.
        """
        today = today or date.today()
        accounts = self.accounts.list_accounts(is_active=True)
        previous = self.balances.latest_balances(
            [account.id for account in accounts], end_of_previous_month(today)
        )

        rows = []
        total_assets = ZERO
        total_liabilities = ZERO
        for account in accounts:
            classification = classify_account_type(account.type)
            balance = _equity_value(account, account.current_balance)
            previous_balance = previous.get(account.id)
            if previous_balance is not None:
                previous_balance = _equity_value(account, previous_balance)

            if classification == "asset":
                total_assets += balance
            else:
                total_liabilities += abs(balance)

            rows.append(
                NetWorthAccount(
                    id=account.id,
                    name=account.name,
                    type=account.type,
                    balance=balance,
                    previous_balance=previous_balance,
                    classification=classification,
                    is_favorite=account.is_favorite,
                )
            )

        return NetWorthSummary(
            total_assets=round2(total_assets),
            total_liabilities=round2(total_liabilities),
            net_worth=round2(total_assets - total_liabilities),
            accounts=tuple(rows),
        )

    def history(self, months: int = DEFAULT_HISTORY_MONTHS, today: Optional[date] = None) -> NetWorthHistory:
        """One point per month for the last `months` months, ending with today's month.

        Each account contributes the latest snapshot dated within the month,
        or else the last known value from an earlier month (including months
        before the window). Real estate equity uses the account's current
        estimated value for every month.

        Raises:
            ValidationError: If months is less than 1
        """
        if months < 1:
            raise ValidationError(invalid_history_months(months))
        today = today or date.today()
        accounts = {account.id: account for account in self.accounts.list_accounts(is_active=True)}
        snapshots = self.balances.list_balances(end=end_of_month_instant(today))
        if not snapshots:
            return NetWorthHistory()

        periods = month_starts(today, months)
        first_key = month_key(periods[0])

        # Snapshots arrive newest first, so the first one seen per key wins
        initial: dict[str, Decimal] = {}
        by_month: dict[str, dict[str, Decimal]] = {}
        for snapshot in snapshots:
            key = month_key(snapshot.date)
            if key < first_key:
                initial.setdefault(snapshot.account_id, snapshot.balance)
            else:
                by_month.setdefault(key, {}).setdefault(snapshot.account_id, snapshot.balance)

        last_known = dict(initial)
        history = []
        account_history = []
        for period in periods:
            key = month_key(period)
            last_known.update(by_month.get(key, {}))

            assets = ZERO
            liabilities = ZERO
            balances: dict[str, Decimal] = {}
            for account_id, balance in last_known.items():
                account = accounts.get(account_id)
                if account is None:
                    continue
                if classify_account_type(account.type) == "asset":
                    value = _equity_value(account, balance)
                    assets += value
                else:
                    value = abs(balance)
                    liabilities += value
                balances[account_id] = round2(value)

            history.append(
                NetWorthPoint(
                    date=key,
                    assets=round2(assets),
                    liabilities=round2(liabilities),
                    net_worth=round2(assets - liabilities),
                )
            )
            account_history.append(AccountBalancesPoint(date=key, balances=balances))

        logger.debug("Built net worth history over %d months", len(history))
        return NetWorthHistory(history=tuple(history), account_history=tuple(account_history))
