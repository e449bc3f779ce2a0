"""Report commands backed by the analytics engines."""

from datetime import date

import click

from finvault.analytics.net_worth import NetWorthEngine
from finvault.analytics.portfolio import PortfolioEngine
from finvault.analytics.spending import SpendingEngine
from finvault.cli.context import format_money, get_codec, get_repository
from finvault.cli.error_handling import handle_domain_error
from finvault.config import DEFAULT_BENCHMARK_SYMBOL
from finvault.domain.errors import DomainError
from finvault.domain.reports import PerformancePeriod
from finvault.stores.account import AccountStore
from finvault.stores.balance import BalanceStore
from finvault.stores.holding import HoldingStore
from finvault.stores.price_history import PriceHistoryStore
from finvault.stores.target_allocation import TargetAllocationStore
from finvault.stores.transaction import TransactionStore
from finvault.utils.months import month_key


def _portfolio(ctx, benchmark: str | None = None) -> PortfolioEngine:
    repository, codec = get_repository(ctx), get_codec(ctx)
    benchmark = benchmark or ctx.find_root().obj.get("benchmark_symbol") or DEFAULT_BENCHMARK_SYMBOL
    return PortfolioEngine(
        HoldingStore(repository, codec),
        AccountStore(repository, codec),
        TargetAllocationStore(repository, codec),
        PriceHistoryStore(repository, codec),
        benchmark_symbol=benchmark,
    )


def _pct(value) -> str:
    return "-" if value is None else f"{value:.2f}%"


@click.command("net-worth")
@click.option(
    "--history", "months", type=click.IntRange(min=1), default=None, help="Show a month-by-month history"
)
@click.pass_context
def net_worth(ctx, months: int | None):
    """Show net worth, or its history with --history N."""
    repository, codec = get_repository(ctx), get_codec(ctx)
    engine = NetWorthEngine(AccountStore(repository, codec), BalanceStore(repository, codec))

    if months is not None:
        try:
            history = engine.history(months)
        except DomainError as e:
            handle_domain_error(ctx, e)
        if not history.history:
            click.echo("No balance history yet.")
            return
        click.echo(f"{'Month':8s} | {'Assets':>14s} | {'Liabilities':>14s} | {'Net worth':>14s}")
        click.echo("-" * 60)
        for point in history.history:
            click.echo(
                f"{point.date:8s} | {format_money(point.assets):>14s} | "
                f"{format_money(point.liabilities):>14s} | {format_money(point.net_worth):>14s}"
            )
        return

    summary = engine.summary()
    for row in summary.accounts:
        click.echo(
            f"{row.name:24s} | {row.classification:9s} | {format_money(row.balance):>14s} | "
            f"last month {format_money(row.previous_balance):>14s}"
        )
    click.echo("-" * 80)
    click.echo(f"Total assets:      {format_money(summary.total_assets)}")
    click.echo(f"Total liabilities: {format_money(summary.total_liabilities)}")
    click.echo(f"Net worth:         {format_money(summary.net_worth)}")


@click.command("spending")
@click.argument("month", required=False)
@click.pass_context
def spending(ctx, month: str | None):
    """Show spending by category for MONTH (YYYY-MM, default this month)."""
    month = month or month_key(date.today())
    engine = SpendingEngine(TransactionStore(get_repository(ctx), get_codec(ctx)))
    try:
        summary = engine.summary(month)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not summary.categories:
        click.echo(f"No spending in {month}.")
        return
    for category in summary.categories:
        click.echo(f"{category.category:24s} | {format_money(category.amount):>12s} | {_pct(category.percentage):>8s}")
    click.echo("-" * 52)
    click.echo(f"Total: {format_money(summary.total)}")


@click.command("allocation")
@click.option("--account", "account_id", help="Limit to one investment account")
@click.pass_context
def allocation(ctx, account_id: str | None):
    """Show asset allocation against targets."""
    result = _portfolio(ctx).asset_allocation(account_id)
    if not result.slices:
        click.echo("No holdings found.")
        return
    for slice_ in result.slices:
        click.echo(
            f"{slice_.label:12s} | {format_money(slice_.market_value):>14s} | {_pct(slice_.percentage):>8s} | "
            f"target {_pct(slice_.target_pct):>8s} | drift {_pct(slice_.drift):>8s}"
        )
    click.echo(f"Total: {format_money(result.total_market_value)}")


@click.command("performance")
@click.option(
    "--period",
    type=click.Choice([p.value for p in PerformancePeriod]),
    default=PerformancePeriod.TWELVE_MONTHS.value,
    show_default=True,
)
@click.option("--account", "account_id", help="Limit to one investment account")
@click.option("--benchmark", help="Benchmark symbol (default FINVAULT_BENCHMARK_SYMBOL or SPY)")
@click.pass_context
def performance(ctx, period: str, account_id: str | None, benchmark: str | None):
    """Show portfolio return against a benchmark."""
    engine = _portfolio(ctx, benchmark)
    result = engine.performance(period, account_id)
    summary = result.summary
    click.echo(f"Value:        {format_money(summary.total_value)}")
    click.echo(f"Cost:         {format_money(summary.total_cost)}")
    click.echo(f"Return:       {format_money(summary.total_return)} ({_pct(summary.total_return_pct)})")
    click.echo(f"{engine.benchmark_symbol} return: {_pct(summary.benchmark_return_pct)}")


@click.command("rebalance")
@click.option("--account", "account_id", help="Limit to one investment account")
@click.pass_context
def rebalance(ctx, account_id: str | None):
    """Suggest trades that bring the allocation back to target."""
    plan = _portfolio(ctx).rebalance(account_id)
    if not plan.suggestions:
        click.echo("No target allocations set.")
        return
    for suggestion in plan.suggestions:
        click.echo(
            f"{suggestion.action.value.upper():4s} {suggestion.label:12s} "
            f"{format_money(suggestion.amount):>12s} (drift {_pct(suggestion.drift)})"
        )


def register_commands(cli):
    """Register report commands with main CLI."""
    for command in (net_worth, spending, allocation, performance, rebalance):
        cli.add_command(command)
