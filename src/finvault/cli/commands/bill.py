"""Bill commands."""

from datetime import date, timedelta

import click

from finvault.cli.context import format_money, get_codec, get_repository
from finvault.stores.bill import BillStore


@click.group()
def bill_group():
    """Track recurring bills."""
    pass


@bill_group.command("upcoming")
@click.option("--days", default=30, show_default=True, help="Number of days to look ahead")
@click.pass_context
def upcoming(ctx, days: int):
    """List due dates of active bills, including overdue ones this month."""
    today = date.today()
    start = today.replace(day=1)
    store = BillStore(get_repository(ctx), get_codec(ctx))
    instances = store.get_upcoming_instances(start, today + timedelta(days=days), today)
    if not instances:
        click.echo("No upcoming bills.")
        return

    for instance in instances:
        if instance.is_paid:
            status = "paid"
        elif instance.is_overdue:
            status = "OVERDUE"
        else:
            status = "due"
        click.echo(
            f"{instance.due_date.isoformat()} | {instance.bill_name:24s} | "
            f"{format_money(instance.amount):>12s} | {status}"
        )


def register_commands(cli):
    """Register bill commands with main CLI."""
    cli.add_command(bill_group, name="bill")
