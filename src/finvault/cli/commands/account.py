"""Account management commands."""

import click

from finvault.cli.context import format_money, get_codec, get_repository
from finvault.cli.error_handling import handle_domain_error
from finvault.domain.entities import AccountType
from finvault.domain.errors import DomainError, account_not_found
from finvault.domain.inputs import AccountCreate, AccountUpdate
from finvault.stores.account import AccountStore
from finvault.utils.amount_parser import parse_amount

ACCOUNT_TYPES = [t.value for t in AccountType]


def _store(ctx) -> AccountStore:
    return AccountStore(get_repository(ctx), get_codec(ctx))


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), default="checking", show_default=True)
@click.option("--institution", default="", help="Bank or institution name")
@click.option("--balance", default="0", help="Opening balance")
@click.pass_context
def create_account(ctx, name: str, account_type: str, institution: str, balance: str):
    """Create a new account.

    Examples:
        finvault account create "Everyday Checking" --institution "Chase" --balance 2500
        finvault account create "Visa" --type credit --balance -340.12
    """
    store = _store(ctx)
    try:
        account = store.create_account(
            AccountCreate(
                name=name,
                type=AccountType(account_type),
                institution=institution,
                current_balance=parse_amount(balance),
            )
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{account.name}' (ID: {account.id})")


@account_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive accounts")
@click.pass_context
def list_accounts(ctx, include_inactive: bool):
    """List accounts in display order."""
    accounts = _store(ctx).list_accounts(is_active=None if include_inactive else True)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        click.echo(
            f"{acc.id} | {acc.name:24s} | {acc.type.value:18s} | {format_money(acc.current_balance):>14s}"
        )


@account_group.command("set-balance")
@click.argument("account_id", metavar="ACCOUNT_ID")
@click.argument("amount", metavar="AMOUNT")
@click.option("--no-snapshot", is_flag=True, help="Do not record a balance snapshot")
@click.pass_context
def set_balance(ctx, account_id: str, amount: str, no_snapshot: bool):
    """Set an account's current balance.

    A balance snapshot is recorded when the value changes, unless
    --no-snapshot is given.
    """
    store = _store(ctx)
    try:
        value = parse_amount(amount)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if no_snapshot:
        account = store.update_account_balance_only(account_id, value)
    else:
        account = store.update_account(account_id, AccountUpdate(current_balance=value))
    if account is None:
        handle_domain_error(ctx, ValueError(account_not_found(account_id)))
    click.echo(f"Balance of '{account.name}' is now {format_money(account.current_balance)}")


@account_group.command("delete")
@click.argument("account_id", metavar="ACCOUNT_ID")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account_id: str, yes: bool):
    """Delete an account and its balance history.

    Accounts that still have holdings, transactions or bills cannot be deleted.
    """
    store = _store(ctx)
    account = store.get_account(account_id)
    if account is None:
        handle_domain_error(ctx, ValueError(account_not_found(account_id)))

    if not yes and not click.confirm(f"Are you sure you want to delete account '{account.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        store.delete_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account '{account.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
