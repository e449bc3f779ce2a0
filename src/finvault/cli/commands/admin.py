"""Key generation and schema commands."""

import click

from finvault.cli.context import get_repository
from finvault.codec import generate_key


@click.command("keygen")
def keygen():
    """Print a new random encryption key.

    Store it as FINVAULT_ENCRYPTION_KEY. Data written with one key cannot be
    read with another.
    """
    click.echo(generate_key())


@click.command("init-db")
@click.pass_context
def init_db(ctx):
    """Create the database schema if it does not exist."""
    repository = get_repository(ctx)
    click.echo(f"Initialized database at {repository.database_url}")


def register_commands(cli):
    """Register admin commands with main CLI."""
    cli.add_command(keygen)
    cli.add_command(init_db)
