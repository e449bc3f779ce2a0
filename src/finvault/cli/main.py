"""Main CLI entry point."""

import click

from finvault.cli.error_handling import FinvaultGroup
from finvault.config import default_database_url, load_settings
from finvault.domain.errors import ConfigError
from finvault.logging_config import setup_logging

# Import and register all commands at module level
from finvault.cli.commands import account, admin, bill, report


@click.group(cls=FinvaultGroup)
@click.option(
    "--database-url",
    envvar="FINVAULT_DATABASE_URL",
    help="SQLAlchemy database URL",
)
@click.option(
    "--db-path",
    type=click.Path(),
    envvar="FINVAULT_DB_PATH",
    help="Path to a SQLite database file (used when no database URL is given)",
)
@click.option(
    "--encryption-key",
    envvar="FINVAULT_ENCRYPTION_KEY",
    help="64-character hex key",
)
@click.option(
    "--log-level",
    envvar="FINVAULT_LOG_LEVEL",
    help="Application log level (default WARNING)",
)
@click.pass_context
def cli(ctx, database_url: str | None, db_path: str | None, encryption_key: str | None, log_level: str | None):
    """Finvault - encrypted personal finance records.

    Every amount, name and date worth protecting is encrypted before it
    reaches the database. Reports are computed from decrypted records on
    demand.
    """
    ctx.ensure_object(dict)

    try:
        settings = load_settings()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    setup_logging(app_log_level=log_level or "WARNING", log_file=settings.log_file)

    if database_url is None:
        database_url = default_database_url(db_path) if db_path else settings.database_url
    ctx.obj["database_url"] = database_url
    ctx.obj["encryption_key"] = encryption_key or settings.encryption_key
    ctx.obj["benchmark_symbol"] = settings.benchmark_symbol


# Register all commands
admin.register_commands(cli)
account.register_commands(cli)
bill.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
