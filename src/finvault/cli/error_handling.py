"""CLI error handling helpers.

Domain errors are expected input or state problems and exit with status 1.
Crypto errors mean the key or the stored ciphertext is unusable; they are
reported once by the command group and exit with status 2.
"""

import click

from finvault.domain.errors import CryptoError, DomainError

EXIT_DOMAIN_ERROR = 1
EXIT_CRYPTO_ERROR = 2


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(EXIT_DOMAIN_ERROR)


def handle_crypto_error(ctx: click.Context, error: CryptoError) -> None:
    click.echo(f"Encryption failure: {error}", err=True)
    ctx.exit(EXIT_CRYPTO_ERROR)


class FinvaultGroup(click.Group):
    """Command group that turns crypto failures from any subcommand into one fatal message."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except CryptoError as e:
            handle_crypto_error(ctx, e)
