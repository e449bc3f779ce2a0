"""Lazily built repository and codec shared by CLI commands."""

import click

from finvault.codec import Codec
from finvault.database.factories import create_repository
from finvault.database.repository import RecordRepository


def get_repository(ctx: click.Context) -> RecordRepository:
    """Return the command's repository, creating the schema on first use."""
    obj = ctx.find_root().obj
    if obj.get("repository") is None:
        obj["repository"] = create_repository(obj.get("database_url"))
    return obj["repository"]


def get_codec(ctx: click.Context) -> Codec:
    """Return the codec for the provisioned key, failing before any store is touched.

    A missing or malformed key raises CryptoError, which the command group
    reports as an encryption failure.
    """
    obj = ctx.find_root().obj
    if obj.get("codec") is None:
        obj["codec"] = Codec(obj.get("encryption_key") or "")
    return obj["codec"]


def format_money(value) -> str:
    if value is None:
        return "-"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"
