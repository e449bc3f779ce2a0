"""Utility functions for finvault."""

from finvault.utils.amount_parser import parse_amount
from finvault.utils.months import parse_month, month_key

__all__ = ["parse_amount", "parse_month", "month_key"]
