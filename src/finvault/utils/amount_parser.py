"""Amount parsing for command line input."""

import re
from decimal import Decimal, InvalidOperation


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string such as "1,234.56", "$-20" or "(15.00)".

    Parentheses mark a negative amount.

    Raises:
        ValueError: If amount string cannot be parsed
    """
    text = (amount_str or "").strip()
    if not text:
        raise ValueError("Empty amount string")

    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]

    text = re.sub(r"[$€£¥,\s]", "", text)

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    return -amount if negative else amount
