"""Calendar month helpers built on dateutil."""

import calendar
import re
from datetime import date, datetime, time

from dateutil.relativedelta import relativedelta

from finvault.domain.errors import ValidationError, invalid_month

_MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def parse_month(month: str) -> date:
    """Parse a YYYY-MM string into the first day of that month.

    Raises:
        ValidationError: If the string is not a valid YYYY-MM month
    """
    match = _MONTH_RE.match(month.strip())
    if match is None:
        raise ValidationError(invalid_month(month))
    return date(int(match.group(1)), int(match.group(2)), 1)


def month_key(day: date) -> str:
    """Return the YYYY-MM key for a date."""
    return f"{day.year:04d}-{day.month:02d}"


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_end(day: date) -> date:
    """Last calendar day of the month containing day."""
    return day.replace(day=days_in_month(day.year, day.month))


def end_of_month_instant(day: date) -> datetime:
    """Last representable instant of the month containing day."""
    return datetime.combine(month_end(day), time.max)


def end_of_previous_month(day: date) -> datetime:
    """Last instant of the month before the one containing day."""
    return end_of_month_instant(day.replace(day=1) - relativedelta(days=1))


def month_starts(today: date, months: int) -> list[date]:
    """First days of the last `months` months, oldest first, ending with today's month."""
    current = today.replace(day=1)
    return [current - relativedelta(months=offset) for offset in range(months - 1, -1, -1)]
