"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIOD_NAMES = ("week", "month", "year")
PERIOD_OFFSETS = {"last": -1, "this": 0, "next": 1}


def period_start(period: str, offset: int = 0, today: date | None = None) -> date:
    """First day of the week (Monday), month or year ``offset`` periods from today."""
    today = today or date.today()
    if period == "week":
        return today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
    if period == "month":
        return today.replace(day=1) + relativedelta(months=offset)
    if period == "year":
        return today.replace(month=1, day=1) + relativedelta(years=offset)
    raise ValueError(f"Unknown period '{period}'")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-03-15", "15 March 2024") and relative
    forms: "today", "yesterday", "tomorrow", and "last/this/next" followed by
    week, month or year, which resolve to the first day of that period.

    Raises:
        ValueError: If date string cannot be parsed
    """
    value = date_str.strip().lower()
    today = date.today()

    days = {"yesterday": -1, "today": 0, "tomorrow": 1}
    if value in days:
        return today + timedelta(days=days[value])

    word, _, period = value.partition(" ")
    if word in PERIOD_OFFSETS and period in PERIOD_NAMES:
        return period_start(period, PERIOD_OFFSETS[word], today)

    try:
        return date_parser.parse(value).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{value}': {e}")


def parse_month(month_str: str) -> date:
    """Parse a month into the first day of that month.

    Accepts "YYYY-MM", "this month", "last month", "next month", or any date
    parse_date understands.

    Raises:
        ValueError: If the month cannot be parsed
    """
    value = month_str.strip().lower()
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError:
        pass
    return parse_date(value).replace(day=1)


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a period flag such as "last-month".

    "this-*" periods end today; "last-*" periods end on the last day of the
    previous week, month or year.

    Raises:
        ValueError: If period string is not recognized
    """
    word, _, name = period.strip().lower().partition("-")
    if word not in ("this", "last") or name not in PERIOD_NAMES:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-month, this-year, "
            "this-week, last-month, last-year, last-week"
        )

    today = date.today()
    current = period_start(name, 0, today)
    if word == "this":
        return (current, today)
    return (period_start(name, -1, today), current - timedelta(days=1))
