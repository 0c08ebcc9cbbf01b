"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from typing import Union

from dateutil import parser as date_parser


def parse_date(value: Union[str, date, datetime]) -> date:
    """Turn form or command-line input into a calendar date.

    Supports:
    - date and datetime objects (the time part is dropped)
    - ISO dates: "2024-01-15"
    - free-form dates: "January 15, 2024", "15/01/2024" (day first)
    - relative words: "today", "yesterday", "tomorrow"

    Args:
        value: Date, datetime or date string

    Returns:
        Date object

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        raise ValueError("Empty date string")

    date_str = str(value).strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    try:
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{value}': {e}") from e
