"""Calendar day keys.

A day key is a plain ``datetime.date``: equality and ordering are those of
the (year, month, day) triple. Every date that reaches storage or is
compared against a stored record goes through ``day_key`` first.
"""

import datetime as dt
from collections.abc import Iterator


def day_key(value: dt.date | dt.datetime | str) -> dt.date:
    """Normalize a timestamp to its calendar day.

    A ``datetime`` keeps the wall-clock date of its own offset; it is never
    converted to another time zone first, so a late-evening local timestamp
    cannot drift onto the neighbouring day.

    Args:
        value: date, datetime (naive or aware) or ISO 8601 string

    Returns:
        The date-only key

    Raises:
        ValueError: If a string is not ISO 8601
        TypeError: For any other type
    """
    # datetime is a subclass of date, so it must be checked first
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return dt.date.fromisoformat(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return dt.datetime.fromisoformat(text).date()
    raise TypeError(f"Cannot build a day key from {type(value).__name__}")


def day_key_str(value: dt.date | dt.datetime | str) -> str:
    """Storage representation of a day key (YYYY-MM-DD)."""
    return day_key(value).isoformat()


def date_range(start: dt.date, end: dt.date) -> Iterator[dt.date]:
    """Yield day keys from start (inclusive) to end (exclusive)."""
    current = day_key(start)
    stop = day_key(end)
    while current < stop:
        yield current
        current += dt.timedelta(days=1)


def nights_between(check_in: dt.date, check_out: dt.date) -> int:
    return (day_key(check_out) - day_key(check_in)).days
