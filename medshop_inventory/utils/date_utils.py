# medshop_inventory/utils/date_utils.py
from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[datetime, date, str]


def coerce_datetime(value: Optional[DateLike]) -> Optional[datetime]:
    """Convert a timestamp to a naive datetime in local time.

    Timestamps come back from the store either as ISO-8601 strings
    (``2024-05-01T10:00:00.123+00:00``) or as datetimes, with or without
    a timezone. Everything is compared against the local wall clock, so
    aware values are shifted to local time and stripped of tzinfo.

    Args:
        value: Datetime, date or ISO-8601 string

    Returns:
        Naive local datetime, or None if value is empty
    """
    if value is None or value == '':
        return None

    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip())
    elif not isinstance(value, datetime):
        # Plain date: midnight local time
        return datetime(value.year, value.month, value.day)

    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)

    return value


def coerce_date(value: Optional[DateLike]) -> Optional[date]:
    """Convert a date-like value to a date.

    Args:
        value: Date, datetime or ISO-8601 string

    Returns:
        Date, or None if value is empty
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        return coerce_datetime(value).date()

    if isinstance(value, date):
        return value

    value = value.strip()
    if len(value) == 10:
        return date.fromisoformat(value)

    return coerce_datetime(value).date()


def start_of_day(now: datetime) -> datetime:
    return datetime(now.year, now.month, now.day)


def start_of_month(now: datetime) -> datetime:
    return datetime(now.year, now.month, 1)


def start_of_year(now: datetime) -> datetime:
    return datetime(now.year, 1, 1)


def month_label(value: datetime) -> str:
    """Zero-padded ``YYYY-MM`` label; sorts chronologically as a string."""
    return f"{value.year:04d}-{value.month:02d}"


def days_ago(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)
