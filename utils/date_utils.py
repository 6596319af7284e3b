import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple, Union

DateLike = Union[str, date, datetime]


def to_utc_day(value: DateLike) -> date:
    """
    Normalize a date, datetime or ISO string to the UTC calendar day.

    Aware datetimes are converted to UTC before the time of day is dropped,
    naive ones are taken to already be UTC.
    """
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty date value")
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid date '{value}'. Expected ISO format YYYY-MM-DD")

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()

    if isinstance(value, date):
        return value

    raise ValueError(f"Unsupported date value: {value!r}")


def day_key(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month."""
    if not 1 <= month <= 12:
        raise ValueError("Month must be 1-12")
    if not date.min.year <= year <= date.max.year:
        raise ValueError(f"Year must be {date.min.year}-{date.max.year}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def edit_deadline(created_at: datetime) -> datetime:
    # one day after submission, but never past noon of the following day
    next_day = created_at + timedelta(days=1)
    noon = datetime.combine(next_day.date(), time(12, 0), tzinfo=created_at.tzinfo)
    return min(next_day, noon)


def naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
