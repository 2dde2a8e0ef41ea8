"""Local calendar-day helpers used by stats and the store codecs."""

from datetime import date, datetime, time, timedelta


def ensure_aware(value: datetime) -> datetime:
    """Interpret naive datetimes as local time; aware ones pass through."""
    if value.tzinfo is None:
        return value.astimezone()
    return value


def local_date(value: datetime) -> date:
    """Local calendar day containing `value` (day boundary = local midnight)."""
    return ensure_aware(value).astimezone().date()


def start_of_local_day(day: date) -> datetime:
    """Aware datetime for local midnight at the start of `day`."""
    return datetime.combine(day, time.min).astimezone()


def day_key(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def days_back(today: date, count: int) -> list[date]:
    """`count` consecutive days ending at `today`, oldest first."""
    return [today - timedelta(days=offset) for offset in range(count - 1, -1, -1)]
