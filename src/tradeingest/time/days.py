"""Calendar-day boundaries and storage timestamp encoding."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo

DAY_LENGTH = timedelta(hours=24)


def start_of_day(value: date | datetime, tz: tzinfo) -> datetime:
    """
    Midnight of the calendar day containing ``value`` in ``tz``.

    Naive datetimes are taken to already be wall-clock time in ``tz``.
    """
    if isinstance(value, datetime):
        local = value.astimezone(tz) if value.tzinfo is not None else value.replace(tzinfo=tz)
        day = local.date()
    else:
        day = value
    return datetime(day.year, day.month, day.day, tzinfo=tz)


def day_bounds(value: date | datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    """Half-open ``[start, start + 24h)`` window for the day containing ``value``."""
    start = start_of_day(value, tz)
    # Absolute 24h, not wall-clock: DST days still get a 24h window
    end = (start.astimezone(timezone.utc) + DAY_LENGTH).astimezone(tz)
    return start, end


def to_db_time(value: datetime) -> str:
    """Encode an aware datetime as sortable UTC ISO-8601 text (second resolution)."""
    if value.tzinfo is None:
        raise ValueError(f"Naive datetime cannot be stored: {value!r}")
    return value.astimezone(timezone.utc).isoformat(timespec="seconds")


def from_db_time(value: str, tz: tzinfo | None = None) -> datetime:
    """Decode text written by ``to_db_time``; converts to ``tz`` when given."""
    parsed = datetime.fromisoformat(value)
    return parsed.astimezone(tz) if tz is not None else parsed
