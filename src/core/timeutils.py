"""Timestamp parsing and calendar-day helpers."""

from datetime import UTC, date, datetime, tzinfo

from dateutil import parser as dateutil_parser

from src.core.config import settings


def parse_timestamp(value: object) -> datetime | None:
    """Parse a PocketBase or ISO-8601 timestamp into an aware datetime.

    PocketBase stores unset dates as an empty string and serializes set ones as
    ``"2024-05-01 09:30:00.000Z"``. Naive values are assumed to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = dateutil_parser.isoparse(value.strip())
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def local_date(moment: datetime, zone: tzinfo | None) -> date:
    """Calendar date of ``moment`` as seen in ``zone``."""
    if zone is None or moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(zone).date()


def now_local() -> datetime:
    """Current instant in the configured timezone."""
    return datetime.now(settings.tzinfo)


def as_local(moment: datetime) -> datetime:
    """Express ``moment`` in the configured timezone, treating naive values as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(settings.tzinfo)
