from __future__ import annotations

from datetime import UTC, datetime

from dateutil import parser as dateutil_parser


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return ensure_utc(dateutil_parser.isoparse(value))
    except (ValueError, OverflowError):
        return None


def format_short(dt: datetime) -> str:
    if dt.hour == 0 and dt.minute == 0:
        return dt.strftime("%a %d %b")
    return dt.strftime("%a %d %b %H:%M")
