from __future__ import annotations

from datetime import UTC, datetime

from famly.core.datetime_utils import ensure_utc, format_short, parse_timestamp


def test_ensure_utc_on_naive_datetime() -> None:
    naive = datetime(2026, 1, 1, 12, 0)

    utc_dt = ensure_utc(naive)

    assert utc_dt.tzinfo == UTC


def test_parse_timestamp_converts_offsets_to_utc() -> None:
    parsed = parse_timestamp("2026-04-01T10:00:00+02:00")

    assert parsed == datetime(2026, 4, 1, 8, 0, tzinfo=UTC)


def test_parse_timestamp_rejects_garbage() -> None:
    assert parse_timestamp("next tuesday") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None


def test_format_short_omits_midnight() -> None:
    assert format_short(datetime(2026, 10, 26, tzinfo=UTC)) == "Mon 26 Oct"
    assert format_short(datetime(2026, 10, 26, 15, 30, tzinfo=UTC)) == "Mon 26 Oct 15:30"
