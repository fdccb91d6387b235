from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cachekeeper.storage.records import (
    InfoRecord,
    format_duration,
    format_timestamp,
    parse_duration,
    parse_timestamp,
    replace_timestamp,
)


@pytest.mark.parametrize(
    ("duration", "text"),
    [
        (timedelta(seconds=1), "00:00:01"),
        (timedelta(minutes=20), "00:20:00"),
        (timedelta(days=2, hours=3, seconds=4), "2.03:00:04"),
        (timedelta(seconds=5, microseconds=1500), "00:00:05.001500"),
        (timedelta(minutes=-90), "-01:30:00"),
    ],
)
def test_duration_text_format(duration, text) -> None:
    assert format_duration(duration) == text
    assert parse_duration(text) == duration


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        "ten minutes",
        "24:00:00",
        "00:60:00",
        "00:00:01.12345678",
        "9999999999.00:00:00",
        "9999999999",
        "1:2:3:4",
    ],
)
def test_parse_duration_rejects_malformed_fields(raw) -> None:
    assert parse_duration(raw) is None


@pytest.mark.parametrize(
    ("raw", "duration"),
    [
        ("3", timedelta(days=3)),
        ("00:05", timedelta(minutes=5)),
        ("1:2:3", timedelta(hours=1, minutes=2, seconds=3)),
        ("2.04:30", timedelta(days=2, hours=4, minutes=30)),
        ("-7", timedelta(days=-7)),
    ],
)
def test_parse_duration_accepts_short_forms(raw, duration) -> None:
    assert parse_duration(raw) == duration


def test_naive_timestamp_is_treated_as_utc() -> None:
    naive = datetime(2026, 10, 17, 9, 30)

    text = format_timestamp(naive)

    assert text == "2026-10-17T09:30:00+00:00"
    assert parse_timestamp(text) == naive.replace(tzinfo=timezone.utc)


def test_timestamp_keeps_original_offset() -> None:
    seoul = timezone(timedelta(hours=9))
    value = datetime(2026, 10, 17, 18, 30, 0, 125, tzinfo=seoul)

    assert parse_timestamp(format_timestamp(value)) == value


def test_info_record_from_text_without_third_line() -> None:
    record = InfoRecord.from_text("item1\n2026-10-17T09:30:00+00:00\n")

    assert record.key == "item1"
    assert record.sliding_expiration is None


@pytest.mark.parametrize("text", ["", "item1\n", "item1\nnot-a-date\n\n"])
def test_info_record_from_text_rejects_incomplete_records(text) -> None:
    with pytest.raises(ValueError):
        InfoRecord.from_text(text)


def test_replace_timestamp_keeps_other_lines() -> None:
    original = "item1\n2026-10-17T09:30:00+00:00\nnot parsed\n"
    refreshed = datetime(2026, 10, 18, tzinfo=timezone.utc)

    updated = replace_timestamp(original, refreshed)

    assert updated == "item1\n2026-10-18T00:00:00+00:00\nnot parsed\n"
