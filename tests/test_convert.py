"""Test RFC 3339 instant encoding and decoding."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from coder_client.convert import format_instant, optional_instant, parse_instant


class TestInstantRoundTrip:
    """Canonical instants survive decode then encode unchanged."""

    @pytest.mark.parametrize(
        "value",
        [
            "2023-04-01T09:15:30Z",
            "2023-04-01T09:15:30.5Z",
            "2023-04-01T09:15:30.123456Z",
            "2023-04-01T09:15:30.25+02:00",
            "1999-12-31T23:59:59.000001-05:30",
        ],
    )
    def test_round_trip(self, value: str) -> None:
        assert format_instant(parse_instant(value)) == value

    def test_utc_offset_preserved(self) -> None:
        parsed = parse_instant("2023-04-01T09:15:30.25+02:00")
        assert parsed.utcoffset() == timedelta(hours=2)
        assert parsed.microsecond == 250000


class TestParseInstant:
    def test_nanoseconds_truncated_to_microseconds(self) -> None:
        parsed = parse_instant("2023-04-01T09:15:30.123456789Z")
        assert parsed.microsecond == 123456
        assert parsed.tzinfo is not None

    def test_zero_offset_renders_as_z(self) -> None:
        assert format_instant(parse_instant("2023-04-01T09:15:30+00:00")) == (
            "2023-04-01T09:15:30Z"
        )

    @pytest.mark.parametrize(
        "value", ["2023-04-01", "2023-04-01T09:15:30", "yesterday", "2023-04-01T09:15Z"]
    )
    def test_invalid_raises(self, value: str) -> None:
        with pytest.raises(ValueError, match="Invalid instant"):
            parse_instant(value)

    def test_optional_instant_accepts_missing(self) -> None:
        assert optional_instant(None) is None
        assert optional_instant("") is None


class TestFormatInstant:
    def test_naive_datetime_rejected(self) -> None:
        with pytest.raises(ValueError, match="naive"):
            format_instant(datetime(2023, 4, 1, 9, 15, 30))

    def test_trailing_fraction_zeros_trimmed(self) -> None:
        value = datetime(2023, 4, 1, 9, 15, 30, 120000, tzinfo=timezone.utc)
        assert format_instant(value) == "2023-04-01T09:15:30.12Z"

    def test_negative_offset(self) -> None:
        value = datetime(2023, 4, 1, 9, 15, 30, tzinfo=timezone(timedelta(hours=-7)))
        assert format_instant(value) == "2023-04-01T09:15:30-07:00"
