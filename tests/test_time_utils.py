from __future__ import annotations

from datetime import timezone

import pytest

from appinsights_otlp.errors import MalformedTimestampError
from appinsights_otlp.mapping.time_utils import (
    parse_timestamp,
    to_epoch_nanos,
    to_epoch_nanos_plus_duration,
)

NEW_YEAR_2023_NS = 1_672_531_200 * 1_000_000_000


def test_utc_timestamp_to_nanos():
    assert to_epoch_nanos("2023-01-01T00:00:00Z") == NEW_YEAR_2023_NS


def test_offset_is_applied():
    assert to_epoch_nanos("2023-01-01T01:00:00+01:00") == NEW_YEAR_2023_NS
    assert to_epoch_nanos("2022-12-31T19:00:00-05:00") == NEW_YEAR_2023_NS


def test_seven_fraction_digits_kept_at_tick_precision():
    assert to_epoch_nanos("2023-01-01T00:00:00.1234567Z") == NEW_YEAR_2023_NS + 123_456_700


def test_extra_fraction_digits_truncated():
    assert to_epoch_nanos("2023-01-01T00:00:00.123456789Z") == NEW_YEAR_2023_NS + 123_456_700


def test_short_fraction_padded():
    assert to_epoch_nanos("2023-01-01T00:00:00.5Z") == NEW_YEAR_2023_NS + 500_000_000


def test_naive_timestamp_treated_as_utc():
    assert to_epoch_nanos("2023-01-01T00:00:00") == NEW_YEAR_2023_NS


def test_results_are_multiples_of_100():
    for ts in ("2023-06-15T12:34:56.7654321Z", "2024-02-29T23:59:59.9999999+02:00"):
        assert to_epoch_nanos(ts) % 100 == 0
        assert to_epoch_nanos_plus_duration(ts, 12.34567) % 100 == 0


def test_duration_added_to_end_time():
    start = to_epoch_nanos("2023-01-01T00:00:00Z")
    end = to_epoch_nanos_plus_duration("2023-01-01T00:00:00Z", 150.0)
    assert end - start == 150_000_000


def test_fractional_millisecond_duration():
    end = to_epoch_nanos_plus_duration("2023-01-01T00:00:00.1234567Z", 0.25)
    assert end == NEW_YEAR_2023_NS + 123_456_700 + 250_000


def test_zero_duration_end_equals_start():
    ts = "2023-03-01T08:00:00.0000001Z"
    assert to_epoch_nanos_plus_duration(ts, 0.0) == to_epoch_nanos(ts)


def test_parse_timestamp_returns_utc_aware():
    dt, ticks = parse_timestamp("2023-01-01T03:00:00.25+03:00")
    assert dt.tzinfo is not None
    assert dt.utcoffset() == timezone.utc.utcoffset(None)
    assert dt.hour == 0
    assert ticks == 2_500_000


@pytest.mark.parametrize("bad", ["", "not a date", "2023-13-01T00:00:00Z"])
def test_malformed_timestamp_is_fatal(bad):
    with pytest.raises(MalformedTimestampError):
        to_epoch_nanos(bad)


def test_pre_epoch_timestamp_rejected():
    with pytest.raises(MalformedTimestampError):
        to_epoch_nanos("1969-12-31T23:59:59Z")
