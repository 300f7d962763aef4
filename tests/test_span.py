"""
Tests for the Span value type and its conversion to an elapsed interval.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

import pytest

import spanparser
from spanparser import ClockProvider, FixedClock, Span, to_elapsed_interval


class TestSpanValue:
    """Construction and equality."""

    def test_defaults_to_zero(self):
        span = Span()
        assert span.is_zero()
        assert span == Span(years=0, nanoseconds=0)

    def test_no_normalization(self):
        assert Span(seconds=90) != Span(minutes=1, seconds=30)

    def test_immutable(self):
        span = Span(days=1)
        with pytest.raises(FrozenInstanceError):
            span.days = 2

    def test_hashable(self):
        assert len({Span(days=1), Span(days=1), Span(hours=24)}) == 2


class TestToElapsedInterval:
    """Calendar-aware conversion relative to a reference instant."""

    @pytest.fixture
    def anchor(self):
        return datetime(2023, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def test_zero_span(self, anchor):
        assert to_elapsed_interval(Span(), anchor) == timedelta(0)
        assert to_elapsed_interval(Span(), datetime(2024, 2, 29)) == timedelta(0)

    def test_all_fields(self, anchor):
        span = Span(
            years=1, months=2, weeks=1, days=3,
            hours=4, minutes=5, seconds=6,
            milliseconds=7, microseconds=8,
            nanoseconds=900,  # below one microsecond, truncated away
        )
        actual = to_elapsed_interval(span, anchor)
        assert actual.days == 435
        assert actual // timedelta(hours=1) == 10444
        assert actual // timedelta(seconds=1) == 37598706
        assert actual // timedelta(microseconds=1) == 37598706007008

    def test_year_from_before_leap_day(self):
        assert to_elapsed_interval(Span(years=1), datetime(2024, 1, 1)) == timedelta(days=366)

    def test_year_from_after_leap_day(self):
        assert to_elapsed_interval(Span(years=1), datetime(2024, 3, 1)) == timedelta(days=365)

    def test_year_from_leap_day_clamps(self):
        """Feb 29 2024 + 1 year lands on Feb 28 2025."""
        assert to_elapsed_interval(Span(years=1), datetime(2024, 2, 29)) == timedelta(days=365)

    def test_month_of_february(self):
        assert to_elapsed_interval(Span(months=1), datetime(2024, 2, 1)) == timedelta(days=29)
        assert to_elapsed_interval(Span(months=1), datetime(2023, 2, 1)) == timedelta(days=28)

    def test_month_clamps_to_leap_day(self):
        assert to_elapsed_interval(Span(months=1), datetime(2024, 1, 29)) == timedelta(days=31)

    def test_month_clamps_in_common_year(self):
        assert to_elapsed_interval(Span(months=1), datetime(2023, 1, 29)) == timedelta(days=30)

    def test_month_from_january_31(self):
        assert to_elapsed_interval(Span(months=1), datetime(2023, 1, 31)) == timedelta(days=28)

    def test_months_across_year_end(self):
        assert to_elapsed_interval(Span(months=2), datetime(2023, 12, 31)) == timedelta(days=60)

    def test_three_years(self):
        assert to_elapsed_interval(Span(years=3), datetime(2023, 1, 1)) == timedelta(days=1096)

    def test_three_years_after_leap_day(self):
        assert to_elapsed_interval(Span(years=3), datetime(2024, 3, 1)) == timedelta(days=1095)

    def test_ten_years(self):
        """2016, 2020 and 2024 leap days are crossed."""
        assert to_elapsed_interval(Span(years=10), datetime(2015, 3, 1)) == timedelta(days=3653)

    def test_days_across_leap_day(self):
        start = datetime(2024, 2, 28, 12)
        assert to_elapsed_interval(Span(days=2), start) == timedelta(days=2)

    def test_weeks(self, anchor):
        assert to_elapsed_interval(Span(weeks=2, days=1), anchor) == timedelta(days=15)

    def test_negative_months(self):
        assert to_elapsed_interval(Span(months=-1), datetime(2024, 3, 31)) == -timedelta(days=31)

    def test_negative_nanoseconds_truncate_toward_zero(self, anchor):
        assert to_elapsed_interval(Span(nanoseconds=-1500), anchor) == -timedelta(microseconds=1)

    def test_aware_reference_is_converted_to_utc(self):
        cet = timezone(timedelta(hours=1))
        # 2024-03-01 00:30 CET is still Feb 29 in UTC
        reference = datetime(2024, 3, 1, 0, 30, tzinfo=cet)
        assert to_elapsed_interval(Span(years=1), reference) == timedelta(days=365)

    def test_reference_is_not_mutated(self, anchor):
        before = anchor
        Span(years=1).to_elapsed_interval(anchor)
        assert anchor == before == datetime(2023, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def test_method_matches_function(self, anchor):
        span = Span(months=3, hours=2)
        assert span.to_elapsed_interval(anchor) == to_elapsed_interval(span, anchor)


class TestElapsed:
    """Tests for spanparser.elapsed, the clock aware convenience."""

    def test_explicit_reference(self):
        assert spanparser.elapsed("P1M", datetime(2023, 1, 29)) == timedelta(days=30)

    def test_accepts_span(self):
        assert spanparser.elapsed(Span(days=1), datetime(2023, 1, 1)) == timedelta(days=1)

    def test_relative_base_setting(self):
        settings = {"RELATIVE_BASE": datetime(2024, 1, 29)}
        assert spanparser.elapsed("P1M", settings=settings) == timedelta(days=31)

    def test_falls_back_to_current_clock(self):
        clock = FixedClock(datetime(2024, 1, 1, tzinfo=timezone.utc))
        with ClockProvider.with_clock(clock):
            assert spanparser.elapsed("P1Y") == timedelta(days=366)

    def test_invalid_value(self):
        with pytest.raises(spanparser.SpanParseError):
            spanparser.elapsed("PT", datetime(2024, 1, 1))


class TestFormatting:
    """Simple-unit and ISO-8601 formatting."""

    def test_simple_string(self):
        span = Span(weeks=1, days=1, hours=2, minutes=3, seconds=4, milliseconds=5, microseconds=6, nanoseconds=7)
        assert span.to_simple_string() == "8d2h3m4s5ms6us7ns"

    def test_simple_string_zero(self):
        assert Span().to_simple_string() == "0s"

    def test_simple_string_rejects_calendar_fields(self):
        with pytest.raises(ValueError):
            Span(months=1).to_simple_string()

    def test_simple_string_rejects_negative(self):
        with pytest.raises(ValueError):
            Span(hours=-1).to_simple_string()

    @pytest.mark.parametrize("span", [
        Span(days=3, hours=4),
        Span(days=1, hours=25, seconds=90),
        Span(weeks=2, milliseconds=1500),
        Span(minutes=59, nanoseconds=1001),
    ])
    def test_simple_round_trip(self, span):
        """Re-parsing reproduces the decomposition, not the original grouping."""
        parsed = spanparser.parse(span.to_simple_string())
        assert spanparser.parse(parsed.to_simple_string()) == parsed
        assert to_elapsed_interval(parsed, datetime(2024, 1, 1)) == to_elapsed_interval(span, datetime(2024, 1, 1))

    def test_iso8601(self):
        span = Span(years=1, months=2, days=3, hours=4, minutes=5, seconds=6, milliseconds=500)
        assert span.to_iso8601() == "P1Y2M3DT4H5M6.5S"
        assert spanparser.parse(span.to_iso8601()) == span

    def test_iso8601_date_only(self):
        assert Span(weeks=2).to_iso8601() == "P2W"

    def test_iso8601_zero(self):
        assert Span().to_iso8601() == "PT0S"
        assert spanparser.parse("PT0S") == Span()

    def test_iso8601_sub_second_only(self):
        assert Span(microseconds=1).to_iso8601() == "PT0.000001S"
        assert Span(milliseconds=1500).to_iso8601() == "PT1.5S"
