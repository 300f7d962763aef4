"""
Calendar-aware span of time.

A :class:`Span` is a sum of independent magnitudes (years ... nanoseconds).
It is not tied to an instant: months and years vary in length, so turning a
span into an exact :class:`datetime.timedelta` needs a reference timestamp,
see :func:`to_elapsed_interval`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timedelta, timezone

from spanparser.calendar_math import add_days, add_months, add_years

NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class Span:
    """
    An immutable multi-unit span of time.

    All fields default to zero and no field is derived from another, so
    ``Span(seconds=90)`` and ``Span(minutes=1, seconds=30)`` are different
    values that resolve to the same elapsed interval.

    Examples:
        Span(years=1, months=2, days=3)
        Span.parse("P3Y6M4DT12H30M5S")
        Span.parse("1h30m")
    """
    years: int = 0
    months: int = 0
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    milliseconds: int = 0
    microseconds: int = 0
    nanoseconds: int = 0

    @classmethod
    def parse(cls, value: str) -> Span:
        """Parse an ISO-8601 or simple-unit string, raising SpanParseError on failure."""
        from spanparser import parse_or_fail

        return parse_or_fail(value)

    def is_zero(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))

    def to_elapsed_interval(self, reference: datetime) -> timedelta:
        return to_elapsed_interval(self, reference)

    def to_simple_string(self) -> str:
        """
        Format as a simple-unit string such as ``"1d2h30m1s500ms"``.

        Weeks are folded into days. Years and months have no fixed length and
        cannot be expressed in this format.
        """
        if self.years or self.months:
            raise ValueError("Spans with years or months have no simple-unit form")
        self._check_non_negative()

        parts = [
            (self.weeks * 7 + self.days, "d"),
            (self.hours, "h"),
            (self.minutes, "m"),
            (self.seconds, "s"),
            (self.milliseconds, "ms"),
            (self.microseconds, "us"),
            (self.nanoseconds, "ns"),
        ]
        text = "".join(f"{value}{unit}" for value, unit in parts if value)
        return text or "0s"

    def to_iso8601(self) -> str:
        """
        Format as an ISO-8601 duration such as ``"P1Y2M3DT4H5M6.5S"``.

        Sub-second fields are folded into a decimal fraction of seconds.
        """
        self._check_non_negative()

        date_part = "".join(
            f"{value}{unit}"
            for value, unit in (
                (self.years, "Y"),
                (self.months, "M"),
                (self.weeks, "W"),
                (self.days, "D"),
            )
            if value
        )

        total_nanos = (
            self.seconds * NANOS_PER_SECOND
            + self.milliseconds * 1_000_000
            + self.microseconds * 1_000
            + self.nanoseconds
        )
        whole_seconds, fraction = divmod(total_nanos, NANOS_PER_SECOND)

        time_part = ""
        if self.hours:
            time_part += f"{self.hours}H"
        if self.minutes:
            time_part += f"{self.minutes}M"
        if fraction:
            time_part += f"{whole_seconds}.{fraction:09d}".rstrip("0") + "S"
        elif whole_seconds:
            time_part += f"{whole_seconds}S"

        if not date_part and not time_part:
            return "PT0S"
        if time_part:
            return f"P{date_part}T{time_part}"
        return f"P{date_part}"

    def _check_non_negative(self):
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"Cannot format negative field {f.name}={getattr(self, f.name)}")


def to_elapsed_interval(span: Span, reference: datetime) -> timedelta:
    """
    Resolve ``span`` into an exact elapsed interval starting at ``reference``.

    Calendar fields are applied in a fixed order to a cursor: years (day
    clamped), months (day clamped), then weeks and days as whole days. The
    distance travelled by the cursor is then summed with the sub-day fields.
    Nanoseconds are truncated to whole microseconds, the resolution of
    :class:`datetime.timedelta`.

    Aware references are converted to UTC first; naive references are taken
    to be UTC already.

    :param span: The span to resolve.
    :param reference: The instant the span starts at. Never mutated.
    :return: The elapsed interval.

    Example usage::

        >>> to_elapsed_interval(Span(months=1), datetime(2024, 1, 29))
        datetime.timedelta(days=31)
    """
    if reference.tzinfo is not None:
        reference = reference.astimezone(timezone.utc)

    cursor = add_years(reference, span.years)
    cursor = add_months(cursor, span.months)
    cursor = add_days(cursor, span.weeks * 7 + span.days)

    return (cursor - reference) + timedelta(
        hours=span.hours,
        minutes=span.minutes,
        seconds=span.seconds,
        milliseconds=span.milliseconds,
        microseconds=span.microseconds + _truncated_micros(span.nanoseconds),
    )


def _truncated_micros(nanoseconds: int) -> int:
    # toward zero, also for negative values
    micros = abs(nanoseconds) // 1000
    return micros if nanoseconds >= 0 else -micros
