__version__ = "0.1.0"

import logging
from datetime import datetime, timedelta
from typing import Optional

from .conf import apply_settings, Settings, SettingValidationError
from .errors import SpanParseError
from .span import Span, to_elapsed_interval
from .parsers import (
    SpanParser,
    ISO8601SpanParser,
    SimpleUnitSpanParser,
    iso8601_parser,
    simple_unit_parser,
)
from .clock import (
    Clock,
    SystemClock,
    FixedClock,
    OffsetClock,
    AdjustableClock,
    TickingClock,
    StopwatchClock,
    ClockProvider,
)

logger = logging.getLogger(__name__)

_PERIOD_DESIGNATORS = ("P", "p")


def _select_parser(value: str, settings) -> SpanParser:
    if settings.PARSER_FORMAT == "iso8601":
        return iso8601_parser
    if settings.PARSER_FORMAT == "simple":
        return simple_unit_parser
    if value.startswith(_PERIOD_DESIGNATORS):
        return iso8601_parser
    return simple_unit_parser


@apply_settings
def parse(value: str, settings=None) -> Optional[Span]:
    """Parse a duration string into a :class:`Span`.

    :param value:
        An ISO-8601 duration (``"P3Y6M4DT12H30M5S"``) or a simple-unit
        duration (``"1h30m"``). Surrounding whitespace is ignored.
    :type value: str

    :param settings:
        Configure customized behavior using settings defined in :mod:`spanparser.conf.Settings`.
    :type settings: dict

    :return: Returns a :class:`Span` if parsing is successful, else returns None.
    :rtype: Span or None

    :raises:
        ``TypeError``: input is not a string,
        ``SettingValidationError``: A provided setting is not valid.

    Example usage::

        >>> import spanparser
        >>> spanparser.parse("P2W")
        Span(years=0, months=0, weeks=2, days=0, hours=0, minutes=0, seconds=0, milliseconds=0, microseconds=0, nanoseconds=0)
        >>> spanparser.parse("2 weeks") is None
        True
    """
    if not isinstance(value, str):
        raise TypeError("Input type must be str")
    trimmed = value.strip()
    span = _select_parser(trimmed, settings).parse(trimmed)
    if span is None:
        logger.debug(f"Rejected duration {value!r}")
    return span


@apply_settings
def parse_or_fail(value: str, settings=None) -> Span:
    """Same as :func:`parse` but raises :class:`SpanParseError` instead of returning None."""
    if not isinstance(value, str):
        raise TypeError("Input type must be str")
    trimmed = value.strip()
    try:
        return _select_parser(trimmed, settings).parse_or_fail(trimmed)
    except SpanParseError as e:
        logger.debug(f"Rejected duration {value!r}: {e.message}")
        # report against the caller's string, not the trimmed one
        offset = e.offset
        if offset is not None:
            offset += len(value) - len(value.lstrip())
        raise SpanParseError(e.message, value, offset) from None


@apply_settings
def elapsed(value, reference: Optional[datetime] = None, settings=None) -> timedelta:
    """Parse ``value`` (a string or a Span) and resolve it against a reference instant.

    The reference defaults to ``settings.RELATIVE_BASE`` and then to
    ``ClockProvider.current``.

    Example usage::

        >>> from datetime import datetime
        >>> spanparser.elapsed("P1M", datetime(2023, 1, 29))
        datetime.timedelta(days=30)
    """
    span = value if isinstance(value, Span) else parse_or_fail(value, settings=settings)
    if reference is None:
        reference = settings.RELATIVE_BASE
    if reference is None:
        reference = ClockProvider.current.now_utc()
    return to_elapsed_interval(span, reference)


__all__ = [
    "parse",
    "parse_or_fail",
    "elapsed",
    "to_elapsed_interval",
    "Span",
    "SpanParseError",
    "SpanParser",
    "ISO8601SpanParser",
    "SimpleUnitSpanParser",
    "Settings",
    "SettingValidationError",
    "Clock",
    "SystemClock",
    "FixedClock",
    "OffsetClock",
    "AdjustableClock",
    "TickingClock",
    "StopwatchClock",
    "ClockProvider",
]
