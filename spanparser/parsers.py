"""
Duration string parsers.

Both parsers are single pass scanners over character codes. They keep an
index into the input (plus a section flag for ISO-8601) and never backtrack,
so trailing garbage, repeated units and stray fractions are rejected exactly
where they occur instead of being silently skipped by a pattern search.

Supported formats:

ISO-8601 (case-insensitive)::

    P[(n)Y][(n)M][(n)W][(n)D][T[(n)H][(n)M][(n(.f))S]]

    P3Y6M4DT12H30M5S   3 years, 6 months, 4 days, 12:30:05
    P2W                2 weeks
    PT10.5S            10 seconds 500 milliseconds

Simple units (case-insensitive, segments in any order)::

    ns us ms s m h d

    10s, 250ms, 1h30m, 2h15m10.5s, 1d 12h
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from spanparser.errors import SpanParseError
from spanparser.span import Span

# space, tab, LF, VT, FF, CR
_WHITESPACE = frozenset((32, 9, 10, 11, 12, 13))
_ZERO = 48
_NINE = 57
_DOT = 46

_P_UPPER, _P_LOWER = ord("P"), ord("p")
_T_UPPER, _T_LOWER = ord("T"), ord("t")
_S_UPPER, _S_LOWER = ord("S"), ord("s")

_NS = 1
_US = 1000 * _NS
_MS = 1000 * _US
_S = 1000 * _MS
_M = 60 * _S
_H = 60 * _M
_D = 24 * _H

# fractional digits beyond nanosecond precision are dropped
MAX_FRACTION_DIGITS = 9
_POW10 = tuple(10 ** n for n in range(MAX_FRACTION_DIGITS + 1))


def _case_insensitive(table: Dict[str, Tuple[int, str]]) -> Dict[int, Tuple[int, str]]:
    codes = {}
    for letter, entry in table.items():
        codes[ord(letter.upper())] = entry
        codes[ord(letter.lower())] = entry
    return codes


# unit designator -> (rank, Span field); ranks enforce order and uniqueness
_DATE_UNITS = _case_insensitive({
    "Y": (0, "years"),
    "M": (1, "months"),
    "W": (2, "weeks"),
    "D": (3, "days"),
})
_TIME_UNITS = _case_insensitive({
    "H": (4, "hours"),
    "M": (5, "minutes"),
    "S": (6, "seconds"),
})


def _is_digit(code: int) -> bool:
    return _ZERO <= code <= _NINE


def _scan_number(value: str, i: int) -> Tuple[int, int, int, int]:
    """
    Scan ``digits[.digits]`` starting at ``i``.

    :return: (integer part, fraction digits as int, fraction length, next index).
        Fraction length is -1 when a decimal point has no digits after it.
    """
    length = len(value)
    number = 0
    while i < length:
        code = ord(value[i])
        if not _is_digit(code):
            break
        number = number * 10 + (code - _ZERO)
        i += 1

    fraction = 0
    fraction_len = 0
    if i < length and ord(value[i]) == _DOT:
        i += 1
        start = i
        while i < length:
            code = ord(value[i])
            if not _is_digit(code):
                break
            if fraction_len < MAX_FRACTION_DIGITS:
                fraction = fraction * 10 + (code - _ZERO)
                fraction_len += 1
            i += 1
        if i == start:
            return number, 0, -1, i

    return number, fraction, fraction_len, i


class SpanParser(ABC):
    """Base class of the duration parsers.

    Subclasses implement :meth:`_scan`, which returns either a Span or
    ``None`` together with the index where scanning stopped.
    """

    format_name = ""
    examples = ""

    def parse(self, value: str) -> Optional[Span]:
        """Parse ``value``, returning ``None`` when it is malformed."""
        span, _ = self._scan(self._check_type(value))
        return span

    def parse_or_fail(self, value: str) -> Span:
        """Parse ``value``, raising :class:`SpanParseError` when it is malformed."""
        span, offset = self._scan(self._check_type(value))
        if span is None:
            raise SpanParseError(
                f"Invalid {self.format_name} duration '{value}'. Expected formats like {self.examples}.",
                value,
                offset,
            )
        return span

    @staticmethod
    def _check_type(value):
        if not isinstance(value, str):
            raise TypeError("Input type must be str")
        return value

    @abstractmethod
    def _scan(self, value: str) -> Tuple[Optional[Span], int]:
        pass


class ISO8601SpanParser(SpanParser):
    """
    ISO-8601 duration parser.

    | Letter | Meaning                             |
    |--------|-------------------------------------|
    | P      | period start, always first          |
    | Y M W D| years, months, weeks, days          |
    | T      | start of the time section           |
    | H M S  | hours, minutes, seconds             |

    Units appear at most once and in the order above. Only seconds may carry
    a decimal fraction, which is split into milliseconds, microseconds and
    nanoseconds.
    """

    format_name = "ISO-8601"
    examples = "'P3Y6M4DT12H30M5S', 'P2W', 'PT10S', 'P1M'"

    def _scan(self, value: str) -> Tuple[Optional[Span], int]:
        length = len(value)
        if length == 0 or ord(value[0]) not in (_P_UPPER, _P_LOWER):
            return None, 0

        result = {}
        in_time = False
        last_rank = -1
        i = 1

        while i < length:
            code = ord(value[i])

            if code in (_T_UPPER, _T_LOWER):
                if in_time:
                    return None, i
                in_time = True
                i += 1
                # a number must follow T
                if i == length or not _is_digit(ord(value[i])):
                    return None, i
                continue

            if not _is_digit(code):
                return None, i

            number, fraction, fraction_len, i = _scan_number(value, i)
            if fraction_len < 0 or i >= length:
                return None, i

            units = _TIME_UNITS if in_time else _DATE_UNITS
            entry = units.get(ord(value[i]))
            if entry is None:
                return None, i
            rank, name = entry
            if rank <= last_rank:
                return None, i
            if fraction_len and name != "seconds":
                return None, i

            last_rank = rank
            result[name] = number
            if fraction_len:
                nanos = fraction * _S // _POW10[fraction_len]
                result["milliseconds"], nanos = divmod(nanos, _MS)
                result["microseconds"], result["nanoseconds"] = divmod(nanos, _US)
            i += 1

        if not result:
            return None, i

        return Span(**result), i


class SimpleUnitSpanParser(SpanParser):
    """
    Simple-unit (Go style) duration parser.

    | Unit | Meaning      |
    |------|--------------|
    | ns   | nanoseconds  |
    | us   | microseconds |
    | ms   | milliseconds |
    | s    | seconds      |
    | m    | minutes      |
    | h    | hours        |
    | d    | days         |

    Every segment is converted to nanoseconds and added to a running total,
    which is split back into days ... nanoseconds once all segments are read.
    ``"90m"`` therefore yields ``Span(hours=1, minutes=30)``. Whitespace is
    allowed between segments only.
    """

    format_name = "simple-unit"
    examples = "'10s', '5m', '1h30m', '2h15m10s'"

    _units = {
        "d": _D,
        "h": _H,
        "s": _S,
    }
    # two letter units share their first letter with a one letter unit (or none)
    _second_suffixed = {
        "m": (_MS, _M),
        "u": (_US, None),
        "n": (_NS, None),
    }

    def _scan(self, value: str) -> Tuple[Optional[Span], int]:
        length = len(value)
        total = 0
        segments = 0
        i = 0

        while i < length:
            code = ord(value[i])
            if code in _WHITESPACE:
                i += 1
                continue

            if not _is_digit(code):
                return None, i

            number, fraction, fraction_len, i = _scan_number(value, i)
            if fraction_len < 0 or i >= length:
                return None, i

            unit, i = self._scan_unit(value, i)
            if unit is None:
                return None, i

            part = number * unit
            if fraction_len:
                part += fraction * unit // _POW10[fraction_len]
            total += part
            segments += 1

        if not segments:
            return None, i

        days, rest = divmod(total, _D)
        hours, rest = divmod(rest, _H)
        minutes, rest = divmod(rest, _M)
        seconds, rest = divmod(rest, _S)
        milliseconds, rest = divmod(rest, _MS)
        microseconds, nanoseconds = divmod(rest, _US)

        return Span(
            days=days,
            hours=hours,
            minutes=minutes,
            seconds=seconds,
            milliseconds=milliseconds,
            microseconds=microseconds,
            nanoseconds=nanoseconds,
        ), i

    def _scan_unit(self, value: str, i: int) -> Tuple[Optional[int], int]:
        letter = value[i].lower()

        if letter in self._units:
            return self._units[letter], i + 1

        if letter in self._second_suffixed:
            with_s, alone = self._second_suffixed[letter]
            if i + 1 < len(value) and ord(value[i + 1]) in (_S_UPPER, _S_LOWER):
                return with_s, i + 2
            if alone is not None:
                return alone, i + 1

        return None, i


iso8601_parser = ISO8601SpanParser()
simple_unit_parser = SimpleUnitSpanParser()
