"""
Mockable time sources.

Clocks keep their time in UTC and only convert to the local zone (via
``tzlocal``) when a local view is requested. Code that needs "now" should ask
``ClockProvider.current`` so tests can swap in a :class:`FixedClock`::

    with ClockProvider.with_clock(FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))):
        spanparser.elapsed("P1M")

The parsers and :func:`spanparser.span.to_elapsed_interval` never read a
clock; only :func:`spanparser.elapsed` falls back to one.
"""

import logging
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional

from tzlocal import get_localzone

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class Clock(ABC):
    """A source of the current instant."""

    @abstractmethod
    def now_utc(self) -> datetime:
        """Current instant as an aware UTC datetime."""
        pass

    def now(self, as_utc: bool = True) -> datetime:
        utc = self.now_utc()
        return utc if as_utc else utc.astimezone(get_localzone())

    def today(self, as_utc: bool = True) -> datetime:
        """Midnight of the current UTC day."""
        utc = self.now_utc()
        midnight = datetime(utc.year, utc.month, utc.day, tzinfo=timezone.utc)
        return midnight if as_utc else midnight.astimezone(get_localzone())

    def seconds_since_epoch(self) -> int:
        return self.microseconds_since_epoch() // 1_000_000

    def milliseconds_since_epoch(self) -> int:
        return self.microseconds_since_epoch() // 1000

    def microseconds_since_epoch(self) -> int:
        return (self.now_utc() - _EPOCH) // timedelta(microseconds=1)

    def timezone_offset(self) -> timedelta:
        return self.now(as_utc=False).utcoffset()


class SystemClock(Clock):
    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Always returns the same instant."""

    def __init__(self, fixed: datetime):
        self._fixed = _as_utc(fixed)

    def now_utc(self) -> datetime:
        return self._fixed


class OffsetClock(Clock):
    """Shifts another clock (the system clock by default) by a constant offset."""

    def __init__(self, offset: timedelta, base: Optional[Clock] = None):
        self.offset = offset
        self.base = base or SystemClock()

    def now_utc(self) -> datetime:
        return self.base.now_utc() + self.offset


class AdjustableClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, initial: datetime):
        self._current = _as_utc(initial)

    def set(self, value: datetime):
        self._current = _as_utc(value)

    def advance(self, delta: timedelta):
        self._current = self._current + delta

    def now_utc(self) -> datetime:
        return self._current


class TickingClock(Clock):
    """Returns ``start`` and advances by ``tick`` after every read."""

    def __init__(self, start: datetime, tick: timedelta):
        self.tick = tick
        self._current = _as_utc(start)

    def now_utc(self) -> datetime:
        current = self._current
        self._current = current + self.tick
        return current


class StopwatchClock(Clock):
    """Wall time anchored at ``origin`` that advances with the monotonic clock."""

    def __init__(self, origin: Optional[datetime] = None):
        self._origin = _as_utc(origin) if origin is not None else datetime.now(timezone.utc)
        self._started_ns = time.monotonic_ns()

    @property
    def elapsed(self) -> timedelta:
        return timedelta(microseconds=(time.monotonic_ns() - self._started_ns) // 1000)

    def now_utc(self) -> datetime:
        return self._origin + self.elapsed


class ClockProvider:
    """Holds the process wide clock used when no instant is supplied."""

    current: Clock = SystemClock()

    @classmethod
    @contextmanager
    def with_clock(cls, clock: Clock) -> Iterator[Clock]:
        previous = cls.current
        cls.current = clock
        logger.debug(f"Clock overridden with {clock.__class__.__name__}")
        try:
            yield clock
        finally:
            cls.current = previous
            logger.debug(f"Clock restored to {previous.__class__.__name__}")
