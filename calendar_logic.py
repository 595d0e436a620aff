"""Pure calendar calculations — no UI dependencies."""

from __future__ import annotations

import calendar as _cal
import logging
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, datetime, time, timedelta
from enum import Enum
from typing import Iterator, Protocol

logger = logging.getLogger(__name__)

DAY_ABBR = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# Long enough for Feb 29 to recur across a skipped century leap year
_SEARCH_DAYS = 366 * 8 + 1


class CalendarError(Exception):
    """Base exception for calendar computation errors."""


class ConfigurationError(CalendarError):
    """The calendar system cannot resolve what was asked of it.

    Raised when:
    - an unknown granularity or date component is requested
    - the first weekday or a recurrence field is out of range
    - a week does not resolve to seven consecutive days
    - the calendar steps a date sequence backwards
    """


class DateOverflowError(CalendarError):
    """Date arithmetic left the representable date range."""


class Granularity(str, Enum):
    """Units an interval can be resolved at."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class DateInterval:
    """Half-open range [start, end) of instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"interval start {self.start} is after end {self.end}")

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


_FIELD_RANGES = {
    "month": (1, 12),
    "day": (1, 31),
    "weekday": (0, 6),
    "hour": (0, 23),
    "minute": (0, 59),
    "second": (0, 59),
}


@dataclass(frozen=True)
class RecurrencePattern:
    """Partial set of date components; unset fields match anything.

    ``weekday`` follows the :mod:`calendar` convention (0 = Monday).
    """

    month: int | None = None
    day: int | None = None
    weekday: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None

    def __post_init__(self) -> None:
        for name, (lo, hi) in _FIELD_RANGES.items():
            value = getattr(self, name)
            if value is not None and not lo <= value <= hi:
                raise ConfigurationError(f"{name}={value} outside {lo}..{hi}")

    @classmethod
    def midnight(cls) -> RecurrencePattern:
        return cls(hour=0, minute=0, second=0)

    @classmethod
    def week_start(cls, first_weekday: int) -> RecurrencePattern:
        return cls(weekday=first_weekday, hour=0, minute=0, second=0)

    @classmethod
    def month_start(cls) -> RecurrencePattern:
        return cls(day=1, hour=0, minute=0, second=0)

    def matches_day(self, d: date) -> bool:
        return ((self.month is None or d.month == self.month)
                and (self.day is None or d.day == self.day)
                and (self.weekday is None or d.weekday() == self.weekday))

    def earliest_time(self, floor: time | None = None) -> time | None:
        """Return the first matching time of day strictly after *floor*."""
        for h in _values(self.hour, 24):
            if floor is not None and h < floor.hour:
                continue
            for m in _values(self.minute, 60):
                if floor is not None and h == floor.hour and m < floor.minute:
                    continue
                for s in _values(self.second, 60):
                    t = time(h, m, s)
                    if floor is None or t > floor:
                        return t
        return None


def _values(fixed: int | None, count: int) -> range:
    return range(fixed, fixed + 1) if fixed is not None else range(count)


class CalendarSystem(Protocol):
    """Capabilities the grid and navigator need from a calendar."""

    @property
    def first_weekday(self) -> int: ...

    def containing_interval(self, granularity: Granularity, moment: datetime) -> DateInterval: ...

    def next_matching_instant(self, after: datetime,
                              pattern: RecurrencePattern) -> datetime | None: ...

    def add_months(self, moment: datetime, delta: int) -> datetime: ...

    def add_days(self, moment: datetime, delta: int) -> datetime: ...

    def date_component(self, unit: str, moment: datetime) -> int: ...

    def is_same(self, a: datetime, b: datetime, granularity: Granularity) -> bool: ...


class GregorianCalendar:
    """Proleptic Gregorian calendar over naive datetimes."""

    def __init__(self, first_weekday: int = _cal.MONDAY) -> None:
        if not isinstance(first_weekday, int) or not 0 <= first_weekday <= 6:
            raise ConfigurationError(f"first weekday must be 0..6, got {first_weekday!r}")
        self._first_weekday = first_weekday

    def __repr__(self) -> str:
        return f"GregorianCalendar(first_weekday={self._first_weekday})"

    @property
    def first_weekday(self) -> int:
        return self._first_weekday

    # ------------------------------------------------------------------
    # Intervals
    # ------------------------------------------------------------------
    def containing_interval(self, granularity: Granularity, moment: datetime) -> DateInterval:
        try:
            granularity = Granularity(granularity)
        except ValueError:
            raise ConfigurationError(f"unknown granularity {granularity!r}") from None

        day = moment.date()
        try:
            if granularity is Granularity.DAY:
                start = day
                end = day + timedelta(days=1)
            elif granularity is Granularity.WEEK:
                start = day - timedelta(days=(day.weekday() - self._first_weekday) % 7)
                end = start + timedelta(days=7)
            elif granularity is Granularity.MONTH:
                start = day.replace(day=1)
                end = _first_of_next_month(start)
            else:
                start = day.replace(month=1, day=1)
                end = start.replace(year=start.year + 1)
        except (OverflowError, ValueError):
            raise DateOverflowError(
                f"{granularity.value} containing {moment} is out of range") from None
        return DateInterval(_midnight(start), _midnight(end))

    # ------------------------------------------------------------------
    # Recurrence stepping
    # ------------------------------------------------------------------
    def next_matching_instant(self, after: datetime,
                              pattern: RecurrencePattern) -> datetime | None:
        day = after.date()
        floor: time | None = after.time()
        for _ in range(_SEARCH_DAYS):
            if pattern.matches_day(day):
                t = pattern.earliest_time(floor)
                if t is not None:
                    return datetime.combine(day, t)
            floor = None
            if day == date.max:
                return None
            day += timedelta(days=1)
        logger.debug("No match for %s within %d days of %s", pattern, _SEARCH_DAYS, after)
        return None

    # ------------------------------------------------------------------
    # Arithmetic and components
    # ------------------------------------------------------------------
    def add_months(self, moment: datetime, delta: int) -> datetime:
        """Shift by *delta* months, clamping the day to the target month."""
        index = moment.year * 12 + (moment.month - 1) + delta
        year, month0 = divmod(index, 12)
        if not MINYEAR <= year <= MAXYEAR:
            raise DateOverflowError(f"{moment:%Y-%m} {delta:+d} months is out of range")
        month = month0 + 1
        day = min(moment.day, _cal.monthrange(year, month)[1])
        return moment.replace(year=year, month=month, day=day)

    def add_days(self, moment: datetime, delta: int) -> datetime:
        try:
            return moment + timedelta(days=delta)
        except OverflowError:
            raise DateOverflowError(f"{moment:%Y-%m-%d} {delta:+d} days is out of range") from None

    def date_component(self, unit: str, moment: datetime) -> int:
        if unit == "weekday":
            return moment.weekday()
        if unit in ("year", "month", "day", "hour", "minute", "second"):
            return getattr(moment, unit)
        raise ConfigurationError(f"unknown date component {unit!r}")

    def is_same(self, a: datetime, b: datetime, granularity: Granularity) -> bool:
        """Return True if *a* and *b* fall in the same *granularity* unit."""
        return self.containing_interval(granularity, a).contains(b)


def _midnight(d: date) -> datetime:
    return datetime.combine(d, time())


def _first_of_next_month(d: date) -> date:
    if d.month == 12:
        return date(d.year + 1, 1, 1)
    return date(d.year, d.month + 1, 1)


# ----------------------------------------------------------------------
# Date sequences
# ----------------------------------------------------------------------
class DateSequence:
    """Lazy, restartable enumeration of the instants matching a pattern.

    The interval start always comes first, whether it matches or not.
    Later elements are every matching instant strictly before the end.
    """

    __slots__ = ("interval", "pattern", "calendar")

    def __init__(self, interval: DateInterval, pattern: RecurrencePattern,
                 calendar: CalendarSystem) -> None:
        self.interval = interval
        self.pattern = pattern
        self.calendar = calendar

    def __iter__(self) -> Iterator[datetime]:
        current = self.interval.start
        yield current
        while True:
            candidate = self.calendar.next_matching_instant(current, self.pattern)
            if candidate is None or candidate >= self.interval.end:
                return
            if candidate <= current:
                raise ConfigurationError(
                    f"calendar stepped from {current} back to {candidate} for {self.pattern}")
            yield candidate
            current = candidate

    def __repr__(self) -> str:
        return f"DateSequence({self.interval!r}, {self.pattern!r})"


def generate_dates(interval: DateInterval, pattern: RecurrencePattern,
                   calendar: CalendarSystem) -> DateSequence:
    """Return the instants of *interval* matching *pattern*, start first."""
    return DateSequence(interval, pattern, calendar)
