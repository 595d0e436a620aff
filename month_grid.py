"""Week/day layout of a displayed month, built from date sequences."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from calendar_logic import (
    DAY_ABBR,
    CalendarSystem,
    ConfigurationError,
    DateInterval,
    Granularity,
    RecurrencePattern,
    generate_dates,
)


@dataclass(frozen=True)
class DayCell:
    """One grid cell. Filler days from adjacent months have ``in_month`` False."""

    date: datetime
    in_month: bool

    @property
    def day(self) -> int:
        return self.date.day


@dataclass(frozen=True)
class Week:
    """Seven consecutive days starting at the calendar's first weekday."""

    days: tuple[DayCell, ...]

    @property
    def start(self) -> datetime:
        return self.days[0].date

    @property
    def iso_week(self) -> int:
        """ISO week number, read from the Monday inside the row."""
        monday = next(c.date for c in self.days if c.date.weekday() == 0)
        return monday.isocalendar()[1]

    def __iter__(self):
        return iter(self.days)

    def __len__(self) -> int:
        return len(self.days)


def weeks_for(month: datetime, calendar: CalendarSystem) -> list[Week]:
    """Return every week overlapping the month containing *month*.

    Leading and trailing days from the neighbouring months are kept so that
    each week is full; they are flagged with ``in_month=False``.
    """
    month_interval = calendar.containing_interval(Granularity.MONTH, month)
    week_starts = generate_dates(
        month_interval, RecurrencePattern.week_start(calendar.first_weekday), calendar,
    )

    weeks: list[Week] = []
    for week_start in week_starts:
        week_interval = calendar.containing_interval(Granularity.WEEK, week_start)
        days = tuple(
            DayCell(d, calendar.is_same(month, d, Granularity.MONTH))
            for d in generate_dates(week_interval, RecurrencePattern.midnight(), calendar)
        )
        if len(days) != 7:
            raise ConfigurationError(
                f"week of {week_start:%Y-%m-%d} resolved to {len(days)} days")
        if calendar.date_component("weekday", days[0].date) != calendar.first_weekday:
            raise ConfigurationError(
                f"week of {week_start:%Y-%m-%d} does not start on weekday "
                f"{calendar.first_weekday}")
        for prev, cur in zip(days, days[1:]):
            if cur.date != calendar.add_days(prev.date, 1):
                raise ConfigurationError(
                    f"week of {week_start:%Y-%m-%d} skips from {prev.date:%Y-%m-%d} "
                    f"to {cur.date:%Y-%m-%d}")
        weeks.append(Week(days))
    return weeks


def months_between(interval: DateInterval, calendar: CalendarSystem) -> list[datetime]:
    """Return the first instant of every month the interval touches."""
    return list(generate_dates(interval, RecurrencePattern.month_start(), calendar))


def weekday_labels(calendar: CalendarSystem) -> list[str]:
    """Return the weekday abbreviations in grid column order."""
    first = calendar.first_weekday
    return DAY_ABBR[first:] + DAY_ABBR[:first]
