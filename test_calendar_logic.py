"""Unit tests for the calendar system and date sequence generation."""

import calendar
from datetime import datetime

import pytest

from calendar_logic import (
    ConfigurationError,
    DateInterval,
    DateOverflowError,
    GregorianCalendar,
    Granularity,
    RecurrencePattern,
    generate_dates,
)


@pytest.fixture
def sunday_cal():
    return GregorianCalendar(calendar.SUNDAY)


@pytest.fixture
def monday_cal():
    return GregorianCalendar()


class TestDateInterval:
    def test_rejects_start_after_end(self):
        with pytest.raises(ValueError):
            DateInterval(datetime(2024, 3, 2), datetime(2024, 3, 1))

    def test_is_half_open(self):
        iv = DateInterval(datetime(2024, 3, 1), datetime(2024, 4, 1))
        assert iv.contains(datetime(2024, 3, 1))
        assert iv.contains(datetime(2024, 3, 31, 23, 59, 59))
        assert not iv.contains(datetime(2024, 4, 1))


class TestRecurrencePattern:
    @pytest.mark.parametrize("field, value", [
        ("month", 13), ("day", 0), ("weekday", 7), ("hour", 24), ("second", 60),
    ])
    def test_out_of_range_field(self, field, value):
        with pytest.raises(ConfigurationError):
            RecurrencePattern(**{field: value})

    def test_earliest_time_is_strictly_after_floor(self):
        pattern = RecurrencePattern.midnight()
        assert pattern.earliest_time() is not None
        assert pattern.earliest_time(datetime(2024, 1, 1).time()) is None


class TestGregorianCalendar:
    def test_rejects_bad_first_weekday(self):
        with pytest.raises(ConfigurationError):
            GregorianCalendar(7)

    def test_week_interval_sunday_first(self, sunday_cal):
        iv = sunday_cal.containing_interval(Granularity.WEEK, datetime(2024, 3, 1, 12, 30))
        assert iv == DateInterval(datetime(2024, 2, 25), datetime(2024, 3, 3))

    def test_week_interval_monday_first(self, monday_cal):
        iv = monday_cal.containing_interval(Granularity.WEEK, datetime(2024, 3, 1, 12, 30))
        assert iv == DateInterval(datetime(2024, 2, 26), datetime(2024, 3, 4))

    def test_month_interval_leap_february(self, monday_cal):
        iv = monday_cal.containing_interval(Granularity.MONTH, datetime(2024, 2, 17))
        assert iv == DateInterval(datetime(2024, 2, 1), datetime(2024, 3, 1))

    def test_month_interval_december(self, monday_cal):
        iv = monday_cal.containing_interval("month", datetime(2024, 12, 31, 23))
        assert iv == DateInterval(datetime(2024, 12, 1), datetime(2025, 1, 1))

    def test_year_and_day_intervals(self, monday_cal):
        moment = datetime(2024, 7, 4, 18)
        assert monday_cal.containing_interval(Granularity.YEAR, moment) == DateInterval(
            datetime(2024, 1, 1), datetime(2025, 1, 1))
        assert monday_cal.containing_interval(Granularity.DAY, moment) == DateInterval(
            datetime(2024, 7, 4), datetime(2024, 7, 5))

    def test_unknown_granularity(self, monday_cal):
        with pytest.raises(ConfigurationError):
            monday_cal.containing_interval("fortnight", datetime(2024, 3, 1))

    def test_month_interval_at_end_of_range(self, monday_cal):
        with pytest.raises(DateOverflowError):
            monday_cal.containing_interval(Granularity.MONTH, datetime(9999, 12, 5))

    def test_next_midnight(self, monday_cal):
        nxt = monday_cal.next_matching_instant(datetime(2024, 3, 1), RecurrencePattern.midnight())
        assert nxt == datetime(2024, 3, 2)

    def test_next_later_same_day(self, monday_cal):
        pattern = RecurrencePattern(hour=12, minute=0, second=0)
        nxt = monday_cal.next_matching_instant(datetime(2024, 3, 1, 10, 15), pattern)
        assert nxt == datetime(2024, 3, 1, 12)

    def test_next_skips_short_months(self, monday_cal):
        pattern = RecurrencePattern(day=31, hour=0, minute=0, second=0)
        nxt = monday_cal.next_matching_instant(datetime(2024, 4, 1), pattern)
        assert nxt == datetime(2024, 5, 31)

    def test_next_leap_day(self, monday_cal):
        pattern = RecurrencePattern(month=2, day=29, hour=0, minute=0, second=0)
        nxt = monday_cal.next_matching_instant(datetime(2024, 3, 1), pattern)
        assert nxt == datetime(2028, 2, 29)

    def test_next_never_matches(self, monday_cal):
        pattern = RecurrencePattern(month=2, day=30)
        assert monday_cal.next_matching_instant(datetime(2024, 1, 1), pattern) is None

    def test_next_weekday(self, sunday_cal):
        pattern = RecurrencePattern.week_start(calendar.SUNDAY)
        nxt = sunday_cal.next_matching_instant(datetime(2024, 3, 1), pattern)
        assert nxt == datetime(2024, 3, 3)

    def test_add_months_clamps_day(self, monday_cal):
        assert monday_cal.add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)

    def test_add_months_crosses_years(self, monday_cal):
        assert monday_cal.add_months(datetime(2024, 12, 1), 1) == datetime(2025, 1, 1)
        assert monday_cal.add_months(datetime(2024, 1, 1), -1) == datetime(2023, 12, 1)
        assert monday_cal.add_months(datetime(2024, 3, 1), -27) == datetime(2021, 12, 1)

    def test_add_months_overflow(self, monday_cal):
        with pytest.raises(DateOverflowError):
            monday_cal.add_months(datetime(9999, 12, 1), 1)
        with pytest.raises(DateOverflowError):
            monday_cal.add_months(datetime(1, 1, 1), -1)

    def test_add_days_overflow(self, monday_cal):
        assert monday_cal.add_days(datetime(2024, 2, 28), 2) == datetime(2024, 3, 1)
        with pytest.raises(DateOverflowError):
            monday_cal.add_days(datetime(9999, 12, 31), 1)

    def test_date_components(self, monday_cal):
        moment = datetime(2024, 3, 1, 8, 30)
        assert monday_cal.date_component("weekday", moment) == calendar.FRIDAY
        assert monday_cal.date_component("month", moment) == 3
        assert monday_cal.date_component("minute", moment) == 30
        with pytest.raises(ConfigurationError):
            monday_cal.date_component("era", moment)

    def test_is_same_month(self, monday_cal):
        assert monday_cal.is_same(datetime(2024, 3, 1), datetime(2024, 3, 31, 23),
                                  Granularity.MONTH)
        assert not monday_cal.is_same(datetime(2024, 3, 1), datetime(2023, 3, 1),
                                      Granularity.MONTH)


class _StuckCalendar(GregorianCalendar):
    """Calendar whose stepping never moves past its input."""

    def next_matching_instant(self, after, pattern):
        return after


class TestGenerateDates:
    def test_start_comes_first_even_when_not_matching(self, monday_cal):
        iv = DateInterval(datetime(2024, 3, 1, 10), datetime(2024, 3, 4))
        dates = list(generate_dates(iv, RecurrencePattern.midnight(), monday_cal))
        assert dates == [datetime(2024, 3, 1, 10), datetime(2024, 3, 2), datetime(2024, 3, 3)]

    def test_end_is_excluded(self, monday_cal):
        iv = DateInterval(datetime(2024, 3, 1), datetime(2024, 3, 3))
        dates = list(generate_dates(iv, RecurrencePattern.midnight(), monday_cal))
        assert dates == [datetime(2024, 3, 1), datetime(2024, 3, 2)]

    def test_empty_interval_yields_start_only(self, monday_cal):
        moment = datetime(2024, 3, 1, 7)
        iv = DateInterval(moment, moment)
        assert list(generate_dates(iv, RecurrencePattern.midnight(), monday_cal)) == [moment]

    def test_restartable(self, monday_cal):
        iv = DateInterval(datetime(2024, 1, 1), datetime(2025, 1, 1))
        seq = generate_dates(iv, RecurrencePattern.month_start(), monday_cal)
        assert list(seq) == list(seq)

    def test_months_of_a_partial_year(self, monday_cal):
        iv = DateInterval(datetime(2024, 1, 15), datetime(2025, 1, 1))
        dates = list(generate_dates(iv, RecurrencePattern.month_start(), monday_cal))
        assert dates[0] == datetime(2024, 1, 15)
        assert dates[1:] == [datetime(2024, m, 1) for m in range(2, 13)]

    def test_calendar_that_does_not_advance(self):
        iv = DateInterval(datetime(2024, 3, 1), datetime(2024, 4, 1))
        seq = iter(generate_dates(iv, RecurrencePattern.midnight(), _StuckCalendar()))
        assert next(seq) == datetime(2024, 3, 1)
        with pytest.raises(ConfigurationError):
            next(seq)

    def test_elements_increase_and_stay_inside(self, sunday_cal):
        iv = DateInterval(datetime(2023, 11, 20, 5), datetime(2024, 2, 10))
        dates = list(generate_dates(iv, RecurrencePattern.week_start(calendar.SUNDAY),
                                    sunday_cal))
        assert all(iv.start <= d < iv.end for d in dates)
        assert all(a < b for a, b in zip(dates, dates[1:]))
        assert all(d.weekday() == calendar.SUNDAY for d in dates[1:])
