"""Month navigation state machine: buttons, today and swipe paging."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from calendar_logic import (
    CalendarSystem,
    ConfigurationError,
    DateInterval,
    Granularity,
)
from month_grid import months_between

logger = logging.getLogger(__name__)

DEFAULT_DRAG_THRESHOLD = 100.0

MonthChangeCallback = Callable[[datetime], None]


@dataclass
class DragDelta:
    """Cumulative translation of a drag gesture since it started."""

    horizontal: float = 0.0
    vertical: float = 0.0


@dataclass
class NavigatorState:
    """Displayed month plus the in-flight drag offset."""

    month: datetime
    drag_offset: DragDelta = field(default_factory=DragDelta)


class CalendarNavigator:
    """Owns the displayed month of one month panel.

    All transitions are synchronous. A failed transition raises and leaves
    the state untouched; a committed one notifies the subscriber before
    returning.
    """

    def __init__(
        self,
        calendar: CalendarSystem,
        month: datetime | None = None,
        *,
        state: NavigatorState | None = None,
        threshold: float = DEFAULT_DRAG_THRESHOLD,
        on_month_change: MonthChangeCallback | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if isinstance(threshold, bool) or not threshold > 0:
            raise ConfigurationError(f"drag threshold must be positive, got {threshold!r}")
        self.calendar = calendar
        self.threshold = threshold
        self._clock = clock
        self._on_month_change = on_month_change

        if state is None:
            state = NavigatorState(month if month is not None else clock())
        elif month is not None:
            state.month = month
        state.month = self._month_start(state.month)
        self.state = state

    @property
    def month(self) -> datetime:
        return self.state.month

    def subscribe(self, callback: MonthChangeCallback | None) -> None:
        """Replace the month-changed subscriber (``None`` removes it)."""
        self._on_month_change = callback

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def previous(self) -> datetime:
        return self.shift(-1)

    def next(self) -> datetime:
        return self.shift(1)

    def previous_year(self) -> datetime:
        return self.shift(-12)

    def next_year(self) -> datetime:
        return self.shift(12)

    def shift(self, months: int) -> datetime:
        """Move the displayed month by *months* and notify."""
        new_month = self.calendar.add_months(self.state.month, months)
        self.state.month = self._month_start(new_month)
        self.state.drag_offset = DragDelta()
        logger.debug("Navigated %+d month(s) to %s", months, f"{self.state.month:%Y-%m}")
        self._notify(self.state.month)
        return self.state.month

    def today(self) -> datetime:
        """Jump to the month containing now; always notifies."""
        now = self._clock()
        self.state.month = self._month_start(now)
        self.state.drag_offset = DragDelta()
        logger.debug("Jumped to today (%s)", f"{now:%Y-%m-%d}")
        self._notify(now)
        return self.state.month

    # ------------------------------------------------------------------
    # Drag gesture inputs
    # ------------------------------------------------------------------
    def on_drag_changed(self, delta: DragDelta) -> None:
        self.state.drag_offset = delta

    def on_drag_ended(self, delta: DragDelta | None = None) -> int:
        """Finish a drag; return -1 (previous), +1 (next) or 0 (no change).

        Dragging right past the threshold pages back, dragging left pages
        forward. The recorded offset is cleared whatever the outcome.
        """
        if delta is None:
            delta = self.state.drag_offset
        self.state.drag_offset = DragDelta()

        if delta.horizontal > self.threshold:
            self.previous()
            return -1
        if delta.horizontal < -self.threshold:
            self.next()
            return 1
        logger.debug("Drag of %.1f below threshold %.1f, ignored",
                     delta.horizontal, self.threshold)
        return 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _month_start(self, moment: datetime) -> datetime:
        return self.calendar.containing_interval(Granularity.MONTH, moment).start

    def _notify(self, month: datetime) -> None:
        if self._on_month_change is not None:
            self._on_month_change(month)


class MultiMonthNavigator:
    """One navigator per month of an overall interval.

    Every navigator reports to the single subscriber given at construction.
    """

    def __init__(
        self,
        interval: DateInterval,
        calendar: CalendarSystem,
        *,
        threshold: float = DEFAULT_DRAG_THRESHOLD,
        on_month_change: MonthChangeCallback | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.interval = interval
        self.calendar = calendar
        self._on_month_change = on_month_change
        self.navigators: list[CalendarNavigator] = [
            CalendarNavigator(
                calendar, month,
                threshold=threshold, on_month_change=self._bubble, clock=clock,
            )
            for month in months_between(interval, calendar)
        ]

    def __iter__(self):
        return iter(self.navigators)

    def __len__(self) -> int:
        return len(self.navigators)

    def __getitem__(self, index: int) -> CalendarNavigator:
        return self.navigators[index]

    @property
    def months(self) -> list[datetime]:
        return [nav.month for nav in self.navigators]

    def today(self) -> None:
        for nav in self.navigators:
            nav.today()

    def _bubble(self, month: datetime) -> None:
        if self._on_month_change is not None:
            self._on_month_change(month)
