"""JSON-based settings persistence for the swipe calendar."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Callable

from calendar_logic import CalendarError, CalendarSystem, DateInterval, Granularity

logger = logging.getLogger(__name__)

_SETTINGS_PATH = os.path.join(os.path.expanduser("~"), ".swipe-calendar-settings.json")

_DEFAULTS = {
    "show_header": True,
    "first_weekday": 0,
    "drag_threshold": 100,
    "months_before": 1,
    "months_after": 1,
    "grid_cols": None,
    "initial_month": None,
}


def load_settings(path: str | None = None) -> dict:
    """Load settings from disk, returning defaults for missing or invalid keys."""
    settings = dict(_DEFAULTS)
    path = path or _SETTINGS_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except FileNotFoundError:
        return settings
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return settings
    if not isinstance(stored, dict):
        logger.warning("Ignoring settings file %s: top level is not an object", path)
        return settings

    if isinstance(stored.get("show_header"), bool):
        settings["show_header"] = stored["show_header"]
    if _is_int(stored.get("first_weekday")) and 0 <= stored["first_weekday"] <= 6:
        settings["first_weekday"] = stored["first_weekday"]
    threshold = stored.get("drag_threshold")
    if (_is_int(threshold) or isinstance(threshold, float)) and threshold > 0:
        settings["drag_threshold"] = threshold
    for key in ("months_before", "months_after"):
        if _is_int(stored.get(key)) and 0 <= stored[key] <= 6:
            settings[key] = stored[key]
    if _is_int(stored.get("grid_cols")) and stored["grid_cols"] > 0:
        settings["grid_cols"] = stored["grid_cols"]
    if isinstance(stored.get("initial_month"), str):
        try:
            datetime.strptime(stored["initial_month"], "%Y-%m")
        except ValueError:
            logger.warning("Ignoring initial_month %r, expected YYYY-MM",
                           stored["initial_month"])
        else:
            settings["initial_month"] = stored["initial_month"]
    return settings


def save_settings(settings: dict, path: str | None = None) -> None:
    """Persist settings to disk."""
    with open(path or _SETTINGS_PATH, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ------------------------------------------------------------------
# Derived values
# ------------------------------------------------------------------
def initial_month_from(settings: dict,
                       clock: Callable[[], datetime] = datetime.now) -> datetime:
    """Return the configured initial month, or now when unset."""
    if settings.get("initial_month"):
        return datetime.strptime(settings["initial_month"], "%Y-%m")
    return clock()


def interval_from(settings: dict, calendar: CalendarSystem,
                  clock: Callable[[], datetime] = datetime.now) -> DateInterval:
    """Return the span of months shown around the initial month.

    An initial month whose span leaves the representable date range falls
    back to the month of now.
    """
    try:
        return _months_around(initial_month_from(settings, clock), settings, calendar)
    except CalendarError as e:
        logger.warning("Ignoring initial_month %r: %s", settings.get("initial_month"), e)
    return _months_around(clock(), settings, calendar)


def _months_around(month: datetime, settings: dict, calendar: CalendarSystem) -> DateInterval:
    centre = calendar.containing_interval(Granularity.MONTH, month).start
    start = calendar.add_months(centre, -settings["months_before"])
    end = calendar.add_months(centre, settings["months_after"] + 1)
    return DateInterval(start, end)
