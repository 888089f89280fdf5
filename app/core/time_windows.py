"""
Opening-hours and time-range evaluation.

All comparisons are done on zero-padded ``HH:MM`` strings in the restaurant's
local timezone. Lexical order on such strings is numeric order, so a window
``[start, end]`` is inclusive on both ends. A window whose end sorts before its
start spans midnight.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from app.core.config import settings
from app.core.enums import Weekday

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
WEEKDAYS: tuple[Weekday, ...] = tuple(Weekday)

RESTAURANT_CLOSED = "Restaurant is closed"
PRODUCT_UNAVAILABLE = "Product is currently unavailable"
OUTSIDE_TIME_GROUPS = "Product not available at this time"


def is_valid_time(value: str) -> bool:
    return bool(TIME_PATTERN.match(value))


class DayWindow(BaseModel):
    is_open: bool = False
    open_time: Optional[str] = None
    close_time: Optional[str] = None

    @field_validator("open_time", "close_time", mode="before")
    @classmethod
    def _validate_time(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        if not isinstance(value, str) or not is_valid_time(value):
            raise ValueError(f"expected HH:MM, got {value!r}")
        return value

    @property
    def has_times(self) -> bool:
        return self.open_time is not None and self.close_time is not None


class WeeklySchedule(BaseModel):
    """Weekday -> window. A weekday without an entry is closed."""

    days: dict[Weekday, DayWindow] = Field(default_factory=dict)

    @classmethod
    def from_opening_hours(cls, raw: Optional[dict[str, Any]]) -> "WeeklySchedule":
        if not raw:
            return cls()
        days = {
            Weekday(str(day).lower()): DayWindow.model_validate(window)
            for day, window in raw.items()
        }
        return cls(days=days)

    def window_for(self, day: Weekday) -> Optional[DayWindow]:
        return self.days.get(day)

    def to_opening_hours(self) -> dict[str, dict[str, Any]]:
        return {
            day.value: window.model_dump() for day, window in self.days.items()
        }


class TimeRangeWindow(Protocol):
    start_time: str
    end_time: str
    is_active: bool


@dataclass(frozen=True)
class ProductAvailability:
    is_available: bool
    reason: Optional[str] = None
    next_available: Optional[str] = None


def resolve_timezone(name: Optional[str]) -> ZoneInfo:
    """Return the ZoneInfo for ``name``, falling back to the default timezone."""
    try:
        return ZoneInfo(name or settings.default_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            "Unknown timezone %s, using %s",
            name,
            settings.default_timezone,
            extra={"timezone": name},
        )
        return ZoneInfo(settings.default_timezone)


def to_local(instant: datetime, tz_name: Optional[str]) -> datetime:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(resolve_timezone(tz_name))


def local_day_and_time(instant: datetime, tz_name: Optional[str]) -> tuple[Weekday, str]:
    local = to_local(instant, tz_name)
    return WEEKDAYS[local.weekday()], local.strftime("%H:%M")


def is_time_in_range(check_time: str, start_time: str, end_time: str) -> bool:
    if end_time < start_time:
        return check_time >= start_time or check_time <= end_time
    return start_time <= check_time <= end_time


def is_open_at(
    schedule: WeeklySchedule,
    tz_name: Optional[str],
    instant: datetime,
    manual_is_open: bool = False,
) -> bool:
    """Whether the schedule says the restaurant is open at ``instant``.

    A day present with ``is_open`` but without both times falls back to the
    manually set flag.
    """
    day, time_str = local_day_and_time(instant, tz_name)
    window = schedule.window_for(day)
    if window is None or not window.is_open:
        return False
    if not window.has_times:
        return manual_is_open
    return is_time_in_range(time_str, window.open_time, window.close_time)


def is_product_available_at(
    groups: Iterable[TimeRangeWindow],
    restaurant_open: bool,
    instant: datetime,
    tz_name: Optional[str] = None,
    product_available: bool = True,
) -> ProductAvailability:
    if not restaurant_open:
        return ProductAvailability(False, RESTAURANT_CLOSED)
    if not product_available:
        return ProductAvailability(False, PRODUCT_UNAVAILABLE)

    groups = list(groups)
    if not groups:
        return ProductAvailability(True)

    _, time_str = local_day_and_time(instant, tz_name)
    for group in groups:
        if group.is_active and is_time_in_range(
            time_str, group.start_time, group.end_time
        ):
            return ProductAvailability(True)

    # First active group, not the chronologically nearest one.
    next_start = next((g.start_time for g in groups if g.is_active), None)
    return ProductAvailability(False, OUTSIDE_TIME_GROUPS, next_start)


def find_next_open_time(
    schedule: WeeklySchedule, tz_name: Optional[str], instant: datetime
) -> Optional[datetime]:
    """First window opening strictly after ``instant`` within the next week."""
    local = to_local(instant, tz_name)
    for offset in range(7):
        candidate_date = (local + timedelta(days=offset)).date()
        window = schedule.window_for(WEEKDAYS[candidate_date.weekday()])
        if window is None or not window.is_open or window.open_time is None:
            continue
        hour, minute = (int(part) for part in window.open_time.split(":"))
        opens_at = datetime(
            candidate_date.year,
            candidate_date.month,
            candidate_date.day,
            hour,
            minute,
            tzinfo=local.tzinfo,
        )
        if opens_at > local:
            return opens_at
    return None


def restaurant_should_be_open(restaurant: Any, instant: datetime) -> bool:
    """Open flag the restaurant should carry at ``instant``.

    Restaurants not managed automatically keep their manual flag.
    """
    if not restaurant.auto_open_close:
        return restaurant.is_open
    schedule = WeeklySchedule.from_opening_hours(restaurant.opening_hours)
    return is_open_at(schedule, restaurant.timezone, instant, restaurant.is_open)
