from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Iterator

from .errors import CostRequestError
from .holiday_calendar import HolidayCalendar
from .models.schedule import MINUTES_PER_DAY, TimeWindow, WeeklySchedule, minutes_of


@dataclass(frozen=True)
class DaySlice:
    day: date
    window: TimeWindow | None
    is_holiday: bool

    @property
    def hours(self) -> float:
        return self.window.hours if self.window is not None else 0.0


def walk(
    start_date: date,
    end_date: date,
    schedule: WeeklySchedule,
    calendar: HolidayCalendar,
    *,
    requested_start_time: time | None = None,
    requested_end_time: time | None = None,
) -> Iterator[DaySlice]:
    """Yield the effective operating window of every day in ``[start_date, end_date]``.

    The first day is clipped to ``requested_start_time`` and the last day to
    ``requested_end_time``; an end time of 00:00 reads as 24:00. Closed days
    yield a slice with no window.
    """
    if end_date < start_date:
        raise CostRequestError(f"end date {end_date} is before start date {start_date}")
    return _walk(start_date, end_date, schedule, calendar, requested_start_time, requested_end_time)


def _walk(
    start_date: date,
    end_date: date,
    schedule: WeeklySchedule,
    calendar: HolidayCalendar,
    requested_start_time: time | None,
    requested_end_time: time | None,
) -> Iterator[DaySlice]:
    day = start_date
    while day <= end_date:
        holiday = calendar.is_holiday(day)
        window = schedule.window_for(day, calendar, is_holiday=holiday)
        if window is not None:
            clip_start = clip_end = None
            if day == start_date and requested_start_time is not None:
                clip_start = minutes_of(requested_start_time)
            if day == end_date and requested_end_time is not None:
                clip_end = minutes_of(requested_end_time)
                # 00:00 on the last day means through midnight, unless the span starts there too
                if clip_end == 0 and clip_start != 0:
                    clip_end = MINUTES_PER_DAY
            if clip_start is not None or clip_end is not None:
                window = window.clamp(start=clip_start, end=clip_end)
        yield DaySlice(day=day, window=window, is_holiday=holiday)
        day += timedelta(days=1)


__all__ = ["DaySlice", "walk"]
