from __future__ import annotations

from datetime import date, time
from enum import Enum
from typing import TYPE_CHECKING, Annotated, Literal, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from ..holiday_calendar import HolidayCalendar

MINUTES_PER_DAY = 24 * 60


class ScheduleDay(str, Enum):
    monday = "Monday"
    tuesday = "Tuesday"
    wednesday = "Wednesday"
    thursday = "Thursday"
    friday = "Friday"
    saturday = "Saturday"
    sunday = "Sunday"
    holiday = "Holiday"

    @classmethod
    def for_weekday(cls, weekday: int) -> "ScheduleDay":
        return WEEKDAYS[weekday]


WEEKDAYS: Sequence[ScheduleDay] = (
    ScheduleDay.monday,
    ScheduleDay.tuesday,
    ScheduleDay.wednesday,
    ScheduleDay.thursday,
    ScheduleDay.friday,
    ScheduleDay.saturday,
    ScheduleDay.sunday,
)


def minutes_of(value: time) -> int:
    return value.hour * 60 + value.minute


class TimeWindow(BaseModel):
    """Half-open span ``[start, end)`` in minutes since midnight; 1440 is 24:00."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0, le=MINUTES_PER_DAY)
    end: int = Field(ge=0, le=MINUTES_PER_DAY)

    @property
    def hours(self) -> float:
        return max(0, self.end - self.start) / 60

    def clamp(self, *, start: int | None = None, end: int | None = None) -> "TimeWindow":
        new_start = self.start if start is None else max(self.start, start)
        new_end = self.end if end is None else min(self.end, end)
        if new_end < new_start:
            new_end = new_start
        return TimeWindow(start=new_start, end=new_end)


FULL_DAY = TimeWindow(start=0, end=MINUTES_PER_DAY)


class Closed(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["closed"] = "closed"

    def resolve(self) -> TimeWindow | None:
        return None


class Window(BaseModel):
    """Bounded opening hours; an end of 00:00 after a later start closes at midnight."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["window"] = "window"
    start_time: time
    end_time: time

    @property
    def ends_at_midnight(self) -> bool:
        return self.end_time == time(0) and self.start_time != time(0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "Window":
        # equal bounds are a zero-length window, not all-day
        if self.end_time < self.start_time and not self.ends_at_midnight:
            raise ValueError(
                f"window end {self.end_time:%H:%M} is before start {self.start_time:%H:%M}"
            )
        return self

    def resolve(self) -> TimeWindow | None:
        end = MINUTES_PER_DAY if self.ends_at_midnight else minutes_of(self.end_time)
        return TimeWindow(start=minutes_of(self.start_time), end=end)


class AllDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["all_day"] = "all_day"

    def resolve(self) -> TimeWindow | None:
        return FULL_DAY


ScheduleMode = Annotated[Union[Closed, Window, AllDay], Field(discriminator="mode")]


class WeeklyScheduleEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: ScheduleDay
    mode: ScheduleMode = Field(default_factory=Closed)


class WeeklySchedule(BaseModel):
    """Operating hours for the seven weekdays plus the holiday bucket."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[WeeklyScheduleEntry, ...]

    @model_validator(mode="after")
    def _one_entry_per_day(self) -> "WeeklySchedule":
        days = [entry.day for entry in self.entries]
        missing = [day.value for day in ScheduleDay if day not in days]
        duplicated = sorted({day.value for day in days if days.count(day) > 1})
        if missing or duplicated:
            raise ValueError(
                f"schedule needs exactly one entry per day (missing={missing}, duplicated={duplicated})"
            )
        return self

    @classmethod
    def from_modes(cls, modes: dict[ScheduleDay, Closed | Window | AllDay]) -> "WeeklySchedule":
        """Build a schedule; days absent from ``modes`` are closed."""
        return cls(
            entries=tuple(
                WeeklyScheduleEntry(day=day, mode=modes.get(day, Closed())) for day in ScheduleDay
            )
        )

    def entry_for(self, day: ScheduleDay) -> WeeklyScheduleEntry:
        for entry in self.entries:
            if entry.day is day:
                return entry
        raise KeyError(day)

    def window_for(
        self, day: date, calendar: "HolidayCalendar", *, is_holiday: bool | None = None
    ) -> TimeWindow | None:
        """Resolve ``day`` to its operating window; ``None`` when closed.

        The holiday bucket takes precedence over the weekday. Callers that
        already asked the calendar may pass ``is_holiday`` to skip the lookup.
        """
        if is_holiday is None:
            is_holiday = calendar.is_holiday(day)
        if is_holiday:
            bucket = ScheduleDay.holiday
        else:
            bucket = ScheduleDay.for_weekday(day.weekday())
        return self.entry_for(bucket).mode.resolve()


__all__ = [
    "AllDay",
    "Closed",
    "FULL_DAY",
    "ScheduleDay",
    "ScheduleMode",
    "TimeWindow",
    "WeeklySchedule",
    "WeeklyScheduleEntry",
    "Window",
    "minutes_of",
]
