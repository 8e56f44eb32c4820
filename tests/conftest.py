from __future__ import annotations

from datetime import date, time
from pathlib import Path

import pytest

from service_costing.holiday_calendar import ItalianHolidayCalendar
from service_costing.models.rate_card import RateCardEntry
from service_costing.models.schedule import AllDay, Closed, ScheduleDay, WeeklySchedule, Window

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def office_hours(*, holiday=None) -> WeeklySchedule:
    """Mon-Fri 09-17, Sat 09-13, Sunday closed; holiday bucket closed unless given."""
    weekday = Window(start_time=time(9), end_time=time(17))
    return WeeklySchedule.from_modes(
        {
            ScheduleDay.monday: weekday,
            ScheduleDay.tuesday: weekday,
            ScheduleDay.wednesday: weekday,
            ScheduleDay.thursday: weekday,
            ScheduleDay.friday: weekday,
            ScheduleDay.saturday: Window(start_time=time(9), end_time=time(13)),
            ScheduleDay.sunday: Closed(),
            ScheduleDay.holiday: holiday or Closed(),
        }
    )


def every_day(mode) -> WeeklySchedule:
    return WeeklySchedule.from_modes({day: mode for day in ScheduleDay})


def rate(rate_id: str, client_rate: float, **overrides) -> RateCardEntry:
    fields = {
        "id": rate_id,
        "client_id": "CLI-1",
        "service_type": "Piantonamento",
        "unit_of_measure": "ora",
        "client_rate": client_rate,
        "supplier_rate": client_rate * 0.8,
        "valid_from": date(2024, 1, 1),
    }
    fields.update(overrides)
    return RateCardEntry(**fields)


@pytest.fixture
def calendar() -> ItalianHolidayCalendar:
    return ItalianHolidayCalendar()


@pytest.fixture
def all_day_schedule() -> WeeklySchedule:
    return every_day(AllDay())
