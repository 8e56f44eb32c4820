from datetime import date

import pytest

from service_costing.errors import CostRequestError
from service_costing.holiday_calendar import (
    CountryHolidayCalendar,
    HolidayCalendar,
    ItalianHolidayCalendar,
    calendar_for_locale,
)


@pytest.mark.parametrize(
    "easter, pasquetta",
    [
        (date(2019, 4, 21), date(2019, 4, 22)),
        (date(2024, 3, 31), date(2024, 4, 1)),
        (date(2025, 4, 20), date(2025, 4, 21)),
        (date(2026, 4, 5), date(2026, 4, 6)),
    ],
)
def test_easter_and_pasquetta_move_with_the_year(calendar, easter, pasquetta):
    assert calendar.is_holiday(easter)
    assert calendar.is_holiday(pasquetta)


def test_fixed_and_moving_holidays(calendar):
    assert calendar.is_holiday(date(2024, 1, 1))
    assert calendar.is_holiday(date(2024, 4, 25))
    assert calendar.is_holiday(date(2024, 12, 26))
    assert not calendar.is_holiday(date(2024, 4, 2))
    assert not calendar.is_holiday(date(2024, 4, 8))


def test_moving_holidays_follow_the_year(calendar):
    assert calendar.is_holiday(date(2025, 4, 21))
    assert not calendar.is_holiday(date(2025, 4, 1))


def test_repeated_lookups_are_stable(calendar):
    first = calendar.holidays_for_year(2024)
    second = calendar.holidays_for_year(2024)
    assert first is second
    assert len(first) == 12


def test_extra_local_holidays():
    turin = ItalianHolidayCalendar(extra_fixed=[(6, 24)])
    assert turin.is_holiday(date(2024, 6, 24))
    assert not ItalianHolidayCalendar().is_holiday(date(2024, 6, 24))


def test_holidays_between_spans_years(calendar):
    found = calendar.holidays_between(date(2024, 12, 20), date(2025, 1, 7))
    assert found == [
        date(2024, 12, 25),
        date(2024, 12, 26),
        date(2025, 1, 1),
        date(2025, 1, 6),
    ]


def test_holidays_between_rejects_reversed_range(calendar):
    with pytest.raises(CostRequestError):
        calendar.holidays_between(date(2024, 2, 1), date(2024, 1, 1))


def test_calendar_for_locale():
    assert isinstance(calendar_for_locale("it"), HolidayCalendar)
    assert isinstance(calendar_for_locale("it-IT"), ItalianHolidayCalendar)
    french = calendar_for_locale("fr_FR")
    assert isinstance(french, CountryHolidayCalendar)
    assert french.is_holiday(date(2024, 7, 14))
    assert not calendar_for_locale("IT").is_holiday(date(2024, 7, 14))


@pytest.mark.parametrize("locale", ["XX", ""])
def test_unknown_locale_is_a_caller_error(locale):
    with pytest.raises(CostRequestError):
        calendar_for_locale(locale)


def test_unknown_subdivision_is_a_caller_error():
    with pytest.raises(CostRequestError):
        ItalianHolidayCalendar(subdiv="ZZ")
