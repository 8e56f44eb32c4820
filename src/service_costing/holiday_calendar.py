from __future__ import annotations

import logging
from datetime import date
from functools import lru_cache
from typing import Iterable, Protocol, runtime_checkable

import holidays

from .errors import CostRequestError

logger = logging.getLogger(__name__)


@runtime_checkable
class HolidayCalendar(Protocol):
    def is_holiday(self, day: date) -> bool:
        ...


class CountryHolidayCalendar:
    """Public holidays of a country (and optionally a subdivision), plus local fixed dates.

    ``extra_fixed`` takes ``(month, day)`` pairs for days the official
    calendar does not list, e.g. a client's own closing day.
    """

    def __init__(
        self,
        country: str,
        *,
        subdiv: str | None = None,
        extra_fixed: Iterable[tuple[int, int]] = (),
    ) -> None:
        try:
            holidays.country_holidays(country, subdiv=subdiv)
        except NotImplementedError as exc:
            raise CostRequestError(f"No holiday calendar available for {country!r}: {exc}") from exc
        self.country = country
        self.subdiv = subdiv
        self._extra_fixed = tuple(extra_fixed)
        self._for_year = lru_cache(maxsize=64)(self._compute_year)

    def is_holiday(self, day: date) -> bool:
        return day in self._for_year(day.year)

    def holidays_for_year(self, year: int) -> frozenset[date]:
        return self._for_year(year)

    def holidays_between(self, start: date, end: date) -> list[date]:
        if end < start:
            raise CostRequestError(f"end date {end} is before start date {start}")
        found: list[date] = []
        for year in range(start.year, end.year + 1):
            found.extend(d for d in self._for_year(year) if start <= d <= end)
        return sorted(found)

    def _compute_year(self, year: int) -> frozenset[date]:
        official = holidays.country_holidays(self.country, subdiv=self.subdiv, years=year)
        days = set(official.keys())
        days.update(date(year, month, day) for month, day in self._extra_fixed)
        logger.debug(
            "Computed holidays",
            extra={"country": self.country, "subdiv": self.subdiv, "year": year, "count": len(days)},
        )
        return frozenset(days)


class ItalianHolidayCalendar(CountryHolidayCalendar):
    """Italian national holidays, Pasqua and Pasquetta included.

    ``subdiv`` takes a province code (``"TO"`` adds San Giovanni in Turin).
    """

    def __init__(self, *, subdiv: str | None = None, extra_fixed: Iterable[tuple[int, int]] = ()) -> None:
        super().__init__("IT", subdiv=subdiv, extra_fixed=extra_fixed)


def calendar_for_locale(
    locale: str,
    *,
    subdiv: str | None = None,
    extra_fixed: Iterable[tuple[int, int]] = (),
) -> HolidayCalendar:
    """Map ``"IT"``, ``"it-IT"`` or ``"it_IT"`` to the country's holiday calendar."""
    code = (locale or "").strip().upper().replace("-", "_")
    country = code.rsplit("_", 1)[-1]
    if not country:
        raise CostRequestError(f"No holiday calendar available for locale {locale!r}")
    if country == "IT":
        return ItalianHolidayCalendar(subdiv=subdiv, extra_fixed=extra_fixed)
    return CountryHolidayCalendar(country, subdiv=subdiv, extra_fixed=extra_fixed)


__all__ = [
    "CountryHolidayCalendar",
    "HolidayCalendar",
    "ItalianHolidayCalendar",
    "calendar_for_locale",
]
