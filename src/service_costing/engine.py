from __future__ import annotations

import logging
from dataclasses import dataclass

from .holiday_calendar import HolidayCalendar, ItalianHolidayCalendar
from .models.cost_request import CostRequest
from .models.rate_card import RateCardEntry
from .models.result import CostResult
from .quantities import compute_multiplier
from .rate_repository import RateCardRepository
from .rate_resolver import RateResolver

logger = logging.getLogger(__name__)


def compose(multiplier: float, rate: RateCardEntry | None) -> float | None:
    """Client-side amount, or ``None`` when there is no tariff to apply."""
    if rate is None:
        return None
    return round(multiplier * rate.client_rate, 2)


def compose_supplier(multiplier: float, rate: RateCardEntry | None) -> float | None:
    if rate is None:
        return None
    return round(multiplier * rate.supplier_rate, 2)


@dataclass
class CostBreakdown:
    """Multiplier and tariff, kept apart so a missing tariff still reports units."""

    request: CostRequest
    multiplier: float
    rate: RateCardEntry | None

    @property
    def result(self) -> CostResult | None:
        if self.rate is None:
            return None
        return CostResult(multiplier=self.multiplier, rate=self.rate)


class ServiceCostEngine:
    def __init__(
        self,
        *,
        repository: RateCardRepository,
        calendar: HolidayCalendar | None = None,
    ) -> None:
        self._calendar = calendar or ItalianHolidayCalendar()
        self._resolver = RateResolver(repository)

    @property
    def calendar(self) -> HolidayCalendar:
        return self._calendar

    def calculate(self, request: CostRequest) -> CostResult | None:
        return self.breakdown(request).result

    def breakdown(self, request: CostRequest) -> CostBreakdown:
        multiplier = compute_multiplier(request, self._calendar)
        rate = self._resolver.resolve(
            request.client_id,
            request.service_type,
            request.location_id,
            request.supplier_id,
            request.start_date,
        )
        logger.info(
            "Calculated service cost",
            extra={
                "service_type": request.service_type,
                "client_id": request.client_id,
                "location_id": request.location_id,
                "multiplier": multiplier,
                "rate_id": rate.id if rate else None,
                "tariff_found": rate is not None,
            },
        )
        return CostBreakdown(request=request, multiplier=multiplier, rate=rate)


__all__ = ["CostBreakdown", "ServiceCostEngine", "compose", "compose_supplier"]
