from __future__ import annotations

import logging
import math
from typing import Callable, Mapping

from .day_walker import walk
from .errors import CostRequestError
from .holiday_calendar import HolidayCalendar
from .models.cost_request import CostRequest, ServiceKind

logger = logging.getLogger(__name__)

QuantityCalculator = Callable[[CostRequest, HolidayCalendar], float]

# Multipliers are rounded so repeated runs give identical floats.
PRECISION = 6


def _days(request: CostRequest, calendar: HolidayCalendar):
    if request.schedule is None:
        raise CostRequestError(f"{request.service_type} requires a weekly schedule")
    return walk(
        request.start_date,
        request.end_date,
        request.schedule,
        calendar,
        requested_start_time=request.requested_start_time,
        requested_end_time=request.requested_end_time,
    )


def coverage_hours(request: CostRequest, calendar: HolidayCalendar) -> float:
    """Covered hours across the range, times the number of agents on site."""
    if request.agent_count is None or request.agent_count < 1:
        raise CostRequestError("Piantonamento requires agent_count >= 1")
    hours = sum(day.hours for day in _days(request, calendar))
    return round(hours * request.agent_count, PRECISION)


def inspection_visits(request: CostRequest, calendar: HolidayCalendar) -> float:
    """One visit per started cadence interval of every open day."""
    cadence = request.inspection_cadence_hours
    if cadence is None or cadence <= 0:
        raise CostRequestError("Ispezioni requires inspection_cadence_hours > 0")
    visits = 0
    for day in _days(request, calendar):
        if day.hours > 0:
            visits += math.ceil(round(day.hours / cadence, PRECISION))
    return float(visits)


def intervention_hours(request: CostRequest, calendar: HolidayCalendar) -> float:
    """Duration of the dispatch; the weekly schedule does not apply."""
    if request.requested_start_time is None or request.requested_end_time is None:
        raise CostRequestError("Intervento requires both start and end time")
    started, ended = request.intervention_span
    if ended < started:
        raise CostRequestError("Intervento ends before it starts")
    hours = (ended - started).total_seconds() / 3600
    return round(hours * request.agents, PRECISION)


def flat_fee_units(request: CostRequest, calendar: HolidayCalendar) -> float:
    if request.end_date < request.start_date:
        raise CostRequestError(
            f"end date {request.end_date} is before start date {request.start_date}"
        )
    return float(request.flat_fee_units)


CALCULATORS: Mapping[ServiceKind, QuantityCalculator] = {
    ServiceKind.coverage: coverage_hours,
    ServiceKind.inspection: inspection_visits,
    ServiceKind.intervention: intervention_hours,
    ServiceKind.flat_fee: flat_fee_units,
}


def compute_multiplier(request: CostRequest, calendar: HolidayCalendar) -> float:
    calculator = CALCULATORS[request.service_kind]
    multiplier = calculator(request, calendar)
    logger.debug(
        "Computed multiplier",
        extra={
            "service_type": request.service_type,
            "start_date": request.start_date.isoformat(),
            "end_date": request.end_date.isoformat(),
            "multiplier": multiplier,
        },
    )
    return multiplier


__all__ = [
    "CALCULATORS",
    "QuantityCalculator",
    "compute_multiplier",
    "coverage_hours",
    "flat_fee_units",
    "inspection_visits",
    "intervention_hours",
]
