from datetime import date, time

import pytest

from conftest import every_day, office_hours, rate
from service_costing.engine import ServiceCostEngine, compose, compose_supplier
from service_costing.errors import CostRequestError, RateLookupError
from service_costing.models.cost_request import CostRequest, ServiceKind
from service_costing.models.schedule import Closed
from service_costing.rate_repository import InMemoryRateCardRepository


class UnreachableRepository:
    def find_candidates(self, **kwargs):
        raise RateLookupError("connection refused")


def monday_coverage(**overrides):
    fields = {
        "service_kind": ServiceKind.coverage,
        "client_id": "CLI-1",
        "location_id": "PS-1",
        "start_date": date(2024, 4, 8),
        "end_date": date(2024, 4, 8),
        "agent_count": 1,
        "schedule": office_hours(),
    }
    fields.update(overrides)
    return CostRequest(**fields)


def make_engine(entries, calendar=None):
    return ServiceCostEngine(repository=InMemoryRateCardRepository(entries), calendar=calendar)


def test_calculate_returns_multiplier_and_rate():
    engine = make_engine([rate("wide", 10), rate("loc", 15, location_id="PS-1")])
    result = engine.calculate(monday_coverage())
    assert result.multiplier == 8
    assert result.client_rate == 15
    assert result.client_amount == 120
    assert result.supplier_amount == 96
    assert result.margin == 24
    assert result.unit_of_measure == "ora"


def test_missing_tariff_is_none_not_zero():
    engine = make_engine([])
    assert engine.calculate(monday_coverage()) is None
    breakdown = engine.breakdown(monday_coverage())
    assert breakdown.multiplier == 8
    assert breakdown.rate is None


def test_closed_day_with_rate_is_zero_cost():
    engine = make_engine([rate("wide", 10)])
    request = monday_coverage(schedule=every_day(Closed()))
    result = engine.calculate(request)
    assert result is not None
    assert result.multiplier == 0
    assert result.client_amount == 0


def test_closed_day_without_rate_is_none():
    request = monday_coverage(schedule=every_day(Closed()))
    assert make_engine([]).calculate(request) is None


def test_rate_is_resolved_on_the_start_date():
    entries = [rate("march", 10, valid_to=date(2024, 4, 8)), rate("april", 20, valid_from=date(2024, 4, 9))]
    result = make_engine(entries).calculate(
        monday_coverage(end_date=date(2024, 4, 10))
    )
    assert result.rate.id == "march"
    assert result.multiplier == 24


def test_identical_requests_give_identical_results():
    engine = make_engine([rate("wide", 10.35)])
    request = monday_coverage(end_date=date(2024, 5, 31), agent_count=3)
    assert engine.calculate(request) == engine.calculate(request)


def test_intervention_through_engine():
    engine = make_engine([rate("int", 40, service_type="Intervento")])
    request = CostRequest(
        service_kind=ServiceKind.intervention,
        client_id="CLI-1",
        start_date=date(2024, 4, 8),
        end_date=date(2024, 4, 8),
        requested_start_time=time(10),
        requested_end_time=time(11, 30),
    )
    result = engine.calculate(request)
    assert result.multiplier == 1.5
    assert result.client_amount == 60


def test_dependency_failure_propagates():
    engine = ServiceCostEngine(repository=UnreachableRepository())
    with pytest.raises(RateLookupError):
        engine.calculate(monday_coverage())


def test_reversed_range_is_a_caller_error():
    engine = make_engine([rate("wide", 10)])
    # bypass model validation to reach the walker with a reversed range
    fields = monday_coverage().model_dump()
    fields.update(schedule=office_hours(), end_date=date(2024, 4, 1))
    request = CostRequest.model_construct(**fields)
    with pytest.raises(CostRequestError):
        engine.calculate(request)


def test_compose_short_circuits_on_missing_rate():
    assert compose(8, None) is None
    assert compose_supplier(8, None) is None
    entry = rate("wide", 12.5)
    assert compose(8, entry) == 100
    assert compose_supplier(8, entry) == 80
    assert compose(0, entry) == 0
