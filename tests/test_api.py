import json

import pytest
from fastapi.testclient import TestClient

from conftest import DATA_DIR, rate
from service_costing.engine import ServiceCostEngine
from service_costing.errors import RateLookupError
from service_costing.rate_repository import InMemoryRateCardRepository, LocalRateCardRepository
from services.api import main as api


@pytest.fixture
def client():
    engine = ServiceCostEngine(repository=LocalRateCardRepository(path=DATA_DIR / "rate_cards.json"))
    api.app.dependency_overrides[api.get_engine] = lambda: engine
    yield TestClient(api.app)
    api.app.dependency_overrides.clear()


def april_records():
    return json.loads((DATA_DIR / "services" / "2024-04.json").read_text(encoding="utf-8"))


def test_healthcheck(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_calculate_priced_service(client):
    response = client.post("/v1/costs:calculate", json=april_records()[0])
    assert response.status_code == 200
    body = response.json()
    assert body["tariff_found"] is True
    assert body["multiplier"] == 120
    assert body["client_amount"] == 3000
    assert body["rate_id"] == "TAR-002"
    assert body["unit_of_measure"] == "ora"


def test_calculate_missing_tariff_keeps_units(client):
    response = client.post("/v1/costs:calculate", json=april_records()[4])
    body = response.json()
    assert response.status_code == 200
    assert body["tariff_found"] is False
    assert body["multiplier"] == 1
    assert body["client_amount"] is None


def test_calculate_rejects_incomplete_request(client):
    response = client.post("/v1/costs:calculate", json=april_records()[5])
    assert response.status_code == 422


def test_calculate_reports_unavailable_store(client):
    class Down:
        def find_candidates(self, **kwargs):
            raise RateLookupError("timeout")

    api.app.dependency_overrides[api.get_engine] = lambda: ServiceCostEngine(repository=Down())
    response = client.post("/v1/costs:calculate", json=april_records()[0])
    assert response.status_code == 503


def test_reconciliation_job(client):
    response = client.post("/v1/reconciliations", json={"records": april_records()})
    assert response.status_code == 200
    job_id = response.json()["job_id"]

    job = client.get(f"/v1/jobs/{job_id}").json()
    assert job["status"] == "COMPLETED"
    assert job["record_count"] == 6
    assert job["report"]["total_client_cost"] == 3258
    assert [m["service_id"] for m in job["report"]["missing_tariffs"]] == ["SC-2002"]


def test_reconciliation_job_fails_when_store_is_down(client):
    api.app.dependency_overrides[api.get_engine] = lambda: ServiceCostEngine(
        repository=InMemoryRateCardRepository([rate("wide", 10)])
    )
    ok = client.post("/v1/reconciliations", json={"records": april_records()[:1]}).json()
    assert client.get(f"/v1/jobs/{ok['job_id']}").json()["report"]["missing_tariffs"][0]["service_id"] == "SR-1001"

    class Down:
        def find_candidates(self, **kwargs):
            raise RateLookupError("timeout")

    api.app.dependency_overrides[api.get_engine] = lambda: ServiceCostEngine(repository=Down())
    failed = client.post("/v1/reconciliations", json={"records": april_records()}).json()
    job = client.get(f"/v1/jobs/{failed['job_id']}").json()
    assert job["status"] == "FAILED"
    assert job["errors"] == ["timeout"]


def test_unknown_job(client):
    assert client.get("/v1/jobs/rec_missing").status_code == 404


def test_reconciliation_job_fails_on_unexpected_error(client):
    class Broken:
        def find_candidates(self, **kwargs):
            raise KeyError("valid_from")

    api.app.dependency_overrides[api.get_engine] = lambda: ServiceCostEngine(repository=Broken())
    started = client.post("/v1/reconciliations", json={"records": april_records()}).json()
    job = client.get(f"/v1/jobs/{started['job_id']}").json()
    assert job["status"] == "FAILED"
    assert job["progress"] == 1.0
    assert job["errors"] == ["'valid_from'"]
