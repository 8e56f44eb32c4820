from __future__ import annotations

import asyncio
import logging
import os
import uuid
from functools import lru_cache
from pathlib import Path

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from service_costing.engine import ServiceCostEngine
from service_costing.errors import CostRequestError, RateLookupError
from service_costing.firestore_rate_repository import FirestoreRateCardRepository
from service_costing.holiday_calendar import calendar_for_locale
from service_costing.job_store import JobStore
from service_costing.logging_config import set_trace_id, setup_logging
from service_costing.models.job import JobRecord, JobStatus
from service_costing.rate_repository import LocalRateCardRepository, RateCardRepository
from service_costing.reconciliation import Reconciler
from service_costing.service_records import ServiceRecord


class CostResponse(BaseModel):
    tariff_found: bool
    multiplier: float
    unit_of_measure: str | None = None
    client_rate: float | None = None
    supplier_rate: float | None = None
    client_amount: float | None = None
    supplier_amount: float | None = None
    rate_id: str | None = None


class ReconciliationRequest(BaseModel):
    source: str = Field(default="manual")
    records: list[ServiceRecord]


class ReconciliationResponse(BaseModel):
    job_id: str
    status: JobStatus


class JobResponse(BaseModel):
    id: str
    status: JobStatus
    progress: float
    record_count: int
    report: dict | None
    errors: list[str]

    @staticmethod
    def from_record(record: JobRecord) -> "JobResponse":
        return JobResponse(
            id=record.id,
            status=record.status,
            progress=record.progress,
            record_count=record.record_count,
            report=dict(record.report) if record.report is not None else None,
            errors=list(record.errors),
        )


# Environment configuration
ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
PROJECT_ID = os.getenv("PROJECT_ID")
RATE_CARDS_PATH = os.getenv("RATE_CARDS_PATH", "data/rate_cards.json")
RATE_CARDS_COLLECTION = os.getenv("RATE_CARDS_COLLECTION", "tariffe")
HOLIDAY_LOCALE = os.getenv("HOLIDAY_LOCALE", "IT")
HOLIDAY_SUBDIV = os.getenv("HOLIDAY_SUBDIV") or None
RECONCILIATION_WORKERS = int(os.getenv("RECONCILIATION_WORKERS", "4"))

# Setup logging
setup_logging(environment=ENVIRONMENT, project_id=PROJECT_ID)
logger = logging.getLogger(__name__)

app = FastAPI(title="Service Costing API", version="0.1.0")

job_store = JobStore()


@lru_cache(maxsize=1)
def get_engine() -> ServiceCostEngine:
    repository: RateCardRepository
    # Use Firestore in production, the JSON file for dev
    if ENVIRONMENT == "dev":
        repository = LocalRateCardRepository(path=Path(RATE_CARDS_PATH).resolve())
    else:
        repository = FirestoreRateCardRepository(project_id=PROJECT_ID, collection=RATE_CARDS_COLLECTION)
    calendar = calendar_for_locale(HOLIDAY_LOCALE, subdiv=HOLIDAY_SUBDIV)
    return ServiceCostEngine(repository=repository, calendar=calendar)


@app.post("/v1/costs:calculate", response_model=CostResponse)
async def calculate_cost(record: ServiceRecord, engine: ServiceCostEngine = Depends(get_engine)) -> CostResponse:
    set_trace_id(str(uuid.uuid4()))
    try:
        breakdown = await asyncio.to_thread(engine.breakdown, record.to_cost_request())
    except CostRequestError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RateLookupError as exc:
        logger.error("Rate lookup unavailable", extra={"service_id": record.id, "error": str(exc)})
        raise HTTPException(status_code=503, detail="Rate card store unavailable") from exc

    result = breakdown.result
    if result is None:
        return CostResponse(tariff_found=False, multiplier=breakdown.multiplier)
    return CostResponse(
        tariff_found=True,
        multiplier=result.multiplier,
        unit_of_measure=result.unit_of_measure,
        client_rate=result.client_rate,
        supplier_rate=result.supplier_rate,
        client_amount=result.client_amount,
        supplier_amount=result.supplier_amount,
        rate_id=result.rate.id,
    )


@app.post("/v1/reconciliations", response_model=ReconciliationResponse)
async def start_reconciliation(
    request: ReconciliationRequest,
    background_tasks: BackgroundTasks,
    engine: ServiceCostEngine = Depends(get_engine),
) -> ReconciliationResponse:
    job = job_store.create_job(source=request.source, record_count=len(request.records))
    background_tasks.add_task(_run_reconciliation, job.id, request.records, engine)
    return ReconciliationResponse(job_id=job.id, status=job.status)


@app.get("/v1/jobs/{job_id}", response_model=JobResponse)
async def get_job(job_id: str) -> JobResponse:
    record = job_store.get_job(job_id)
    if not record:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobResponse.from_record(record)


async def _run_reconciliation(job_id: str, records: list[ServiceRecord], engine: ServiceCostEngine) -> None:
    trace_id = str(uuid.uuid4())
    set_trace_id(trace_id)
    job_store.update_job(job_id, status=JobStatus.in_progress, progress=0.1)
    reconciler = Reconciler(engine, max_workers=RECONCILIATION_WORKERS)
    try:
        report = await asyncio.to_thread(reconciler.reconcile, records)
    except RateLookupError as exc:
        logger.error(
            "Reconciliation failed",
            extra={"job_id": job_id, "trace_id": trace_id, "error": str(exc)},
        )
        job_store.update_job(job_id, status=JobStatus.failed, progress=1.0, errors=[str(exc)])
        return
    except Exception as exc:
        logger.exception("Reconciliation crashed", extra={"job_id": job_id, "trace_id": trace_id})
        job_store.update_job(job_id, status=JobStatus.failed, progress=1.0, errors=[str(exc)])
        return
    job_store.update_job(
        job_id,
        status=JobStatus.completed,
        progress=1.0,
        report=report.model_dump_with_totals(),
    )
    logger.info("Reconciliation completed", extra={"job_id": job_id, "trace_id": trace_id})


@app.get("/health")
async def healthcheck() -> JSONResponse:
    return JSONResponse({"status": "ok"})
