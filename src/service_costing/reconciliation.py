from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Sequence

from .dictionaries import MISSING_TARIFF_REASON, unit_of_measure_for
from .engine import CostBreakdown, ServiceCostEngine
from .errors import CostRequestError
from .models.reconciliation import MissingTariff, ReconciliationReport, RejectedRecord, ServiceSummary
from .service_records import ServiceRecord

logger = logging.getLogger(__name__)


class Reconciler:
    """Prices a batch of service records and flags the ones without a tariff."""

    def __init__(self, engine: ServiceCostEngine, *, max_workers: int = 1) -> None:
        self._engine = engine
        self._max_workers = max(1, max_workers)

    def reconcile(self, records: Iterable[ServiceRecord]) -> ReconciliationReport:
        records = list(records)
        if self._max_workers > 1 and len(records) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                outcomes = list(pool.map(self._evaluate, records))
        else:
            outcomes = [self._evaluate(record) for record in records]

        summaries: dict[tuple[str | None, str], ServiceSummary] = {}
        missing: list[MissingTariff] = []
        rejected: list[RejectedRecord] = []

        for record, outcome in zip(records, outcomes):
            if isinstance(outcome, CostRequestError):
                rejected.append(
                    RejectedRecord(service_id=record.id, service_type=record.type, error=str(outcome))
                )
                continue

            key = (record.service_point_id, record.type)
            summary = summaries.get(key)
            if summary is None:
                summary = ServiceSummary(
                    service_point_id=record.service_point_id,
                    service_type=record.type,
                    unit_of_measure=unit_of_measure_for(record.type),
                )
                summaries[key] = summary
            summary.total_services += 1

            result = outcome.result
            if result is None:
                missing.append(self._missing_entry(record, outcome))
                continue
            summary.total_units = round(summary.total_units + result.multiplier, 6)
            summary.total_client_cost = round(summary.total_client_cost + result.client_amount, 2)
            summary.total_supplier_cost = round(summary.total_supplier_cost + result.supplier_amount, 2)

        logger.info(
            "Reconciliation finished",
            extra={
                "records": len(records),
                "groups": len(summaries),
                "missing_tariffs": len(missing),
                "rejected": len(rejected),
            },
        )
        return ReconciliationReport(
            summaries=list(summaries.values()), missing_tariffs=missing, rejected=rejected
        )

    def _evaluate(self, record: ServiceRecord) -> CostBreakdown | CostRequestError:
        # RateLookupError is left to propagate: the whole batch is retryable
        try:
            return self._engine.breakdown(record.to_cost_request())
        except CostRequestError as exc:
            logger.warning(
                "Rejected service record",
                extra={"service_id": record.id, "service_type": record.type, "error": str(exc)},
            )
            return exc

    @staticmethod
    def _missing_entry(record: ServiceRecord, breakdown: CostBreakdown) -> MissingTariff:
        request = breakdown.request
        return MissingTariff(
            service_id=record.id,
            service_type=record.type,
            client_id=record.client_id,
            service_point_id=record.service_point_id,
            fornitore_id=record.fornitore_id,
            start_date=request.start_date,
            end_date=request.end_date,
            units=breakdown.multiplier,
            reason=MISSING_TARIFF_REASON,
        )


def missing_tariffs(engine: ServiceCostEngine, records: Sequence[ServiceRecord]) -> list[MissingTariff]:
    return list(Reconciler(engine).reconcile(records).missing_tariffs)


__all__ = ["Reconciler", "missing_tariffs"]
