from __future__ import annotations

from datetime import date
from typing import Sequence

from pydantic import BaseModel, Field


class ServiceSummary(BaseModel):
    service_point_id: str | None
    service_type: str
    unit_of_measure: str = ""
    total_services: int = 0
    total_units: float = 0.0
    total_client_cost: float = 0.0
    total_supplier_cost: float = 0.0

    @property
    def cost_delta(self) -> float:
        return round(self.total_client_cost - self.total_supplier_cost, 2)


class MissingTariff(BaseModel):
    service_id: str | None
    service_type: str
    client_id: str
    service_point_id: str | None = None
    fornitore_id: str | None = None
    start_date: date
    end_date: date
    units: float = Field(description="Quantity that could not be priced")
    reason: str


class RejectedRecord(BaseModel):
    service_id: str | None
    service_type: str
    error: str


class ReconciliationReport(BaseModel):
    summaries: Sequence[ServiceSummary] = Field(default_factory=list)
    missing_tariffs: Sequence[MissingTariff] = Field(default_factory=list)
    rejected: Sequence[RejectedRecord] = Field(default_factory=list)

    @property
    def total_client_cost(self) -> float:
        return round(sum(item.total_client_cost for item in self.summaries), 2)

    @property
    def total_supplier_cost(self) -> float:
        return round(sum(item.total_supplier_cost for item in self.summaries), 2)

    def model_dump_with_totals(self) -> dict[str, object]:
        return {
            **self.model_dump(mode="json"),
            "summaries": [
                {**item.model_dump(mode="json"), "cost_delta": item.cost_delta}
                for item in self.summaries
            ],
            "total_client_cost": self.total_client_cost,
            "total_supplier_cost": self.total_supplier_cost,
        }


__all__ = ["MissingTariff", "ReconciliationReport", "RejectedRecord", "ServiceSummary"]
