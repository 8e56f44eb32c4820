from __future__ import annotations

from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .schedule import WeeklySchedule


class ServiceKind(str, Enum):
    coverage = "Piantonamento"
    inspection = "Ispezioni"
    intervention = "Intervento"
    flat_fee = "Canone"


class CostRequest(BaseModel):
    """A single costing invocation. Built per call and discarded afterwards."""

    model_config = ConfigDict(frozen=True)

    service_kind: ServiceKind
    service_type: str = Field(description="Operator label keying the rate cards; defaults to the kind label")
    client_id: str
    location_id: str | None = None
    supplier_id: str | None = None
    start_date: date
    end_date: date
    requested_start_time: time | None = None
    requested_end_time: time | None = None
    agent_count: int | None = None
    inspection_cadence_hours: float | None = None
    flat_fee_units: float = Field(default=1.0, ge=0)
    schedule: WeeklySchedule | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_service_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("service_type") and data.get("service_kind"):
            data = {**data, "service_type": ServiceKind(data["service_kind"]).value}
        return data

    @model_validator(mode="after")
    def _check_kind_requirements(self) -> "CostRequest":
        if self.end_date < self.start_date:
            raise ValueError(f"end_date {self.end_date} is before start_date {self.start_date}")

        kind = self.service_kind
        if kind in (ServiceKind.coverage, ServiceKind.inspection) and self.schedule is None:
            raise ValueError(f"{kind.value} requires a weekly schedule")
        if kind is ServiceKind.coverage and (self.agent_count is None or self.agent_count < 1):
            raise ValueError("Piantonamento requires agent_count >= 1")
        if kind is ServiceKind.inspection:
            if self.inspection_cadence_hours is None or self.inspection_cadence_hours <= 0:
                raise ValueError("Ispezioni requires inspection_cadence_hours > 0")
        if kind is ServiceKind.intervention:
            if self.requested_start_time is None or self.requested_end_time is None:
                raise ValueError("Intervento requires both start and end time")
            started, ended = self.intervention_span
            if ended < started:
                raise ValueError("Intervento ends before it starts")
            if self.agent_count is not None and self.agent_count < 1:
                raise ValueError("Intervento agent_count must be >= 1 when given")
        return self

    @property
    def intervention_span(self) -> tuple[datetime, datetime]:
        """Start and end of a dispatch; an end of 00:00 after a later start is 24:00."""
        started = datetime.combine(self.start_date, self.requested_start_time)
        ended = datetime.combine(self.end_date, self.requested_end_time)
        if ended <= started and self.requested_end_time == time(0) and self.requested_start_time != time(0):
            ended += timedelta(days=1)
        return started, ended

    @property
    def agents(self) -> int:
        return self.agent_count or 1


__all__ = ["CostRequest", "ServiceKind"]
