from __future__ import annotations

from datetime import date, time
from typing import Any, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .dictionaries import blank_to_none, day_for_label, definition_for
from .errors import CostRequestError
from .models.cost_request import CostRequest
from .models.schedule import AllDay, Closed, WeeklySchedule, WeeklyScheduleEntry, Window


def parse_clock(value: Any) -> time | None:
    """Parse ``"9:30"``, ``"09.30"``, ``"09:30:00"`` or ``"24:00"`` (as 00:00)."""
    value = blank_to_none(value)
    if value is None or isinstance(value, time):
        return value
    text = str(value).strip().replace(".", ":")
    parts = text.split(":")
    try:
        hour = int(parts[0])
        minute = int(parts[1]) if len(parts) > 1 else 0
    except ValueError:
        raise ValueError(f"invalid time {value!r}") from None
    if hour == 24 and minute == 0:
        return time(0, 0)
    return time(hour, minute)


class DailyHoursEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: str
    start_time: time | None = Field(default=None, alias="startTime")
    end_time: time | None = Field(default=None, alias="endTime")
    is_24h: bool | None = Field(default=False, alias="is24h")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_times(cls, value: Any) -> Any:
        return parse_clock(value)

    def to_entry(self) -> WeeklyScheduleEntry:
        day = day_for_label(self.day)
        if self.is_24h:
            return WeeklyScheduleEntry(day=day, mode=AllDay())
        if self.start_time is None and self.end_time is None:
            return WeeklyScheduleEntry(day=day, mode=Closed())
        if self.start_time is None or self.end_time is None:
            raise CostRequestError(f"{self.day}: both start and end time are required")
        if self.end_time == self.start_time:
            raise CostRequestError(
                f"{self.day}: window {self.start_time:%H:%M}-{self.end_time:%H:%M} is empty; "
                "mark the day as 24h or closed instead"
            )
        try:
            mode = Window(start_time=self.start_time, end_time=self.end_time)
        except ValidationError as exc:
            raise CostRequestError(f"{self.day}: {exc.errors()[0]['msg']}") from exc
        return WeeklyScheduleEntry(day=day, mode=mode)


class ServiceRecord(BaseModel):
    """A persisted service request (or flat-fee contract) as the store returns it."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    type: str
    client_id: str
    service_point_id: str | None = None
    fornitore_id: str | None = None
    start_date: date
    start_time: time | None = None
    end_date: date | None = None
    end_time: time | None = None
    num_agents: int | None = None
    cadence_hours: float | None = None
    inspection_type: str | None = None
    daily_hours_config: Sequence[DailyHoursEntry] | None = None

    @model_validator(mode="before")
    @classmethod
    def _canone_rows(cls, data: Any) -> Any:
        # flat-fee rows carry their label in tipo_canone
        if isinstance(data, dict) and not data.get("type") and data.get("tipo_canone"):
            data = {**data, "type": data["tipo_canone"]}
        return data

    @field_validator("id", "service_point_id", "fornitore_id", "inspection_type", "end_date", mode="before")
    @classmethod
    def _blank_ids(cls, value: Any) -> Any:
        return blank_to_none(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_times(cls, value: Any) -> Any:
        return parse_clock(value)

    @field_validator("num_agents", "cadence_hours", "daily_hours_config", mode="before")
    @classmethod
    def _blank_numbers(cls, value: Any) -> Any:
        return blank_to_none(value)

    def schedule(self) -> WeeklySchedule | None:
        if not self.daily_hours_config:
            return None
        entries = [item.to_entry() for item in self.daily_hours_config]
        try:
            return WeeklySchedule(entries=entries)
        except ValidationError as exc:
            raise CostRequestError(f"Invalid daily hours: {exc.errors()[0]['msg']}") from exc

    def to_cost_request(self) -> CostRequest:
        definition = definition_for(self.type)
        try:
            return CostRequest(
                service_kind=definition.kind,
                service_type=definition.label,
                client_id=self.client_id,
                location_id=self.service_point_id,
                supplier_id=self.fornitore_id,
                start_date=self.start_date,
                end_date=self.end_date or self.start_date,
                requested_start_time=self.start_time,
                requested_end_time=self.end_time,
                agent_count=self.num_agents,
                inspection_cadence_hours=self.cadence_hours,
                schedule=self.schedule(),
            )
        except ValidationError as exc:
            messages = "; ".join(error["msg"] for error in exc.errors())
            raise CostRequestError(f"{self.type} request is invalid: {messages}") from exc


__all__ = ["DailyHoursEntry", "ServiceRecord", "blank_to_none", "parse_clock"]
