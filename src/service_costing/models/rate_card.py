from __future__ import annotations

from datetime import date

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..dictionaries import blank_to_none


class RateCardEntry(BaseModel):
    """A tariff agreed with a client, optionally scoped to a location and/or supplier."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    client_id: str
    service_type: str
    unit_of_measure: str = ""
    client_rate: float = Field(ge=0)
    supplier_rate: float = Field(default=0.0, ge=0)
    location_id: str | None = None
    supplier_id: str | None = None
    valid_from: date
    valid_to: date | None = None
    notes: str | None = None

    @field_validator("location_id", "supplier_id", mode="before")
    @classmethod
    def _blank_scope_is_unscoped(cls, value: Any) -> Any:
        return blank_to_none(value)

    @model_validator(mode="after")
    def _check_validity(self) -> "RateCardEntry":
        if self.valid_to is not None and self.valid_to < self.valid_from:
            raise ValueError(f"valid_to {self.valid_to} is before valid_from {self.valid_from}")
        return self

    def is_valid_on(self, day: date) -> bool:
        if day < self.valid_from:
            return False
        return self.valid_to is None or day <= self.valid_to

    @property
    def specificity(self) -> int:
        """3 = location and supplier, 2 = location, 1 = supplier, 0 = client-wide."""
        if self.location_id is not None and self.supplier_id is not None:
            return 3
        if self.location_id is not None:
            return 2
        if self.supplier_id is not None:
            return 1
        return 0


__all__ = ["RateCardEntry"]
