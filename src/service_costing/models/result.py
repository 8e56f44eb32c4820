from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .rate_card import RateCardEntry


class CostResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    multiplier: float
    rate: RateCardEntry

    @property
    def client_rate(self) -> float:
        return self.rate.client_rate

    @property
    def supplier_rate(self) -> float:
        return self.rate.supplier_rate

    @property
    def unit_of_measure(self) -> str:
        return self.rate.unit_of_measure

    @property
    def client_amount(self) -> float:
        return round(self.multiplier * self.rate.client_rate, 2)

    @property
    def supplier_amount(self) -> float:
        return round(self.multiplier * self.rate.supplier_rate, 2)

    @property
    def margin(self) -> float:
        return round(self.client_amount - self.supplier_amount, 2)


__all__ = ["CostResult"]
