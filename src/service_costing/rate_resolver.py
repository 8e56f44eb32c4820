from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from .models.rate_card import RateCardEntry
from .rate_repository import RateCardRepository

logger = logging.getLogger(__name__)


def applies_to(
    entry: RateCardEntry,
    *,
    client_id: str,
    service_type: str,
    location_id: str | None,
    supplier_id: str | None,
    reference_date: date,
) -> bool:
    if entry.client_id != client_id or entry.service_type != service_type:
        return False
    if not entry.is_valid_on(reference_date):
        return False
    # a scoped entry only applies to the location/supplier it names
    if entry.location_id is not None and entry.location_id != location_id:
        return False
    if entry.supplier_id is not None and entry.supplier_id != supplier_id:
        return False
    return True


def pick_most_specific(candidates: Iterable[RateCardEntry]) -> RateCardEntry | None:
    """Most specific scope wins; within a scope the latest ``valid_from`` wins."""
    best: RateCardEntry | None = None
    for entry in candidates:
        if best is None or (entry.specificity, entry.valid_from) > (best.specificity, best.valid_from):
            best = entry
    return best


class RateResolver:
    def __init__(self, repository: RateCardRepository) -> None:
        self._repository = repository

    def resolve(
        self,
        client_id: str,
        service_type: str,
        location_id: str | None,
        supplier_id: str | None,
        reference_date: date,
    ) -> RateCardEntry | None:
        rows = self._repository.find_candidates(
            client_id=client_id,
            service_type=service_type,
            reference_date=reference_date,
            location_id=location_id,
            supplier_id=supplier_id,
        )
        candidates = [
            entry
            for entry in rows
            if applies_to(
                entry,
                client_id=client_id,
                service_type=service_type,
                location_id=location_id,
                supplier_id=supplier_id,
                reference_date=reference_date,
            )
        ]
        rate = pick_most_specific(candidates)
        if rate is None:
            logger.info(
                "No rate card found",
                extra={
                    "client_id": client_id,
                    "service_type": service_type,
                    "location_id": location_id,
                    "supplier_id": supplier_id,
                    "reference_date": reference_date.isoformat(),
                },
            )
        return rate


__all__ = ["RateResolver", "applies_to", "pick_most_specific"]
