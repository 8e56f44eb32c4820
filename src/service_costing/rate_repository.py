from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, Protocol, Sequence

from pydantic import ValidationError

from .errors import RateLookupError
from .models.rate_card import RateCardEntry

logger = logging.getLogger(__name__)


class RateCardRepository(Protocol):
    def find_candidates(
        self,
        *,
        client_id: str,
        service_type: str,
        reference_date: date,
        location_id: str | None = None,
        supplier_id: str | None = None,
    ) -> Sequence[RateCardEntry]:
        """Return rate cards that may apply; the resolver does the final ranking."""
        ...


class InMemoryRateCardRepository:
    def __init__(self, entries: Iterable[RateCardEntry] = ()) -> None:
        self._entries: tuple[RateCardEntry, ...] = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def find_candidates(
        self,
        *,
        client_id: str,
        service_type: str,
        reference_date: date,
        location_id: str | None = None,
        supplier_id: str | None = None,
    ) -> Sequence[RateCardEntry]:
        return [
            entry
            for entry in self._entries
            if entry.client_id == client_id
            and entry.service_type == service_type
            and entry.is_valid_on(reference_date)
        ]


class LocalRateCardRepository(InMemoryRateCardRepository):
    """Rate cards loaded once from a JSON array on disk."""

    def __init__(self, *, path: Path) -> None:
        super().__init__(self._load(path))
        self._path = path

    @staticmethod
    def _load(path: Path) -> list[RateCardEntry]:
        if not path.exists():
            raise FileNotFoundError(f"Rate card file not found: {path}")
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        try:
            entries = [RateCardEntry.model_validate(item) for item in data]
        except ValidationError as exc:
            raise RateLookupError(f"Invalid rate card data in {path}: {exc}") from exc
        logger.info("Loaded rate cards", extra={"path": str(path), "count": len(entries)})
        return entries


__all__ = ["RateCardRepository", "InMemoryRateCardRepository", "LocalRateCardRepository"]
