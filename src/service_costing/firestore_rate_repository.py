from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Sequence

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .errors import RateLookupError
from .models.rate_card import RateCardEntry

logger = logging.getLogger(__name__)


class FirestoreRateCardRepository:
    """Rate cards stored as documents in a Firestore collection."""

    COLLECTION_NAME = "tariffe"

    def __init__(
        self,
        project_id: str | None = None,
        *,
        collection: str | None = None,
        client: firestore.Client | None = None,
    ) -> None:
        self._db = client or firestore.Client(project=project_id)
        self._collection = self._db.collection(collection or self.COLLECTION_NAME)

    def find_candidates(
        self,
        *,
        client_id: str,
        service_type: str,
        reference_date: date,
        location_id: str | None = None,
        supplier_id: str | None = None,
    ) -> Sequence[RateCardEntry]:
        """Query by client and service type; validity is checked client side.

        Firestore cannot combine the open-ended ``valid_to`` with a range
        filter on ``valid_from`` in one query.
        """
        query = (
            self._collection.where(filter=FieldFilter("client_id", "==", client_id))
            .where(filter=FieldFilter("service_type", "==", service_type))
        )
        try:
            docs = list(query.stream())
        except google_exceptions.GoogleAPICallError as exc:
            logger.error(
                "Rate card lookup failed",
                extra={"client_id": client_id, "service_type": service_type, "error": str(exc)},
            )
            raise RateLookupError(f"Rate card lookup failed: {exc}") from exc

        entries = [self._from_firestore_dict(doc.id, doc.to_dict()) for doc in docs]
        candidates = [entry for entry in entries if entry.is_valid_on(reference_date)]
        logger.info(
            "Fetched rate cards",
            extra={
                "client_id": client_id,
                "service_type": service_type,
                "fetched": len(entries),
                "valid": len(candidates),
            },
        )
        return candidates

    def _from_firestore_dict(self, entry_id: str, data: dict[str, Any]) -> RateCardEntry:
        """Convert a Firestore document dict to a RateCardEntry."""
        try:
            return RateCardEntry(
                id=entry_id,
                client_id=data["client_id"],
                service_type=data["service_type"],
                unit_of_measure=data.get("unit_of_measure") or "",
                client_rate=data.get("client_rate", 0.0),
                supplier_rate=data.get("supplier_rate", 0.0),
                location_id=data.get("location_id"),
                supplier_id=data.get("supplier_id"),
                valid_from=_as_date(data["valid_from"]),
                valid_to=_as_date(data.get("valid_to")),
                notes=data.get("notes"),
            )
        except (KeyError, ValueError) as exc:
            # pydantic ValidationError is a ValueError
            logger.error("Malformed rate card document", extra={"rate_card_id": entry_id, "error": str(exc)})
            raise RateLookupError(f"Rate card {entry_id} is malformed: {exc}") from exc


def _as_date(value: Any) -> date | None:
    # Firestore returns timestamps as datetimes
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


__all__ = ["FirestoreRateCardRepository"]
