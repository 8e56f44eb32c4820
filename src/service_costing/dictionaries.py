from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .errors import CostRequestError
from .models.cost_request import ServiceKind
from .models.schedule import ScheduleDay


@dataclass(frozen=True)
class ServiceDefinition:
    label: str
    kind: ServiceKind
    unit_of_measure: str


def _define(kind: ServiceKind, unit: str, *labels: str) -> dict[str, ServiceDefinition]:
    return {label: ServiceDefinition(label=label, kind=kind, unit_of_measure=unit) for label in labels}


SERVICE_CATALOG: Mapping[str, ServiceDefinition] = {
    **_define(ServiceKind.coverage, "ora", "Piantonamento", "Servizi Fiduciari"),
    **_define(ServiceKind.inspection, "intervento", "Ispezioni"),
    **_define(ServiceKind.intervention, "ora", "Intervento"),
    # one-off jobs billed per occurrence
    **_define(ServiceKind.flat_fee, "intervento", "Bonifiche", "Gestione Chiavi", "Apertura/Chiusura"),
    **_define(
        ServiceKind.flat_fee,
        "mese",
        "Canone",
        "Disponibilità Pronto Intervento",
        "Videosorveglianza",
        "Impianto Allarme",
        "Bidirezionale",
        "Monodirezionale",
        "Tenuta Chiavi",
    ),
}


DAY_LABELS: Mapping[str, ScheduleDay] = {
    **{day.value.lower(): day for day in ScheduleDay},
    "lunedì": ScheduleDay.monday,
    "lunedi": ScheduleDay.monday,
    "martedì": ScheduleDay.tuesday,
    "martedi": ScheduleDay.tuesday,
    "mercoledì": ScheduleDay.wednesday,
    "mercoledi": ScheduleDay.wednesday,
    "giovedì": ScheduleDay.thursday,
    "giovedi": ScheduleDay.thursday,
    "venerdì": ScheduleDay.friday,
    "venerdi": ScheduleDay.friday,
    "sabato": ScheduleDay.saturday,
    "domenica": ScheduleDay.sunday,
    "festivi": ScheduleDay.holiday,
    "festivo": ScheduleDay.holiday,
    "holidays": ScheduleDay.holiday,
}


# Placeholder values the forms use for "no selection".
SENTINEL_VALUES: frozenset[str] = frozenset(
    {"", "none", "null", "undefined", "__none__", "nessuno", "dyad_empty_value"}
)


MISSING_TARIFF_REASON = "Nessuna tariffa corrispondente trovata per il periodo e il tipo di servizio."


def blank_to_none(value: Any) -> Any:
    """Map the forms' "no selection" placeholders to ``None``."""
    if isinstance(value, str) and value.strip().lower() in SENTINEL_VALUES:
        return None
    return value


def definition_for(label: str) -> ServiceDefinition:
    try:
        return SERVICE_CATALOG[label]
    except KeyError:
        raise CostRequestError(f"Unknown service type {label!r}") from None


def kind_for(label: str) -> ServiceKind:
    return definition_for(label).kind


def unit_of_measure_for(label: str) -> str:
    definition = SERVICE_CATALOG.get(label)
    return definition.unit_of_measure if definition else ""


def day_for_label(label: str) -> ScheduleDay:
    try:
        return DAY_LABELS[label.strip().lower()]
    except KeyError:
        raise CostRequestError(f"Unknown schedule day {label!r}") from None


__all__ = [
    "DAY_LABELS",
    "MISSING_TARIFF_REASON",
    "SENTINEL_VALUES",
    "SERVICE_CATALOG",
    "ServiceDefinition",
    "blank_to_none",
    "day_for_label",
    "definition_for",
    "kind_for",
    "unit_of_measure_for",
]
