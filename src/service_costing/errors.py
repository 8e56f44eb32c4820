from __future__ import annotations


class ServiceCostingError(Exception):
    """Base class for errors raised by the costing engine."""


class CostRequestError(ServiceCostingError, ValueError):
    """The caller supplied a request the engine cannot evaluate."""


class RateLookupError(ServiceCostingError):
    """A rate-card or holiday dependency could not be reached.

    Distinct from a missing tariff, which is reported as ``None``.
    """


__all__ = ["ServiceCostingError", "CostRequestError", "RateLookupError"]
