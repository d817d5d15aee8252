# Overview: Error taxonomy for the metrics and reporting engine.

from __future__ import annotations


class MetricsError(Exception):
    """Base class for metrics engine failures surfaced to callers."""
    http_status = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidPeriod(MetricsError, ValueError):
    """Unknown period token or malformed explicit bounds. Always a caller error."""
    http_status = 400


class PartialAggregationFailure(MetricsError):
    """
    One or more sub-queries failed after exhausting their retry budget.

    details["failed"] lists the sub-query names in a stable order.
    """
    http_status = 502


class DataStoreUnavailable(MetricsError):
    """The data store could not be reached at all. Never zeroed out."""
    http_status = 503


class MetricsTimeout(MetricsError):
    """The caller's request deadline fired before every sub-query completed."""
    http_status = 504
