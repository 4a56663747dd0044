"""Exception hierarchy for the metrics dashboard."""

from typing import Optional


class MetricsDashboardError(Exception):
    """Base class for all dashboard errors."""


class ConfigMissing(MetricsDashboardError):
    """A required resource identifier or dimension value is absent.

    Raised while building queries, before any network call is made.
    """

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Missing required value for {field}")


class FetchFailure(MetricsDashboardError):
    """The metrics source (or the RDS describe call) rejected a request."""

    def __init__(self, batch_id: str, message: str, error_code: Optional[str] = None):
        self.batch_id = batch_id
        self.error_code = error_code
        detail = f" ({error_code})" if error_code else ""
        super().__init__(f"Fetch failed for batch {batch_id}{detail}: {message}")


class MalformedResult(MetricsDashboardError):
    """A raw series result has missing or length-mismatched arrays."""

    def __init__(self, series_id: str, reason: str):
        self.series_id = series_id
        self.reason = reason
        super().__init__(f"Malformed result for {series_id}: {reason}")
