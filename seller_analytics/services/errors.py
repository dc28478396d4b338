"""Analytics error taxonomy.

Client errors (bad date input, unsupported metric type) are raised before any
data is read. Data-store failures are wrapped in ``CollaboratorUnavailable``.
Malformed per-record data is never an error; it is excluded from aggregates.
"""

from __future__ import annotations

from typing import Optional


class AnalyticsError(Exception):
    """Base class for analytics engine errors."""


class InvalidDateFormat(AnalyticsError, ValueError):
    """A month boundary was not a valid ``YYYY-MM`` string."""

    def __init__(self, value: object, reason: str = "expected YYYY-MM"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid month '{value}': {reason}")


class UnknownMetricType(AnalyticsError, ValueError):
    """Requested analytics type is not part of the supported set."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid analytics type: {value!r}")


class CollaboratorUnavailable(AnalyticsError):
    """The order/product data store failed to answer."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Data source failed during {operation}{detail}")
