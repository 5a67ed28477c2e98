"""
Error taxonomy for the attention scoring and insight engine.

Only InvalidTrendRequest (UnknownMetric / UnknownWindow) is meant to reach a
caller; the API layer turns it into HTTP 400. Every other error has a local
fallback:

- DataUnavailable: one check or signal lacks usable data and is skipped
- ComputeTimeout: a full insight computation ran past its bound; the cache
  serves the previous bundle or an empty one
- InsightComputeError: every generator of a bundle failed; same fallback

Contradictory SystemSettings are never raised as errors. The scorer clamps
them to a safe range instead (see services.attention.sanitize_settings).
"""


class InsightEngineError(Exception):
    """Base class for errors raised inside the insight engine."""


class DataUnavailable(InsightEngineError):
    """A metric needed by a single check is missing or degenerate."""

    def __init__(self, metric: str, reason: str = "not available"):
        self.metric = metric
        self.reason = reason
        super().__init__(f"{metric}: {reason}")


class InvalidTrendRequest(InsightEngineError, ValueError):
    """The caller asked for a trend series that cannot be produced."""


class UnknownMetric(InvalidTrendRequest):
    def __init__(self, metric: str, supported: list):
        self.metric = metric
        self.supported = supported
        super().__init__(
            f"Unknown metric: {metric}. Supported metrics: {supported}"
        )


class UnknownWindow(InvalidTrendRequest):
    def __init__(self, window: str, supported: list):
        self.window = window
        self.supported = supported
        super().__init__(
            f"Unknown window: {window}. Supported windows: {supported}"
        )


class ComputeTimeout(InsightEngineError):
    """The insight computation exceeded its overall timeout."""

    def __init__(self, key: str, timeout_seconds: float):
        self.key = key
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Computation for '{key}' exceeded {timeout_seconds:.1f}s"
        )


class InsightComputeError(InsightEngineError):
    """No generator of an insight bundle produced a result."""


__all__ = [
    "InsightEngineError",
    "DataUnavailable",
    "InvalidTrendRequest",
    "UnknownMetric",
    "UnknownWindow",
    "ComputeTimeout",
    "InsightComputeError",
]
