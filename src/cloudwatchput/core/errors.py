"""Error types for metric building, credential resolution and submission."""


class CloudWatchPutError(Exception):
    """Base exception for all cloudwatchput errors."""


class ConfigurationError(CloudWatchPutError, ValueError):
    """Raised when the output configuration is invalid.

    Examples:
    - Missing namespace, metric name, unit or value key
    - Unknown unit or unsupported storage resolution
    - Unknown option inside a credential section
    """


class ConfigurationConflict(ConfigurationError):
    """Raised when more than one credential strategy is configured."""

    def __init__(self, strategies: list[str]) -> None:
        self.strategies = strategies
        super().__init__(
            "Only one credential strategy may be configured, got: "
            + ", ".join(strategies)
        )


class InvalidRecord(CloudWatchPutError, ValueError):
    """Raised when a record cannot be turned into a metric datum."""


class CoercionFailure(InvalidRecord):
    """Raised when a record's value field is not a usable number."""

    def __init__(self, raw: object) -> None:
        self.raw = raw
        super().__init__(f"Cannot interpret {raw!r} as a finite number")


class EmptyAggregationWindow(CloudWatchPutError):
    """Raised when statistics are requested over zero samples."""


class SubmissionFailure(CloudWatchPutError):
    """Raised when the backend rejects or fails to receive a submission."""


class OutputNotStarted(CloudWatchPutError, RuntimeError):
    """Raised when a chunk is written before the output has started."""
