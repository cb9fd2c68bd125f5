"""Core domain models for metric submission."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

# A record is one event's fields, as handed over by the buffer.
Record = Mapping[str, str | int | float | bool | None]

# One flush unit: (epoch seconds, record) pairs in arrival order.
Chunk = Sequence[tuple[int | float, Record]]


@dataclass(frozen=True)
class DimensionSpec:
    """A configured dimension.

    Attributes:
        name: Dimension name sent to the backend.
        key: Record field to read the value from (per-record mode).
        value: Static dimension value (aggregated mode).
    """

    name: str
    key: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class Dimension:
    """A resolved name/value pair attached to one datum."""

    name: str
    value: str


@dataclass(frozen=True)
class StatisticValues:
    """Four-number summary of a set of samples.

    Attributes:
        sample_count: Number of samples, always >= 1.
        sum: Sum of all samples.
        minimum: Smallest sample.
        maximum: Largest sample.
    """

    sample_count: int
    sum: float
    minimum: float
    maximum: float

    def __post_init__(self) -> None:
        if self.sample_count < 1:
            raise ValueError("sample_count must be at least 1")
        if self.minimum > self.maximum:
            raise ValueError("minimum must not exceed maximum")


@dataclass(frozen=True)
class MetricDatum:
    """A single data point ready for submission.

    Exactly one of ``value`` and ``statistic_values`` is set.

    Attributes:
        metric_name: Metric name (e.g., "RequestLatency").
        unit: Backend unit name (e.g., "Milliseconds").
        storage_resolution: Series granularity in seconds (1 or 60).
        timestamp: Timezone-aware UTC timestamp of the point.
        dimensions: Name/value pairs for slicing the metric.
        value: Raw sample value (per-record mode).
        statistic_values: Aggregate summary (statistic set mode).
    """

    metric_name: str
    unit: str
    storage_resolution: int
    timestamp: datetime
    dimensions: tuple[Dimension, ...] = field(default_factory=tuple)
    value: float | None = None
    statistic_values: StatisticValues | None = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.statistic_values is None):
            raise ValueError("exactly one of value and statistic_values must be set")
