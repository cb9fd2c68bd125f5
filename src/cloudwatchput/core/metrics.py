"""Metric builder: turns a chunk of records into metric data.

Two modes are supported. Per-record mode emits one datum per record, with
dimensions looked up inside that record. Statistic set mode collapses the
whole chunk into a single datum carrying sample count, sum, minimum and
maximum, with static dimension values.

Value coercion policy: a value field that is missing, not numeric or beyond
the magnitude PutMetricData accepts is submitted as 0.0 and reported with
a warning. This keeps one malformed record from failing an otherwise valid
flush, at the cost of silently skewing sums and minimums. Pass
``strict=True`` to raise CoercionFailure instead.
"""

import logging
import math
import re
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from cloudwatchput.core.errors import (
    CoercionFailure,
    EmptyAggregationWindow,
    InvalidRecord,
)
from cloudwatchput.core.models import (
    Chunk,
    Dimension,
    DimensionSpec,
    MetricDatum,
    Record,
    StatisticValues,
)

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_RESOLUTION = 60

# PutMetricData rejects values outside -2^360..2^360
MAX_VALUE_MAGNITUDE = 2.0**360

# Leading numeric part of a string, e.g. "12.5" in "12.5ms"
_NUMERIC_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def coerce_value(raw: object) -> float:
    """Interpret a record field as a finite float.

    Numbers are converted directly. Strings are parsed as a whole first and
    then by their leading numeric part, so "42", " 4.2e1" and "42ms" all give
    42.0.

    Args:
        raw: The field value taken from a record.

    Returns:
        The value as a finite float within CloudWatch's accepted range.

    Raises:
        CoercionFailure: For None, booleans, NaN, infinities, magnitudes
            above MAX_VALUE_MAGNITUDE and strings without a numeric prefix.
    """
    if isinstance(raw, bool) or raw is None:
        raise CoercionFailure(raw)
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            raise CoercionFailure(raw) from None
    elif isinstance(raw, str):
        try:
            value = float(raw)
        except ValueError:
            match = _NUMERIC_PREFIX.match(raw)
            if match is None:
                raise CoercionFailure(raw) from None
            value = float(match.group(1))
    else:
        raise CoercionFailure(raw)
    if not math.isfinite(value) or abs(value) > MAX_VALUE_MAGNITUDE:
        raise CoercionFailure(raw)
    return value


def epoch_to_datetime(timestamp: int | float) -> datetime:
    """Convert epoch seconds to a timezone-aware UTC datetime."""
    return datetime.fromtimestamp(timestamp, tz=UTC)


def statistic_values(values: Sequence[float]) -> StatisticValues:
    """Summarize samples as count, sum, minimum and maximum.

    Raises:
        EmptyAggregationWindow: If ``values`` is empty.
        InvalidRecord: If the sum is too large to represent as a float.
    """
    if not values:
        raise EmptyAggregationWindow("Cannot summarize an empty set of samples")
    try:
        total = math.fsum(values)
    except OverflowError as e:
        raise InvalidRecord(f"Sum of {len(values)} samples overflows: {e}") from e
    return StatisticValues(
        sample_count=len(values),
        sum=total,
        minimum=min(values),
        maximum=max(values),
    )


class _ValueReader:
    """Reads value fields under the coercion policy, counting fallbacks."""

    def __init__(self, value_key: str, strict: bool) -> None:
        self.value_key = value_key
        self.strict = strict
        self.fallbacks = 0

    def read(self, record: Record) -> float:
        try:
            return coerce_value(record.get(self.value_key))
        except CoercionFailure:
            if self.strict:
                raise
            self.fallbacks += 1
            return 0.0

    def report(self, total: int) -> None:
        if self.fallbacks:
            logger.warning(
                "%d of %d records had a non-numeric %r field, submitted as 0.0",
                self.fallbacks,
                total,
                self.value_key,
            )


def _base_metric_data(
    metric_name: str, unit: str, storage_resolution: int
) -> dict[str, Any]:
    return {
        "metric_name": metric_name,
        "unit": unit,
        "storage_resolution": storage_resolution,
    }


def _record_dimensions(
    dimension_specs: Sequence[DimensionSpec], record: Record
) -> tuple[Dimension, ...]:
    """Look up each dimension's key in the record; absent values are dropped."""
    dimensions = []
    for spec in dimension_specs:
        raw = record.get(spec.key) if spec.key is not None else None
        if raw is not None:
            dimensions.append(Dimension(name=spec.name, value=str(raw)))
    return tuple(dimensions)


def _static_dimensions(
    dimension_specs: Sequence[DimensionSpec],
) -> tuple[Dimension, ...]:
    return tuple(
        Dimension(name=spec.name, value=spec.value)
        for spec in dimension_specs
        if spec.value is not None
    )


def build_metric_data(
    chunk: Chunk,
    dimension_specs: Sequence[DimensionSpec],
    value_key: str,
    metric_name: str,
    unit: str,
    storage_resolution: int = DEFAULT_STORAGE_RESOLUTION,
    strict: bool = False,
) -> list[MetricDatum]:
    """Build one datum per record in the chunk.

    Args:
        chunk: (epoch seconds, record) pairs.
        dimension_specs: Dimensions to look up by ``key`` in every record.
        value_key: Record field holding the metric value.
        metric_name: Metric name for every datum.
        unit: Backend unit name.
        storage_resolution: Series granularity in seconds.
        strict: Raise CoercionFailure instead of falling back to 0.0.

    Returns:
        List of MetricDatum objects, one per input pair, in chunk order.
    """
    reader = _ValueReader(value_key, strict)
    base = _base_metric_data(metric_name, unit, storage_resolution)
    metric_data = [
        MetricDatum(
            **base,
            timestamp=epoch_to_datetime(timestamp),
            dimensions=_record_dimensions(dimension_specs, record),
            value=reader.read(record),
        )
        for timestamp, record in chunk
    ]
    reader.report(len(metric_data))
    return metric_data


def build_statistic_metric_data(
    chunk: Chunk,
    dimension_specs: Sequence[DimensionSpec],
    value_key: str,
    metric_name: str,
    unit: str,
    storage_resolution: int = DEFAULT_STORAGE_RESOLUTION,
    strict: bool = False,
) -> list[MetricDatum]:
    """Collapse the chunk into a single statistic set datum.

    The datum is stamped with the latest timestamp in the chunk and carries
    the static ``value`` of each ``DimensionSpec``.

    Returns:
        A one-element list, or an empty list when the chunk has no records.
    """
    reader = _ValueReader(value_key, strict)
    values: list[float] = []
    timestamps: list[int | float] = []
    for timestamp, record in chunk:
        values.append(reader.read(record))
        timestamps.append(timestamp)

    try:
        summary = statistic_values(values)
    except EmptyAggregationWindow:
        logger.warning("Skipping statistic set for %r: chunk is empty", metric_name)
        return []
    reader.report(len(values))

    return [
        MetricDatum(
            **_base_metric_data(metric_name, unit, storage_resolution),
            timestamp=epoch_to_datetime(max(timestamps)),
            dimensions=_static_dimensions(dimension_specs),
            statistic_values=summary,
        )
    ]


def build(
    chunk: Chunk,
    use_statistic_sets: bool,
    dimension_specs: Sequence[DimensionSpec],
    value_key: str,
    metric_name: str,
    unit: str,
    storage_resolution: int = DEFAULT_STORAGE_RESOLUTION,
    strict: bool = False,
) -> list[MetricDatum]:
    """Build metric data for one flush in the selected mode."""
    builder = build_statistic_metric_data if use_statistic_sets else build_metric_data
    return builder(
        chunk,
        dimension_specs,
        value_key,
        metric_name,
        unit,
        storage_resolution,
        strict,
    )
