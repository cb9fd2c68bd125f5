"""Encoder for the CloudWatch PutMetricData wire format."""

from collections.abc import Iterator, Sequence
from typing import Any

from cloudwatchput.core.models import MetricDatum

# PutMetricData accepts at most this many datums per request
MAX_DATUMS_PER_REQUEST = 1000


def encode_datum(datum: MetricDatum) -> dict[str, Any]:
    """Encode a datum as a PutMetricData ``MetricDatum`` structure.

    Only one of ``Value`` and ``StatisticValues`` appears, matching which
    one the datum carries.
    """
    encoded: dict[str, Any] = {
        "MetricName": datum.metric_name,
        "Dimensions": [
            {"Name": d.name, "Value": str(d.value)} for d in datum.dimensions
        ],
        "Timestamp": datum.timestamp,
        "Unit": datum.unit,
        "StorageResolution": datum.storage_resolution,
    }
    if datum.statistic_values is not None:
        stats = datum.statistic_values
        encoded["StatisticValues"] = {
            "SampleCount": float(stats.sample_count),
            "Sum": stats.sum,
            "Minimum": stats.minimum,
            "Maximum": stats.maximum,
        }
    else:
        encoded["Value"] = datum.value
    return encoded


def encode_metric_data(
    metric_data: Sequence[MetricDatum],
    batch_size: int = MAX_DATUMS_PER_REQUEST,
) -> Iterator[list[dict[str, Any]]]:
    """Encode datums in request-sized batches.

    Args:
        metric_data: Datums to encode.
        batch_size: Maximum datums per batch.

    Yields:
        Lists of encoded datums, each at most ``batch_size`` long.
        Nothing is yielded for empty input.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    for start in range(0, len(metric_data), batch_size):
        yield [encode_datum(d) for d in metric_data[start : start + batch_size]]
