"""Build metric data from record batches and submit it to CloudWatch."""

from cloudwatchput.config import OutputConfig
from cloudwatchput.core.credentials import (
    CredentialEnvironment,
    CredentialsConfig,
    resolve,
)
from cloudwatchput.core.errors import (
    CloudWatchPutError,
    CoercionFailure,
    ConfigurationConflict,
    ConfigurationError,
    EmptyAggregationWindow,
    InvalidRecord,
    OutputNotStarted,
    SubmissionFailure,
)
from cloudwatchput.core.metrics import build, coerce_value
from cloudwatchput.core.models import (
    Dimension,
    DimensionSpec,
    MetricDatum,
    StatisticValues,
)
from cloudwatchput.runtime.output import CloudWatchPutOutput

__all__ = [
    "CloudWatchPutError",
    "CloudWatchPutOutput",
    "CoercionFailure",
    "ConfigurationConflict",
    "ConfigurationError",
    "CredentialEnvironment",
    "CredentialsConfig",
    "Dimension",
    "DimensionSpec",
    "EmptyAggregationWindow",
    "InvalidRecord",
    "MetricDatum",
    "OutputConfig",
    "OutputNotStarted",
    "StatisticValues",
    "SubmissionFailure",
    "build",
    "coerce_value",
    "resolve",
]
