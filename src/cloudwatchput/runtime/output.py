"""CloudWatch output: the start/write entry points used by the buffer.

``start`` resolves credentials and builds the submitter exactly once.
``write`` turns one chunk into metric data and submits it. Chunks may be
written concurrently from several flush threads once ``start`` returned.
"""

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from cloudwatchput.adapters.aws.cloudwatch import CloudWatchSubmitter
from cloudwatchput.adapters.aws.session import create_cloudwatch_client
from cloudwatchput.config import OutputConfig
from cloudwatchput.core.credentials import (
    CredentialConfiguration,
    CredentialEnvironment,
    resolve,
)
from cloudwatchput.core.errors import OutputNotStarted
from cloudwatchput.core.metrics import build
from cloudwatchput.core.models import Chunk, MetricDatum
from cloudwatchput.core.ports import MetricsSubmitPort

logger = logging.getLogger(__name__)

SubmitterFactory = Callable[[CredentialConfiguration, OutputConfig], MetricsSubmitPort]


def cloudwatch_submitter(
    credentials: CredentialConfiguration, config: OutputConfig
) -> MetricsSubmitPort:
    """Default submitter factory: a boto3 CloudWatch client."""
    client = create_cloudwatch_client(
        credentials,
        region=config.region,
        proxy_uri=config.proxy_uri,
        http_wire_trace=config.http_wire_trace,
    )
    return CloudWatchSubmitter(client)


class CloudWatchPutOutput:
    """Builds metric data from chunks and submits it to CloudWatch.

    Example:
        ```python
        output = CloudWatchPutOutput.from_mapping({
            "namespace": "MyApp",
            "metric_name": "Latency",
            "unit": "Milliseconds",
            "value_key": "latency_ms",
        })
        output.start()
        output.write([(1702300000, {"latency_ms": "12.5"})])
        ```
    """

    def __init__(
        self,
        config: OutputConfig,
        environment: CredentialEnvironment | None = None,
        submitter_factory: SubmitterFactory = cloudwatch_submitter,
    ) -> None:
        """Initialize the output.

        Args:
            config: Validated output settings.
            environment: Process environment used for credential resolution.
                Defaults to the current process environment at ``start``.
            submitter_factory: Builds the submitter from resolved credentials.
        """
        self.config = config
        self._environment = environment
        self._submitter_factory = submitter_factory
        self._submitter: MetricsSubmitPort | None = None
        self._start_lock = threading.Lock()

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, Any],
        environment: CredentialEnvironment | None = None,
        submitter_factory: SubmitterFactory = cloudwatch_submitter,
    ) -> "CloudWatchPutOutput":
        """Create an output from a configuration mapping."""
        if environment is None:
            environment = CredentialEnvironment.from_environ()
        config = OutputConfig.from_mapping(mapping, environment)
        return cls(config, environment, submitter_factory)

    @property
    def started(self) -> bool:
        """Return True once the submitter has been created."""
        return self._submitter is not None

    def start(self) -> None:
        """Resolve credentials and create the submitter.

        Safe to call more than once; only the first successful call has an
        effect. If it fails, the output stays unstarted and ``start`` may
        be retried.
        """
        with self._start_lock:
            if self._submitter is not None:
                return
            environment = self._environment or CredentialEnvironment.from_environ()
            credentials = resolve(self.config.credentials, environment)
            self._submitter = self._submitter_factory(credentials, self.config)
            logger.info(
                "CloudWatch output started for %s/%s",
                self.config.namespace,
                self.config.metric_name,
            )

    def build_metric_data(self, chunk: Chunk) -> list[MetricDatum]:
        """Build the metric data for one chunk without submitting it."""
        return build(
            chunk,
            self.config.use_statistic_sets,
            self.config.dimensions,
            self.config.value_key,
            self.config.metric_name,
            self.config.unit,
            self.config.storage_resolution,
            self.config.strict_values,
        )

    def write(self, chunk: Chunk) -> int:
        """Build and submit metric data for one chunk.

        Args:
            chunk: (epoch seconds, record) pairs.

        Returns:
            Number of datums submitted.

        Raises:
            OutputNotStarted: If ``start`` has not completed.
            CoercionFailure: In strict mode, for a non-numeric value.
            SubmissionFailure: If the backend call failed. The chunk should
                be retried by the caller.
        """
        submitter = self._submitter
        if submitter is None:
            raise OutputNotStarted("start() must complete before write()")
        metric_data = self.build_metric_data(chunk)
        if not metric_data:
            return 0
        submitter.submit(self.config.namespace, metric_data)
        return len(metric_data)
