"""CloudWatch submission adapter."""

import logging
from collections.abc import Sequence
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from cloudwatchput.core.encoding.cloudwatch import (
    MAX_DATUMS_PER_REQUEST,
    encode_metric_data,
)
from cloudwatchput.core.errors import SubmissionFailure
from cloudwatchput.core.models import MetricDatum

logger = logging.getLogger(__name__)


class CloudWatchSubmitter:
    """boto3 implementation of MetricsSubmitPort.

    Sends metric data with PutMetricData, split into requests of at most
    ``batch_size`` datums. Retries are left to the client's own retry
    configuration; a batch that still fails aborts the submission.

    Example:
        ```python
        client = create_cloudwatch_client(resolve(credentials), "eu-west-1")
        submitter = CloudWatchSubmitter(client)
        submitter.submit("MyApp", metric_data)
        ```
    """

    def __init__(self, client: Any, batch_size: int = MAX_DATUMS_PER_REQUEST) -> None:
        self.client = client
        self.batch_size = batch_size

    def submit(self, namespace: str, metric_data: Sequence[MetricDatum]) -> None:
        """Send metric data to CloudWatch.

        Raises:
            SubmissionFailure: If any PutMetricData request fails.
        """
        batches = 0
        for batch in encode_metric_data(metric_data, self.batch_size):
            try:
                self.client.put_metric_data(Namespace=namespace, MetricData=batch)
            except (BotoCoreError, ClientError) as e:
                logger.exception(
                    "PutMetricData failed for namespace %r after %d of %d datums",
                    namespace,
                    batches * self.batch_size,
                    len(metric_data),
                )
                raise SubmissionFailure(f"PutMetricData failed: {e}") from e
            batches += 1
        logger.debug(
            "Submitted %d datums to %r in %d requests",
            len(metric_data),
            namespace,
            batches,
        )
