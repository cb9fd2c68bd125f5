"""Port interfaces for submission adapters.

The core builds metric data; adapters implementing these protocols deliver
it. The core depends only on these interfaces, not on boto3.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from cloudwatchput.core.models import MetricDatum


@runtime_checkable
class MetricsSubmitPort(Protocol):
    """Port for submitting metric data to a metrics backend.

    Examples: CloudWatchSubmitter, InMemorySubmitter.
    """

    def submit(self, namespace: str, metric_data: Sequence[MetricDatum]) -> None:
        """Submit metric data under a namespace.

        Args:
            namespace: Backend namespace (e.g., "MyApp/Requests").
            metric_data: Data points built for one flush.

        Raises:
            SubmissionFailure: If the backend did not accept the data.
        """
        ...
