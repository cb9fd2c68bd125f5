"""In-memory submission adapter."""

from collections.abc import Sequence
from dataclasses import dataclass

from cloudwatchput.core.errors import SubmissionFailure
from cloudwatchput.core.models import MetricDatum


@dataclass(frozen=True)
class Submission:
    """One recorded call to ``submit``."""

    namespace: str
    metric_data: tuple[MetricDatum, ...]


class InMemorySubmitter:
    """In-memory implementation of MetricsSubmitPort.

    Records every submission in a list instead of sending it. Suitable for
    testing and dry runs where no backend is available.

    Args:
        fail_with: If set, every submit raises SubmissionFailure with this
            message and records nothing.
    """

    def __init__(self, fail_with: str | None = None) -> None:
        self._submissions: list[Submission] = []
        self._fail_with = fail_with

    def submit(self, namespace: str, metric_data: Sequence[MetricDatum]) -> None:
        """Record a submission."""
        if self._fail_with is not None:
            raise SubmissionFailure(self._fail_with)
        self._submissions.append(Submission(namespace, tuple(metric_data)))

    @property
    def submissions(self) -> list[Submission]:
        """All recorded submissions, oldest first."""
        return list(self._submissions)

    def metric_data(self) -> list[MetricDatum]:
        """All recorded datums across submissions, in submission order."""
        return [d for s in self._submissions for d in s.metric_data]
