"""AWS adapters built on boto3."""

from cloudwatchput.adapters.aws.cloudwatch import CloudWatchSubmitter
from cloudwatchput.adapters.aws.session import (
    create_cloudwatch_client,
    create_session,
)

__all__ = [
    "CloudWatchSubmitter",
    "create_cloudwatch_client",
    "create_session",
]
