"""Shared test fixtures for all test modules."""

from typing import Any

import pytest

from cloudwatchput.adapters.submitters.in_memory import InMemorySubmitter
from cloudwatchput.core.credentials import CredentialEnvironment

# Variables that would let boto3 or the resolver pick up the host's setup
_AWS_ENV_VARS = (
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
    "AWS_PROFILE",
    "AWS_REGION",
    "AWS_DEFAULT_REGION",
    "AWS_CONTAINER_CREDENTIALS_RELATIVE_URI",
    "AWS_CONTAINER_CREDENTIALS_FULL_URI",
    "AWS_SHARED_CREDENTIALS_FILE",
    "AWS_CONFIG_FILE",
)


@pytest.fixture(autouse=True)
def _clear_aws_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove AWS env vars so tests never see real credentials."""
    for var in _AWS_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("AWS_CONFIG_FILE", "/nonexistent/aws/config")
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", "/nonexistent/aws/credentials")


@pytest.fixture
def empty_environment() -> CredentialEnvironment:
    """Environment without a container endpoint or region."""
    return CredentialEnvironment()


@pytest.fixture
def container_environment() -> CredentialEnvironment:
    """Environment of an ECS task with a container credentials endpoint."""
    return CredentialEnvironment(
        container_credentials_relative_uri="/v2/credentials/0c7f2a1e",
        region="eu-west-1",
    )


@pytest.fixture
def submitter() -> InMemorySubmitter:
    """Fixture providing an empty in-memory submitter."""
    return InMemorySubmitter()


@pytest.fixture
def output_mapping() -> dict[str, Any]:
    """Minimal valid output configuration mapping."""
    return {
        "namespace": "MyApp/Requests",
        "metric_name": "Latency",
        "unit": "Milliseconds",
        "value_key": "latency_ms",
    }


@pytest.fixture
def make_chunk():
    """Factory fixture building a chunk from (timestamp, value) pairs.

    Usage:
        chunk = make_chunk([(100, "5"), (200, 7)], key="v", host="web1")
    """

    def _chunk(
        pairs: list[tuple[int, Any]], key: str = "v", **fields: Any
    ) -> list[tuple[int, dict[str, Any]]]:
        return [(ts, {key: value, **fields}) for ts, value in pairs]

    return _chunk
