"""boto3 session and client construction from resolved credentials.

Each ``CredentialConfiguration`` variant maps onto a botocore credential
provider. The provider is installed as the only entry of the session's
credential resolver, so a strategy that yields nothing fails loudly on the
first request instead of silently falling back to another source.
"""

import logging
import os
from collections.abc import Callable
from typing import Any

import boto3
import botocore.session
from botocore.config import Config
from botocore.credentials import (
    ContainerMetadataFetcher,
    ContainerProvider,
    CredentialProvider,
    CredentialResolver,
    DeferredRefreshableCredentials,
    InstanceMetadataFetcher,
    InstanceMetadataProvider,
    SharedCredentialProvider,
    create_assume_role_refresher,
)
from botocore.utils import METADATA_BASE_URL

from cloudwatchput.core.credentials import (
    AssumeRoleCredentials,
    ContainerCredentials,
    CredentialConfiguration,
    DefaultCredentials,
    InstanceProfileCredentials,
    SharedFileCredentials,
    StaticCredentials,
)

logger = logging.getLogger(__name__)

DEFAULT_METADATA_IP = "169.254.169.254"
DEFAULT_METADATA_PORT = 80
DEFAULT_SHARED_CREDENTIALS_PATH = "~/.aws/credentials"

# snake_case option name -> STS AssumeRole parameter
_ASSUME_ROLE_PARAMS = {
    "role_arn": "RoleArn",
    "role_session_name": "RoleSessionName",
    "policy": "Policy",
    "duration_seconds": "DurationSeconds",
    "external_id": "ExternalId",
}

StsClientFactory = Callable[[str | None], Any]


def _default_sts_client(region: str | None) -> Any:
    """Create an STS client authenticated by the default credential chain."""
    if region is None:
        return boto3.client("sts")
    return boto3.client("sts", region_name=region)


class AssumeRoleProvider(CredentialProvider):
    """Credential provider that assumes an IAM role through STS.

    Credentials are fetched lazily on first use and refreshed before they
    expire.
    """

    METHOD = "assume-role"
    CANONICAL_NAME = "custom-assume-role"

    def __init__(
        self,
        params: dict[str, Any],
        sts_region: str | None = None,
        sts_client_factory: StsClientFactory = _default_sts_client,
    ) -> None:
        super().__init__()
        self.params = params
        self.sts_region = sts_region
        self._sts_client_factory = sts_client_factory

    def load(self) -> DeferredRefreshableCredentials:
        client = self._sts_client_factory(self.sts_region)
        return DeferredRefreshableCredentials(
            refresh_using=create_assume_role_refresher(client, self.params),
            method=self.METHOD,
        )


def assume_role_params(options: dict[str, Any]) -> dict[str, Any]:
    """Map resolved assume-role options onto STS AssumeRole parameters."""
    return {_ASSUME_ROLE_PARAMS[name]: value for name, value in options.items()}


def _metadata_timeout(options: dict[str, Any], default: float) -> float:
    timeouts = [
        options[name]
        for name in ("http_open_timeout", "http_read_timeout")
        if name in options
    ]
    return float(max(timeouts)) if timeouts else default


def instance_metadata_provider(options: dict[str, Any]) -> InstanceMetadataProvider:
    """Build an EC2 instance metadata provider from resolved options.

    ``retries`` counts attempts after the first one. botocore uses a single
    timeout for the whole request, so the larger of the two configured
    timeouts is used.
    """
    base_url = METADATA_BASE_URL
    if "ip_address" in options or "port" in options:
        base_url = "http://{}:{}/".format(
            options.get("ip_address", DEFAULT_METADATA_IP),
            options.get("port", DEFAULT_METADATA_PORT),
        )
    fetcher = InstanceMetadataFetcher(
        timeout=_metadata_timeout(options, 1.0),
        num_attempts=options.get("retries", 0) + 1,
        base_url=base_url,
    )
    return InstanceMetadataProvider(iam_role_fetcher=fetcher)


def container_provider(options: dict[str, Any]) -> ContainerProvider:
    """Build an ECS container credentials provider from resolved options.

    The container endpoint address is fixed by ECS, so ``ip_address`` and
    ``port`` do not apply.
    """
    fetcher = ContainerMetadataFetcher()
    fetcher.TIMEOUT_SECONDS = _metadata_timeout(
        options, ContainerMetadataFetcher.TIMEOUT_SECONDS
    )
    if "retries" in options:
        fetcher.RETRY_ATTEMPTS = options["retries"] + 1
    return ContainerProvider(fetcher=fetcher)


def shared_credentials_provider(options: dict[str, Any]) -> SharedCredentialProvider:
    """Build a shared credentials file provider from resolved options."""
    path = options.get("path", DEFAULT_SHARED_CREDENTIALS_PATH)
    if "profile_name" in options:
        profile_name = options["profile_name"]
    else:
        profile_name = os.environ.get("AWS_PROFILE", "default")
    return SharedCredentialProvider(
        creds_filename=os.path.expanduser(path), profile_name=profile_name
    )


def build_credential_provider(
    configuration: CredentialConfiguration,
    sts_client_factory: StsClientFactory = _default_sts_client,
) -> CredentialProvider | None:
    """Return the botocore provider for a resolved configuration.

    Returns:
        A provider, or None for static keys and the default chain, which
        boto3 handles natively.
    """
    match configuration:
        case AssumeRoleCredentials(options=options, sts_region=region):
            return AssumeRoleProvider(
                assume_role_params(options), region, sts_client_factory
            )
        case InstanceProfileCredentials(options=options):
            return instance_metadata_provider(options)
        case ContainerCredentials(options=options):
            return container_provider(options)
        case SharedFileCredentials(options=options):
            return shared_credentials_provider(options)
        case _:
            return None


def create_session(
    configuration: CredentialConfiguration,
    region: str | None = None,
    sts_client_factory: StsClientFactory = _default_sts_client,
) -> boto3.Session:
    """Create a boto3 Session authenticated as the configuration describes.

    Args:
        configuration: Output of ``resolve``.
        region: Region for clients created from the session.
        sts_client_factory: Creates the STS client used for assume-role.

    Returns:
        boto3.Session instance
    """
    if isinstance(configuration, StaticCredentials):
        return boto3.Session(
            aws_access_key_id=configuration.access_key_id,
            aws_secret_access_key=configuration.secret_access_key,
            region_name=region,
        )
    if isinstance(configuration, DefaultCredentials):
        return boto3.Session(region_name=region)

    provider = build_credential_provider(configuration, sts_client_factory)
    core_session = botocore.session.get_session()
    core_session.register_component(
        "credential_provider", CredentialResolver(providers=[provider])
    )
    return boto3.Session(botocore_session=core_session, region_name=region)


def create_cloudwatch_client(
    configuration: CredentialConfiguration,
    region: str | None = None,
    proxy_uri: str | None = None,
    http_wire_trace: bool = False,
    sts_client_factory: StsClientFactory = _default_sts_client,
) -> Any:
    """Create the CloudWatch client used for submissions.

    Args:
        configuration: Output of ``resolve``.
        region: CloudWatch region.
        proxy_uri: HTTP(S) proxy for all requests, if any.
        http_wire_trace: Log request and response details from botocore.
        sts_client_factory: Creates the STS client used for assume-role.

    Returns:
        boto3 CloudWatch client
    """
    session = create_session(configuration, region, sts_client_factory)
    client_kwargs: dict[str, Any] = {}
    if proxy_uri:
        client_kwargs["config"] = Config(
            proxies={"http": proxy_uri, "https": proxy_uri}
        )
    if http_wire_trace:
        logging.getLogger("botocore").setLevel(logging.DEBUG)

    logger.info(
        "Creating CloudWatch client with %s credentials in region %s",
        type(configuration).__name__,
        region or "<default>",
    )
    return session.client("cloudwatch", **client_kwargs)
