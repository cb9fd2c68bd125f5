"""Credential resolution for the submission client.

The output accepts several mutually exclusive ways of authenticating. They
arrive as independent optional sections; ``select_strategy`` reduces them
to exactly one strategy following a fixed precedence, and ``resolve`` turns
that strategy into a ``CredentialConfiguration`` for client construction.

Precedence, first match wins:

1. ``aws_key_id`` and ``aws_sec_key`` both set
2. ``assume_role_credentials``
3. ``instance_profile_credentials`` (container credentials when the
   environment exposes a container credentials endpoint)
4. ``shared_credentials``
5. ``aws_iam_retries`` (deprecated, behaves like 3 with retries only)
6. nothing: the SDK's default credential chain

Resolution only inspects configuration and the injected environment; it
never talks to the network.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, assert_never

from cloudwatchput.core.errors import ConfigurationConflict

logger = logging.getLogger(__name__)

CONTAINER_CREDENTIALS_ENV = "AWS_CONTAINER_CREDENTIALS_RELATIVE_URI"
REGION_ENV = "AWS_REGION"


# === Configured strategies ===


@dataclass(frozen=True)
class StaticKeys:
    """Long-lived access key pair."""

    access_key_id: str
    secret_access_key: str = field(repr=False)


@dataclass(frozen=True)
class AssumeRoleSection:
    """Options for assuming an IAM role through STS.

    Attributes:
        role_arn: ARN of the role to assume.
        role_session_name: Identifier for the assumed role session.
        policy: Inline IAM policy (JSON) further restricting the session.
        duration_seconds: Session duration (900-3600).
        external_id: Identifier required by third-party role trust policies.
    """

    role_arn: str
    role_session_name: str
    policy: str | None = None
    duration_seconds: int | None = None
    external_id: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class InstanceProfileSection:
    """Options for the instance metadata (or container) credential endpoint.

    Attributes:
        retries: Number of times to retry fetching credentials.
        ip_address: Metadata endpoint address (default 169.254.169.254).
        port: Metadata endpoint port (default 80).
        http_open_timeout: Seconds to wait for the connection to open.
        http_read_timeout: Seconds to wait for a response block.
    """

    retries: int | None = None
    ip_address: str | None = None
    port: int | None = None
    http_open_timeout: float | None = None
    http_read_timeout: float | None = None


@dataclass(frozen=True)
class SharedCredentialsSection:
    """Options for the shared credentials file.

    Attributes:
        path: Credentials file (default ~/.aws/credentials).
        profile_name: Profile to read (default "default" or AWS_PROFILE).
    """

    path: str | None = None
    profile_name: str | None = None


@dataclass(frozen=True)
class DefaultChain:
    """No explicit credentials; the SDK discovers them itself."""


CredentialStrategy = (
    StaticKeys
    | AssumeRoleSection
    | InstanceProfileSection
    | SharedCredentialsSection
    | DefaultChain
)


@dataclass(frozen=True)
class CredentialsConfig:
    """Credential related options as configured by the user.

    Every section is optional. At most one of them should be set; see
    ``check_exclusive``.
    """

    aws_key_id: str | None = None
    aws_sec_key: str | None = field(default=None, repr=False)
    assume_role_credentials: AssumeRoleSection | None = None
    instance_profile_credentials: InstanceProfileSection | None = None
    shared_credentials: SharedCredentialsSection | None = None
    aws_iam_retries: int | None = None
    region: str | None = None


@dataclass(frozen=True)
class CredentialEnvironment:
    """The parts of the process environment credential resolution depends on.

    Attributes:
        container_credentials_relative_uri: Value of
            AWS_CONTAINER_CREDENTIALS_RELATIVE_URI, set by ECS for tasks.
        region: Value of AWS_REGION.
    """

    container_credentials_relative_uri: str | None = None
    region: str | None = None

    @property
    def is_container_credentials_endpoint(self) -> bool:
        """Return True when running with a container credentials endpoint."""
        return bool(self.container_credentials_relative_uri)

    @classmethod
    def from_environ(
        cls, environ: Mapping[str, str] | None = None
    ) -> "CredentialEnvironment":
        """Capture the relevant variables from ``environ`` (default os.environ)."""
        if environ is None:
            environ = os.environ
        return cls(
            container_credentials_relative_uri=environ.get(CONTAINER_CREDENTIALS_ENV),
            region=environ.get(REGION_ENV),
        )


# === Resolved configurations ===


@dataclass(frozen=True)
class StaticCredentials:
    access_key_id: str
    secret_access_key: str = field(repr=False)


@dataclass(frozen=True)
class AssumeRoleCredentials:
    """STS AssumeRole parameters; ``sts_region`` scopes the STS endpoint."""

    options: dict[str, Any] = field(repr=False)
    sts_region: str | None = None


@dataclass(frozen=True)
class InstanceProfileCredentials:
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ContainerCredentials:
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SharedFileCredentials:
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DefaultCredentials:
    """Empty configuration: defer to the SDK's default credential chain."""


CredentialConfiguration = (
    StaticCredentials
    | AssumeRoleCredentials
    | InstanceProfileCredentials
    | ContainerCredentials
    | SharedFileCredentials
    | DefaultCredentials
)


def _present_options(section: object) -> dict[str, Any]:
    """Return the section's fields that were configured, dropping unset ones.

    Unset means None. An empty string is a configured value and is kept.
    """
    return {
        f.name: getattr(section, f.name)
        for f in fields(section)  # type: ignore[arg-type]
        if getattr(section, f.name) is not None
    }


def configured_strategies(config: CredentialsConfig) -> list[str]:
    """Return the names of all credential strategies present in ``config``."""
    present = []
    if config.aws_key_id is not None and config.aws_sec_key is not None:
        present.append("aws_key_id/aws_sec_key")
    if config.assume_role_credentials is not None:
        present.append("assume_role_credentials")
    if config.instance_profile_credentials is not None:
        present.append("instance_profile_credentials")
    if config.shared_credentials is not None:
        present.append("shared_credentials")
    if config.aws_iam_retries is not None:
        present.append("aws_iam_retries")
    return present


def check_exclusive(config: CredentialsConfig) -> None:
    """Reject configurations naming more than one credential strategy.

    Raises:
        ConfigurationConflict: If two or more strategies are configured.
    """
    present = configured_strategies(config)
    if len(present) > 1:
        raise ConfigurationConflict(present)
    if (config.aws_key_id is None) != (config.aws_sec_key is None):
        logger.warning(
            "Only one of aws_key_id and aws_sec_key is set; static keys are ignored"
        )


def select_strategy(config: CredentialsConfig) -> CredentialStrategy:
    """Pick the single strategy that applies, by precedence."""
    if config.aws_key_id is not None and config.aws_sec_key is not None:
        return StaticKeys(config.aws_key_id, config.aws_sec_key)
    if config.assume_role_credentials is not None:
        return config.assume_role_credentials
    if config.instance_profile_credentials is not None:
        return config.instance_profile_credentials
    if config.shared_credentials is not None:
        return config.shared_credentials
    if config.aws_iam_retries is not None:
        logger.warning(
            "'aws_iam_retries' parameter is deprecated. "
            "Use 'instance_profile_credentials' instead"
        )
        return InstanceProfileSection(retries=config.aws_iam_retries)
    return DefaultChain()


def resolve(
    config: CredentialsConfig, environment: CredentialEnvironment | None = None
) -> CredentialConfiguration:
    """Resolve the configured credentials into one client configuration.

    Args:
        config: Credential options. If several strategies are set the first
            one by precedence is used; call ``check_exclusive`` beforehand to
            reject such configurations instead.
        environment: Process environment capabilities. Defaults to an empty
            environment (no container credentials endpoint).

    Returns:
        The CredentialConfiguration variant for the selected strategy.
    """
    if environment is None:
        environment = CredentialEnvironment()

    match select_strategy(config):
        case StaticKeys(access_key_id=key_id, secret_access_key=secret):
            return StaticCredentials(key_id, secret)
        case AssumeRoleSection() as section:
            return AssumeRoleCredentials(
                options=_present_options(section), sts_region=config.region
            )
        case InstanceProfileSection() as section:
            if environment.is_container_credentials_endpoint:
                return ContainerCredentials(_present_options(section))
            return InstanceProfileCredentials(_present_options(section))
        case SharedCredentialsSection() as section:
            return SharedFileCredentials(_present_options(section))
        case DefaultChain():
            return DefaultCredentials()
        case unreachable:
            assert_never(unreachable)
