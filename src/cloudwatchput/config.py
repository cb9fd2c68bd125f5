"""Output configuration.

``OutputConfig.from_mapping`` validates an already parsed configuration
mapping and turns it into typed, immutable settings. Top-level keys it does
not know are left for the surrounding system (buffer settings and the
like); unknown keys inside a section are rejected.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cloudwatchput.core.credentials import (
    AssumeRoleSection,
    CredentialEnvironment,
    CredentialsConfig,
    InstanceProfileSection,
    SharedCredentialsSection,
    check_exclusive,
)
from cloudwatchput.core.errors import ConfigurationError
from cloudwatchput.core.metrics import DEFAULT_STORAGE_RESOLUTION
from cloudwatchput.core.models import DimensionSpec

DEFAULT_REGION = "us-east-1"
MAX_DIMENSIONS = 30
STORAGE_RESOLUTIONS = frozenset({1, 60})

STANDARD_UNITS = frozenset(
    {
        "Seconds",
        "Microseconds",
        "Milliseconds",
        "Bytes",
        "Kilobytes",
        "Megabytes",
        "Gigabytes",
        "Terabytes",
        "Bits",
        "Kilobits",
        "Megabits",
        "Gigabits",
        "Terabits",
        "Percent",
        "Count",
        "Bytes/Second",
        "Kilobytes/Second",
        "Megabytes/Second",
        "Gigabytes/Second",
        "Terabytes/Second",
        "Bits/Second",
        "Kilobits/Second",
        "Megabits/Second",
        "Gigabits/Second",
        "Terabits/Second",
        "Count/Second",
        "None",
    }
)

# Section name -> {option: (type, required)}
_SECTION_OPTIONS: dict[str, dict[str, tuple[type, bool]]] = {
    "assume_role_credentials": {
        "role_arn": (str, True),
        "role_session_name": (str, True),
        "policy": (str, False),
        "duration_seconds": (int, False),
        "external_id": (str, False),
    },
    "instance_profile_credentials": {
        "retries": (int, False),
        "ip_address": (str, False),
        "port": (int, False),
        "http_open_timeout": (float, False),
        "http_read_timeout": (float, False),
    },
    "shared_credentials": {
        "path": (str, False),
        "profile_name": (str, False),
    },
    "dimensions": {
        "name": (str, True),
        "key": (str, False),
        "value": (str, False),
    },
}

_SECTION_TYPES: dict[str, type] = {
    "assume_role_credentials": AssumeRoleSection,
    "instance_profile_credentials": InstanceProfileSection,
    "shared_credentials": SharedCredentialsSection,
}


def _coerce(name: str, value: Any, kind: type) -> Any:
    """Coerce a configured value to ``kind``, accepting string forms."""
    if kind is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
    elif kind is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
    elif kind is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                pass
    elif isinstance(value, str):
        return value
    raise ConfigurationError(
        f"{name!r} must be of type {kind.__name__}, got {value!r}"
    )


def _option(
    mapping: Mapping[str, Any],
    key: str,
    kind: type,
    default: Any = None,
    required: bool = False,
    context: str = "",
) -> Any:
    name = f"{context}.{key}" if context else key
    if key not in mapping or mapping[key] is None:
        if required:
            raise ConfigurationError(f"{name!r} is required")
        return default
    return _coerce(name, mapping[key], kind)


def _parse_section(name: str, raw: Any) -> dict[str, Any]:
    """Validate one section mapping against its option table."""
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"{name!r} must be a mapping, got {raw!r}")
    options = _SECTION_OPTIONS[name.split("[")[0]]
    unknown = sorted(set(raw) - set(options))
    if unknown:
        raise ConfigurationError(f"Unknown options in {name!r}: {', '.join(unknown)}")
    parsed = {}
    for key, (kind, required) in options.items():
        value = _option(raw, key, kind, required=required, context=name)
        if value is not None:
            parsed[key] = value
    return parsed


def _parse_dimensions(raw: Any) -> tuple[DimensionSpec, ...]:
    if raw is None:
        return ()
    if isinstance(raw, Mapping) or not isinstance(raw, (list, tuple)):
        raise ConfigurationError(f"'dimensions' must be a list, got {raw!r}")
    if len(raw) > MAX_DIMENSIONS:
        raise ConfigurationError(
            f"At most {MAX_DIMENSIONS} dimensions are allowed, got {len(raw)}"
        )
    return tuple(
        DimensionSpec(**_parse_section(f"dimensions[{i}]", item))
        for i, item in enumerate(raw)
    )


def parse_credentials(
    mapping: Mapping[str, Any], region: str | None = None
) -> CredentialsConfig:
    """Build a CredentialsConfig from the credential keys of ``mapping``."""
    sections = {
        name: section_type(**_parse_section(name, mapping[name]))
        for name, section_type in _SECTION_TYPES.items()
        if mapping.get(name) is not None
    }
    return CredentialsConfig(
        aws_key_id=_option(mapping, "aws_key_id", str),
        aws_sec_key=_option(mapping, "aws_sec_key", str),
        aws_iam_retries=_option(mapping, "aws_iam_retries", int),
        region=region,
        **sections,
    )


@dataclass(frozen=True)
class OutputConfig:
    """Validated settings for the CloudWatch output.

    Attributes:
        namespace: CloudWatch namespace for all data.
        metric_name: Metric name for all data.
        unit: CloudWatch standard unit.
        value_key: Record field holding the metric value.
        storage_resolution: 1 (high resolution) or 60 seconds.
        use_statistic_sets: Submit one statistic set per chunk instead of
            one datum per record.
        strict_values: Fail the flush on non-numeric values instead of
            submitting 0.0.
        dimensions: Configured dimensions.
        region: AWS region for CloudWatch (and STS when assuming a role).
        proxy_uri: HTTP(S) proxy URI.
        http_wire_trace: Log botocore request and response details.
        credentials: Credential options.
    """

    namespace: str
    metric_name: str
    unit: str
    value_key: str
    storage_resolution: int = DEFAULT_STORAGE_RESOLUTION
    use_statistic_sets: bool = False
    strict_values: bool = False
    dimensions: tuple[DimensionSpec, ...] = ()
    region: str = DEFAULT_REGION
    proxy_uri: str | None = None
    http_wire_trace: bool = False
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, Any],
        environment: CredentialEnvironment | None = None,
    ) -> "OutputConfig":
        """Validate a configuration mapping.

        Args:
            mapping: Parsed configuration.
            environment: Supplies the default region (AWS_REGION). Defaults
                to the current process environment.

        Returns:
            OutputConfig with validated settings.

        Raises:
            ConfigurationError: On missing, mistyped or unsupported values.
            ConfigurationConflict: If more than one credential strategy is set.
        """
        if environment is None:
            environment = CredentialEnvironment.from_environ()

        unit = _option(mapping, "unit", str, required=True)
        if unit not in STANDARD_UNITS:
            raise ConfigurationError(f"Unknown CloudWatch unit {unit!r}")
        storage_resolution = _option(
            mapping, "storage_resolution", int, DEFAULT_STORAGE_RESOLUTION
        )
        if storage_resolution not in STORAGE_RESOLUTIONS:
            raise ConfigurationError(
                f"'storage_resolution' must be 1 or 60, got {storage_resolution}"
            )
        region = _option(mapping, "region", str) or environment.region or DEFAULT_REGION

        credentials = parse_credentials(mapping, region)
        check_exclusive(credentials)

        return cls(
            namespace=_option(mapping, "namespace", str, required=True),
            metric_name=_option(mapping, "metric_name", str, required=True),
            unit=unit,
            value_key=_option(mapping, "value_key", str, required=True),
            storage_resolution=storage_resolution,
            use_statistic_sets=_option(mapping, "use_statistic_sets", bool, False),
            strict_values=_option(mapping, "strict_values", bool, False),
            dimensions=_parse_dimensions(mapping.get("dimensions")),
            region=region,
            proxy_uri=_option(mapping, "proxy_uri", str),
            http_wire_trace=_option(mapping, "http_wire_trace", bool, False),
            credentials=credentials,
        )
