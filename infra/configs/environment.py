"""
Configuration resolver.

Turns a flat mapping of raw strings into a validated StackConfig. The
mapping is injected: it may come from the process environment and .env file
(DeploySettings), from the Pulumi stack config (load_source), or from a
plain dict.

Dependencies: pydantic_settings, pulumi
System role: First step of every synthesis pass
"""

import re
from collections.abc import Mapping
from typing import Final

import pulumi
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from infra.configs.base import AwsCredentials, ImageTagMutability, StackConfig, TopologyMode
from infra.configs.constants import CONFIG_DEFAULTS, LOG_RETENTION_DAYS, REQUIRED_CONFIG_KEYS
from infra.core.exceptions import InvalidConfig, MissingRequiredConfig
from infra.utils.logger import get_logger

logger = get_logger(__name__)

# Lowercase, hyphen-separated: valid for ECR, IAM, ECS and ELB names alike
NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
# Leaves room for the longest derived IAM role name within 64 characters
NAME_MAX_LENGTH: Final[int] = 48

TOPOLOGY_ALIASES: Final[dict[str, TopologyMode]] = {
    "registry": TopologyMode.REGISTRY,
    "registry-only": TopologyMode.REGISTRY,
    "compute": TopologyMode.COMPUTE,
    "registry+compute": TopologyMode.COMPUTE,
    "load-balanced": TopologyMode.LOAD_BALANCED,
    "registry+compute+load-balancer": TopologyMode.LOAD_BALANCED,
    "full": TopologyMode.LOAD_BALANCED,
}

# Keys read from the Pulumi stack config, e.g. `pulumi config set container_port 8080`
CONFIG_KEYS: Final[tuple[str, ...]] = (
    "region",
    "name",
    "image_tag_mutability",
    "scan_on_push",
    "image_tag",
    "container_port",
    "topology",
    "environment",
    "desired_count",
    "log_retention_days",
    "health_check_path",
    "health_check_command",
)


class DeploySettings(BaseSettings):
    """Raw deployment settings read from the environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    access_key_id: str | None = Field(default=None, validation_alias="AWS_ACCESS_KEY_ID")
    secret_access_key: str | None = Field(default=None, validation_alias="AWS_SECRET_ACCESS_KEY")
    session_token: str | None = Field(default=None, validation_alias="AWS_SESSION_TOKEN")
    region: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AWS_DEFAULT_REGION", "AWS_REGION"),
    )
    name: str | None = Field(default=None, validation_alias="ECR_REPOSITORY_NAME")
    image_tag_mutability: str | None = Field(default=None, validation_alias="ECR_IMAGE_TAG_MUTABILITY")
    scan_on_push: str | None = Field(default=None, validation_alias="ECR_SCAN_ON_PUSH")
    image_tag: str | None = Field(default=None, validation_alias="IMAGE_TAG")
    container_port: str | None = Field(default=None, validation_alias="CONTAINER_PORT")
    topology: str | None = Field(default=None, validation_alias="TOPOLOGY_MODE")
    environment: str | None = Field(default=None, validation_alias="ENVIRONMENT")
    desired_count: str | None = Field(default=None, validation_alias="DESIRED_COUNT")
    log_retention_days: str | None = Field(default=None, validation_alias="LOG_RETENTION_DAYS")
    health_check_path: str | None = Field(default=None, validation_alias="HEALTH_CHECK_PATH")
    health_check_command: str | None = Field(default=None, validation_alias="HEALTH_CHECK_COMMAND")

    def as_source(self) -> dict[str, str]:
        """Return the settings that are set, as a raw key-value mapping."""
        return {key: value for key, value in self.model_dump().items() if value is not None}


def _raw(source: Mapping[str, str], key: str) -> str | None:
    """Return a stripped value, treating blanks as absent."""
    value = source.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _require(source: Mapping[str, str], keys: tuple[str, ...]) -> None:
    missing = [key for key in keys if _raw(source, key) is None]
    if missing:
        raise MissingRequiredConfig(missing)


def _to_int(key: str, value: str, minimum: int, maximum: int | None = None) -> int:
    if not (value.isascii() and value.isdigit()):
        raise InvalidConfig(key, value, "not an integer")
    number = int(value)
    if number < minimum or (maximum is not None and number > maximum):
        bounds = f">= {minimum}" if maximum is None else f"between {minimum} and {maximum}"
        raise InvalidConfig(key, value, f"must be {bounds}")
    return number


def resolve_config(source: Mapping[str, str]) -> StackConfig:
    """
    Validate raw configuration and apply defaults.

    Args:
        source: Flat mapping of configuration key to raw string

    Returns:
        StackConfig: Immutable, validated configuration

    Raises:
        MissingRequiredConfig: Credentials or region absent
        InvalidConfig: A value is malformed after defaulting
    """
    _require(source, REQUIRED_CONFIG_KEYS)

    values = {key: _raw(source, key) or default for key, default in CONFIG_DEFAULTS.items()}

    name = values["name"]
    if not NAME_PATTERN.match(name) or len(name) > NAME_MAX_LENGTH:
        raise InvalidConfig(
            "name",
            name,
            f"must be lowercase alphanumerics and hyphens, at most {NAME_MAX_LENGTH} characters",
        )

    try:
        mutability = ImageTagMutability(values["image_tag_mutability"].upper())
    except ValueError:
        raise InvalidConfig(
            "image_tag_mutability", values["image_tag_mutability"], "must be MUTABLE or IMMUTABLE"
        ) from None

    topology = TOPOLOGY_ALIASES.get(values["topology"].lower())
    if topology is None:
        raise InvalidConfig(
            "topology", values["topology"], f"must be one of {sorted(TOPOLOGY_ALIASES)}"
        )

    container_port = _to_int("container_port", values["container_port"], 1, 65535)
    desired_count = _to_int("desired_count", values["desired_count"], 1)
    retention = _to_int("log_retention_days", values["log_retention_days"], 1)
    if retention not in LOG_RETENTION_DAYS:
        raise InvalidConfig(
            "log_retention_days", values["log_retention_days"], "not a CloudWatch retention period"
        )

    health_check_path = values["health_check_path"]
    if not health_check_path.startswith("/"):
        raise InvalidConfig("health_check_path", health_check_path, "must start with '/'")

    config = StackConfig(
        name=name,
        region=_raw(source, "region"),
        image_tag_mutability=mutability,
        scan_on_push=values["scan_on_push"] == "true",
        image_tag=values["image_tag"],
        container_port=container_port,
        topology=topology,
        environment=values["environment"],
        desired_count=desired_count,
        log_retention_days=retention,
        health_check_path=health_check_path,
        health_check_command=_raw(source, "health_check_command") or "",
    )
    logger.info(
        "Resolved config for stack %s in %s (topology=%s, port=%d)",
        config.name,
        config.region,
        config.topology.value,
        config.container_port,
    )
    return config


def resolve_credentials(source: Mapping[str, str]) -> AwsCredentials:
    """
    Extract provider credentials from raw configuration.

    Raises:
        MissingRequiredConfig: Access key id or secret absent
    """
    _require(source, ("access_key_id", "secret_access_key"))
    return AwsCredentials(
        access_key_id=_raw(source, "access_key_id"),
        secret_access_key=_raw(source, "secret_access_key"),
        session_token=_raw(source, "session_token"),
    )


def load_source(config: pulumi.Config | None = None) -> dict[str, str]:
    """
    Build the raw configuration mapping for a Pulumi run.

    Environment variables and .env are read first; Pulumi stack config
    values override them. `aws:region` fills in a missing region.

    Args:
        config: Project stack config, or None to use the environment only

    Returns:
        Flat mapping suitable for resolve_config()
    """
    source = DeploySettings().as_source()
    if config is None:
        return source

    for key in CONFIG_KEYS:
        value = config.get(key)
        if value:
            source[key] = value
    if not source.get("region"):
        aws_region = pulumi.Config("aws").get("region")
        if aws_region:
            source["region"] = aws_region
    return source


def get_config() -> StackConfig:
    """
    Load stack configuration for the current Pulumi stack.

    Returns:
        StackConfig: Validated configuration object
    """
    return resolve_config(load_source(pulumi.Config()))
