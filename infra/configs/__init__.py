"""
Configuration module for the stack assembler.

Provides the validated StackConfig and the resolver that builds it from an
injected key-value source.
"""

from infra.configs.base import AwsCredentials, ImageTagMutability, StackConfig, TopologyMode
from infra.configs.environment import (
    DeploySettings,
    get_config,
    load_source,
    resolve_config,
    resolve_credentials,
)
from infra.configs.constants import (
    VPC_CIDR,
    PORTS,
    DEFAULT_TAGS,
)

__all__ = [
    "AwsCredentials",
    "ImageTagMutability",
    "StackConfig",
    "TopologyMode",
    "DeploySettings",
    "get_config",
    "load_source",
    "resolve_config",
    "resolve_credentials",
    "VPC_CIDR",
    "PORTS",
    "DEFAULT_TAGS",
]
