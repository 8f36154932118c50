"""
Provider-agnostic core of the stack assembler.

- graph: ResourceNode, StackGraph, typed references
- policies: IAM policy documents and ARN construction
- outputs: named output table
- provider: capability a cloud provider must implement
- apply: declares a graph through a provider
- exceptions: synthesis error taxonomy
"""

from infra.core.exceptions import (
    StackSynthesisError,
    MissingRequiredConfig,
    InvalidConfig,
    InsufficientAvailabilityZones,
    InvalidReference,
    MissingOutput,
    DuplicateResource,
    DuplicateOutput,
)
from infra.core.graph import ResourceKind, ResourceNode, Ref, StackGraph, Template

__all__ = [
    "StackSynthesisError",
    "MissingRequiredConfig",
    "InvalidConfig",
    "InsufficientAvailabilityZones",
    "InvalidReference",
    "MissingOutput",
    "DuplicateResource",
    "DuplicateOutput",
    "ResourceKind",
    "ResourceNode",
    "Ref",
    "StackGraph",
    "Template",
]
