"""
Provider capability consumed by the assembler.

The core never talks to a cloud API directly. Lookups run once at the start
of synthesis; declare() is called once per node, in dependency order, by
apply_stack().
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from infra.core.graph import ResourceNode


@dataclass(frozen=True)
class CallerIdentity:
    """Identity of the credentials in use."""
    account_id: str


class ProviderCapability(Protocol):
    """What a cloud provider must offer to synthesize and apply a stack."""

    def lookup_caller_identity(self) -> CallerIdentity:
        """Return the account owning the current credentials."""
        ...

    def list_available_zones(self, region: str) -> Sequence[str]:
        """Return available zone names for region, in provider order."""
        ...

    def declare(self, node: ResourceNode, attributes: Mapping[str, Any]) -> Mapping[str, Any]:
        """
        Create or update the resource for node.

        Args:
            node: Node being declared; depends_on names nodes already declared
            attributes: node.attributes with every Ref and Template resolved

        Returns:
            The node's exported attributes (id, arn, ...)
        """
        ...

    def interpolate(self, template: str, values: Mapping[str, Any]) -> Any:
        """Render template with resolved values, which may be provider futures."""
        ...
