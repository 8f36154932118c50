"""
Graph application.

Walks a StackGraph in topological order, resolves each node's refs against
results the provider returned for earlier nodes, and hands the rendered
attributes to provider.declare(). Outputs are resolved the same way once
every node is declared.
"""

from collections.abc import Mapping
from typing import Any

from infra.core.exceptions import InvalidReference, MissingOutput
from infra.core.graph import Ref, StackGraph, Template
from infra.core.outputs import OutputTable
from infra.core.provider import ProviderCapability
from infra.utils.logger import get_logger

logger = get_logger(__name__)


class StackApplier:
    """Declares a graph through a provider, one node at a time."""

    def __init__(self, provider: ProviderCapability) -> None:
        self.provider = provider
        self.declared: dict[str, Mapping[str, Any]] = {}

    def apply(self, graph: StackGraph) -> dict[str, Mapping[str, Any]]:
        """
        Declare every node of graph.

        Returns:
            Provider results keyed by logical name
        """
        order = graph.topological_order()
        logger.info("Applying stack %s: %d resources", graph.name, len(order))
        for node in order:
            attributes = self.render(node.attributes)
            self.declared[node.logical_name] = self.provider.declare(node, attributes)
            logger.debug("Applied %s %s", node.kind.value, node.logical_name)
        return self.declared

    def resolve_outputs(self, outputs: OutputTable) -> dict[str, Any]:
        """
        Resolve every output entry against declared results.

        Raises:
            MissingOutput: an entry resolved to nothing
        """
        resolved: dict[str, Any] = {}
        for entry in outputs:
            value = self.render(entry.value)
            if value is None:
                raise MissingOutput([entry.key])
            resolved[entry.key] = value
        return resolved

    def render(self, value: Any) -> Any:
        """Replace refs and templates inside value with provider values."""
        if isinstance(value, Ref):
            return self._resolve(value)
        if isinstance(value, Template):
            return self.provider.interpolate(
                value.format,
                {key: self.render(item) for key, item in value.values},
            )
        if hasattr(value, "to_dict"):
            return self.render(value.to_dict())
        if isinstance(value, Mapping):
            return {key: self.render(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.render(item) for item in value]
        return value

    def _resolve(self, ref: Ref) -> Any:
        try:
            result = self.declared[ref.logical_name]
        except KeyError:
            raise InvalidReference(str(ref), "resource has not been declared") from None
        value = result.get(ref.attribute)
        if value is None:
            raise InvalidReference(str(ref), "provider returned no value")
        return value
