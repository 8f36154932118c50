"""
Resource graph model.

A synthesis pass produces one StackGraph. The graph owns its ResourceNodes;
a node refers to its dependencies by logical name only, so edges carry
ordering and nothing else.

Cross-resource values are typed references:
- Ref(logical_name, attribute): resolved against the provider's result for
  that node at declare time.
- Template(format, values): a string rendered from refs and literals.

A node may only reference nodes already in the graph. Every Ref inside a
node's attributes becomes an implicit dependency edge, so the graph is
acyclic by construction.
"""

import dataclasses
import enum
import graphlib
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from infra.core.exceptions import DuplicateResource, InvalidReference
from infra.utils.logger import get_logger

logger = get_logger(__name__)


class ResourceKind(str, enum.Enum):
    """Kinds of infrastructure the assembler can declare."""

    NETWORK = "Network"
    INTERNET_GATEWAY = "InternetGateway"
    SUBNET = "Subnet"
    ROUTE_TABLE = "RouteTable"
    ROUTE = "Route"
    ROUTE_TABLE_ASSOCIATION = "RouteTableAssociation"
    SECURITY_GROUP = "SecurityGroup"
    SECURITY_GROUP_RULE = "SecurityGroupRule"
    ROLE = "Role"
    POLICY = "Policy"
    REGISTRY = "Registry"
    LIFECYCLE_POLICY = "LifecyclePolicy"
    LOG_GROUP = "LogGroup"
    CLUSTER = "Cluster"
    WORKLOAD = "Workload"
    SERVICE = "Service"
    LOAD_BALANCER = "LoadBalancer"
    TARGET_GROUP = "TargetGroup"
    LISTENER = "Listener"
    LISTENER_RULE = "ListenerRule"


# Attributes a provider returns for each kind; only these can be referenced.
EXPORTED_ATTRIBUTES: dict[ResourceKind, frozenset[str]] = {
    ResourceKind.NETWORK: frozenset({"id", "arn", "cidr_block"}),
    ResourceKind.INTERNET_GATEWAY: frozenset({"id", "arn"}),
    ResourceKind.SUBNET: frozenset({"id", "arn", "cidr_block", "availability_zone"}),
    ResourceKind.ROUTE_TABLE: frozenset({"id", "arn"}),
    ResourceKind.ROUTE: frozenset({"id"}),
    ResourceKind.ROUTE_TABLE_ASSOCIATION: frozenset({"id"}),
    ResourceKind.SECURITY_GROUP: frozenset({"id", "arn", "name"}),
    ResourceKind.SECURITY_GROUP_RULE: frozenset({"id", "arn"}),
    ResourceKind.ROLE: frozenset({"id", "arn", "name"}),
    ResourceKind.POLICY: frozenset({"id", "name"}),
    ResourceKind.REGISTRY: frozenset({"id", "arn", "name", "repository_url", "registry_id"}),
    ResourceKind.LIFECYCLE_POLICY: frozenset({"id"}),
    ResourceKind.LOG_GROUP: frozenset({"id", "arn", "name"}),
    ResourceKind.CLUSTER: frozenset({"id", "arn", "name"}),
    ResourceKind.WORKLOAD: frozenset({"id", "arn", "family", "revision"}),
    ResourceKind.SERVICE: frozenset({"id", "name"}),
    ResourceKind.LOAD_BALANCER: frozenset({"id", "arn", "dns_name", "zone_id"}),
    ResourceKind.TARGET_GROUP: frozenset({"id", "arn", "name"}),
    ResourceKind.LISTENER: frozenset({"id", "arn"}),
    ResourceKind.LISTENER_RULE: frozenset({"id", "arn"}),
}


@dataclass(frozen=True)
class Ref:
    """Reference to an attribute of another node, resolved at declare time."""

    logical_name: str
    attribute: str = "id"

    def __str__(self) -> str:
        return f"{self.logical_name}.{self.attribute}"


@dataclass(frozen=True)
class Template:
    """A string rendered from literals and refs, e.g. a CLI command."""

    format: str
    values: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def of(cls, format: str, **values: Any) -> "Template":
        return cls(format=format, values=tuple(sorted(values.items())))

    def as_dict(self) -> dict[str, Any]:
        return dict(self.values)


@dataclass(frozen=True)
class ResourceNode:
    """
    A declared unit of infrastructure.

    Attributes:
        kind: Resource kind
        logical_name: Unique, deterministic name within the stack
        attributes: Provider-facing settings, may contain Ref/Template values
        depends_on: Logical names of nodes that must exist first
    """

    kind: ResourceKind
    logical_name: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    depends_on: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def ref(self, attribute: str = "id") -> Ref:
        """Reference one of this node's exported attributes."""
        if attribute not in EXPORTED_ATTRIBUTES[self.kind]:
            raise InvalidReference(
                f"{self.logical_name}.{attribute}",
                f"{self.kind.value} does not export '{attribute}'",
            )
        return Ref(self.logical_name, attribute)


def iter_refs(value: Any) -> Iterator[Ref]:
    """Yield every Ref nested inside an attribute value."""
    if isinstance(value, Ref):
        yield value
    elif isinstance(value, Template):
        for _, item in value.values:
            yield from iter_refs(item)
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from iter_refs(item)
    elif isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            yield from iter_refs(item)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        for f in dataclasses.fields(value):
            yield from iter_refs(getattr(value, f.name))


class StackGraph:
    """Directed acyclic graph of resource nodes for one synthesis pass."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._nodes: dict[str, ResourceNode] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[ResourceNode]:
        return iter(self._nodes.values())

    def __contains__(self, logical_name: object) -> bool:
        return logical_name in self._nodes

    def add(
        self,
        kind: ResourceKind,
        logical_name: str,
        attributes: Mapping[str, Any] | None = None,
        depends_on: Iterable[ResourceNode | str] = (),
    ) -> ResourceNode:
        """
        Declare a node.

        Args:
            kind: Resource kind
            logical_name: Unique name within the stack
            attributes: Settings; nested refs become dependency edges
            depends_on: Extra ordering edges not implied by refs

        Returns:
            The new node

        Raises:
            DuplicateResource: logical_name is already declared
            InvalidReference: a ref or dependency targets an unknown node or attribute
        """
        if logical_name in self._nodes:
            raise DuplicateResource(logical_name)

        attributes = dict(attributes or {})
        edges: set[str] = set()
        for ref in iter_refs(attributes):
            target = self.get(ref.logical_name)
            if ref.attribute not in EXPORTED_ATTRIBUTES[target.kind]:
                raise InvalidReference(
                    str(ref), f"{target.kind.value} does not export '{ref.attribute}'"
                )
            edges.add(ref.logical_name)
        for dependency in depends_on:
            name = dependency.logical_name if isinstance(dependency, ResourceNode) else dependency
            self.get(name)
            edges.add(name)

        node = ResourceNode(
            kind=kind,
            logical_name=logical_name,
            attributes=attributes,
            depends_on=frozenset(edges),
        )
        self._nodes[logical_name] = node
        logger.debug("Declared %s %s (depends on %s)", kind.value, logical_name, sorted(edges))
        return node

    def get(self, logical_name: str) -> ResourceNode:
        """Look up a node by logical name."""
        try:
            return self._nodes[logical_name]
        except KeyError:
            raise InvalidReference(logical_name, "no such resource in stack") from None

    def nodes_of_kind(self, kind: ResourceKind) -> list[ResourceNode]:
        return [node for node in self._nodes.values() if node.kind == kind]

    def edges(self) -> list[tuple[str, str]]:
        """All (dependency, dependent) pairs, sorted."""
        return sorted(
            (dependency, node.logical_name)
            for node in self._nodes.values()
            for dependency in node.depends_on
        )

    def dependencies_of(self, logical_name: str) -> set[str]:
        """Transitive dependencies of a node."""
        seen: set[str] = set()
        pending = list(self.get(logical_name).depends_on)
        while pending:
            name = pending.pop()
            if name not in seen:
                seen.add(name)
                pending.extend(self._nodes[name].depends_on)
        return seen

    def topological_order(self) -> list[ResourceNode]:
        """Nodes ordered so every dependency precedes its dependents."""
        sorter: graphlib.TopologicalSorter[str] = graphlib.TopologicalSorter()
        for name, node in self._nodes.items():
            sorter.add(name, *sorted(node.depends_on))
        return [self._nodes[name] for name in sorter.static_order()]

    def describe(self) -> list[tuple[str, str, dict[str, Any], tuple[str, ...]]]:
        """Structural snapshot: kind, name, attributes and sorted edges per node."""
        return [
            (node.kind.value, node.logical_name, dict(node.attributes), tuple(sorted(node.depends_on)))
            for node in self._nodes.values()
        ]
