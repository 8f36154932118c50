"""
Tests for the resource graph model and graph application.

Validates:
1. Refs become dependency edges and must target existing nodes
2. Logical names are unique
3. Topological order respects every edge
4. StackApplier renders refs, templates and policy objects before declare
"""

import pytest

from infra.core.apply import StackApplier
from infra.core.exceptions import DuplicateResource, InvalidReference, MissingOutput
from infra.core.graph import Ref, ResourceKind, StackGraph, Template
from infra.core.outputs import OutputTable
from infra.core.policies import PolicyDocument, PolicyStatement


@pytest.fixture
def small_graph():
    """Network -> subnet -> security group chain."""
    graph = StackGraph("test")
    vpc = graph.add(ResourceKind.NETWORK, "test-vpc", {"cidr_block": "10.0.0.0/16"})
    graph.add(ResourceKind.SUBNET, "test-subnet", {"vpc_id": vpc.ref(), "cidr_block": "10.0.1.0/24"})
    graph.add(ResourceKind.SECURITY_GROUP, "test-sg", {"name": "test-sg", "vpc_id": vpc.ref()})
    return graph


class TestStackGraph:
    """Tests for node declaration and edges."""

    def test_refs_become_edges(self, small_graph):
        """A Ref inside attributes adds an edge to its target."""
        assert small_graph.get("test-subnet").depends_on == frozenset({"test-vpc"})
        assert ("test-vpc", "test-subnet") in small_graph.edges()

    def test_nested_refs_become_edges(self, small_graph):
        """Refs nested in lists, dicts and templates are found."""
        node = small_graph.add(
            ResourceKind.LOAD_BALANCER,
            "test-alb",
            {
                "subnets": [Ref("test-subnet")],
                "extra": {"group": Ref("test-sg")},
                "label": Template.of("{cidr}", cidr=Ref("test-vpc", "cidr_block")),
            },
        )

        assert node.depends_on == frozenset({"test-subnet", "test-sg", "test-vpc"})

    def test_duplicate_logical_name(self, small_graph):
        """Declaring the same logical name twice fails."""
        with pytest.raises(DuplicateResource):
            small_graph.add(ResourceKind.NETWORK, "test-vpc")

    def test_node_attributes_are_read_only(self, small_graph):
        """Declared attributes cannot be changed in place."""
        node = small_graph.get("test-vpc")

        with pytest.raises(TypeError):
            node.attributes["cidr_block"] = "192.168.0.0/16"

        assert node.attributes["cidr_block"] == "10.0.0.0/16"

    def test_node_keeps_its_own_copy(self):
        """Mutating the caller's mapping after add leaves the node untouched."""
        graph = StackGraph("test")
        settings = {"cidr_block": "10.0.0.0/16"}
        node = graph.add(ResourceKind.NETWORK, "test-vpc", settings)

        settings["cidr_block"] = "172.16.0.0/16"

        assert node.attributes["cidr_block"] == "10.0.0.0/16"

    def test_ref_to_unknown_node(self, small_graph):
        """A Ref to an undeclared node is an InvalidReference."""
        with pytest.raises(InvalidReference):
            small_graph.add(ResourceKind.ROUTE_TABLE, "test-rt", {"vpc_id": Ref("missing-vpc")})

    def test_ref_to_unexported_attribute(self, small_graph):
        """Only exported attributes can be referenced."""
        with pytest.raises(InvalidReference):
            small_graph.get("test-vpc").ref("dns_name")

        with pytest.raises(InvalidReference):
            small_graph.add(ResourceKind.ROUTE_TABLE, "test-rt", {"vpc_id": Ref("test-vpc", "dns_name")})

    def test_failed_add_leaves_graph_unchanged(self, small_graph):
        """A rejected node is not stored."""
        with pytest.raises(InvalidReference):
            small_graph.add(ResourceKind.ROUTE_TABLE, "test-rt", {"vpc_id": Ref("missing-vpc")})

        assert "test-rt" not in small_graph
        assert len(small_graph) == 3

    def test_explicit_depends_on(self, small_graph):
        """depends_on adds edges without a Ref."""
        node = small_graph.add(ResourceKind.SERVICE, "test-service", depends_on=["test-sg"])

        assert node.depends_on == frozenset({"test-sg"})

    def test_transitive_dependencies(self, small_graph):
        """dependencies_of follows edges all the way down."""
        small_graph.add(ResourceKind.SERVICE, "test-service", {"subnets": [Ref("test-subnet")]})

        assert small_graph.dependencies_of("test-service") == {"test-subnet", "test-vpc"}

    def test_topological_order(self, small_graph):
        """Every dependency precedes its dependents."""
        order = [node.logical_name for node in small_graph.topological_order()]

        for dependency, dependent in small_graph.edges():
            assert order.index(dependency) < order.index(dependent)


class TestStackApplier:
    """Tests for rendering and declaring through a provider."""

    def test_declares_in_dependency_order(self, small_graph, fake_provider):
        """Nodes reach the provider after their dependencies."""
        StackApplier(fake_provider).apply(small_graph)

        assert fake_provider.declared.index("test-vpc") < fake_provider.declared.index("test-subnet")
        assert len(fake_provider.declared) == 3

    def test_refs_rendered_to_provider_values(self, small_graph, fake_provider):
        """Attributes reach the provider with refs resolved."""
        StackApplier(fake_provider).apply(small_graph)

        assert fake_provider.attributes["test-subnet"]["vpc_id"] == "test-vpc-id"

    def test_policy_documents_rendered(self, fake_provider):
        """Objects with to_dict() are rendered to plain IAM JSON."""
        graph = StackGraph("test")
        role = graph.add(ResourceKind.ROLE, "test-role", {"name": "test-role"})
        graph.add(ResourceKind.POLICY, "test-policy", {
            "policy": PolicyDocument(statements=(
                PolicyStatement(sid="Pass", actions=("iam:PassRole",), resources=(role.ref("arn"),)),
            )),
        })

        StackApplier(fake_provider).apply(graph)

        statement = fake_provider.attributes["test-policy"]["policy"]["Statement"][0]
        assert statement["Action"] == "iam:PassRole"
        assert statement["Resource"] == "arn:aws:fake:us-east-1:123456789012:test-role"

    def test_resolve_outputs(self, small_graph, fake_provider):
        """Outputs resolve refs and templates after apply."""
        table = OutputTable()
        table.add("vpc-id", Ref("test-vpc"), "VPC")
        table.add("summary", Template.of("vpc={vpc}", vpc=Ref("test-vpc")), "Summary")
        applier = StackApplier(fake_provider)
        applier.apply(small_graph)

        outputs = applier.resolve_outputs(table)

        assert outputs == {"vpc-id": "test-vpc-id", "summary": "vpc=test-vpc-id"}

    def test_unresolvable_ref_before_apply(self, fake_provider):
        """Rendering a ref to an undeclared node fails."""
        with pytest.raises(InvalidReference):
            StackApplier(fake_provider).render(Ref("test-vpc"))


class TestOutputTable:
    """Tests for the output table."""

    def test_require_reports_missing_keys(self):
        """require() names every absent key."""
        table = OutputTable()
        table.add("vpc-id", "vpc-123", "VPC")

        with pytest.raises(MissingOutput) as exc_info:
            table.require(["vpc-id", "ecs-cluster-name", "log-group-name"])

        assert exc_info.value.keys == ("ecs-cluster-name", "log-group-name")

    def test_none_value_is_missing(self):
        """An output with no value is rejected at registration."""
        with pytest.raises(MissingOutput):
            OutputTable().add("vpc-id", None, "VPC")
