"""
Tests for the registry and workload builders.

Validates:
1. Repository settings follow configuration
2. Cluster and log group naming and retention
3. Task definition image, port, probe and log delivery
4. Service placement and load balancer binding
"""

import pytest

from infra.components.compute.ecs_cluster import EcsClusterComponent
from infra.components.storage.ecr_repository import EcrRepositoryComponent
from infra.configs.base import ImageTagMutability, StackConfig
from infra.core.graph import Ref, ResourceKind, StackGraph, Template
from infra.stack import synthesize
from infra.utils.naming import ResourceNamer


@pytest.fixture
def acme_graph(acme_config, fake_provider):
    return synthesize(acme_config, fake_provider).graph


def _container(graph):
    return graph.get("acme-task").attributes["container_definitions"][0]


class TestEcrRepository:
    """Tests for the registry node."""

    def test_repository_named_after_stack(self, acme_config):
        """The repository name is exactly the stack name."""
        graph = StackGraph("acme")
        EcrRepositoryComponent(graph, ResourceNamer("acme"), acme_config)
        repository = graph.get("acme-ecr-repository")

        assert repository.attributes["name"] == "acme"
        assert repository.attributes["image_tag_mutability"] == "MUTABLE"
        assert repository.attributes["scan_on_push"] is False

    def test_repository_settings_from_config(self):
        """Mutability and scan-on-push come from configuration."""
        config = StackConfig(
            name="shop",
            region="eu-west-1",
            image_tag_mutability=ImageTagMutability.IMMUTABLE,
            scan_on_push=True,
        )
        graph = StackGraph("shop")
        EcrRepositoryComponent(graph, ResourceNamer("shop"), config)
        repository = graph.get("shop-ecr-repository")

        assert repository.attributes["image_tag_mutability"] == "IMMUTABLE"
        assert repository.attributes["scan_on_push"] is True

    def test_lifecycle_policy_targets_repository(self, acme_config):
        """The lifecycle policy expires images beyond the retention count."""
        graph = StackGraph("acme")
        EcrRepositoryComponent(graph, ResourceNamer("acme"), acme_config)
        lifecycle = graph.get("acme-ecr-lifecycle")
        rule = lifecycle.attributes["policy"]["rules"][0]

        assert lifecycle.attributes["repository"] == Ref("acme-ecr-repository", "name")
        assert rule["selection"]["countNumber"] == 10
        assert rule["action"] == {"type": "expire"}


class TestEcsCluster:
    """Tests for the cluster and log group."""

    def test_log_group_path_and_retention(self):
        """The log group lives under /ecs/<name> with configured retention."""
        config = StackConfig(name="acme", region="us-east-1", log_retention_days=30)
        graph = StackGraph("acme")
        outputs = EcsClusterComponent(graph, ResourceNamer("acme"), config).get_outputs()
        log_group = graph.get("acme-log-group")

        assert outputs.log_group_name == "/ecs/acme"
        assert log_group.attributes["retention_in_days"] == 30

    def test_container_insights_enabled(self, acme_config):
        """The cluster has container insights on."""
        graph = StackGraph("acme")
        outputs = EcsClusterComponent(graph, ResourceNamer("acme"), acme_config).get_outputs()

        assert outputs.cluster_name == "acme-cluster"
        assert graph.get("acme-cluster").attributes["settings"] == [
            {"name": "containerInsights", "value": "enabled"}
        ]


class TestTaskDefinition:
    """Tests for the workload definition."""

    def test_fargate_sizing(self, acme_graph):
        """Fargate task in awsvpc mode with the default size."""
        task = acme_graph.get("acme-task").attributes

        assert task["requires_compatibilities"] == ["FARGATE"]
        assert task["network_mode"] == "awsvpc"
        assert (task["cpu"], task["memory"]) == ("256", "512")

    def test_image_uses_repository_and_tag(self, acme_graph):
        """The container image is the repository URL at the configured tag."""
        image = _container(acme_graph)["image"]

        assert isinstance(image, Template)
        assert image.format == "{repository_url}:{tag}"
        assert image.as_dict() == {
            "repository_url": Ref("acme-ecr-repository", "repository_url"),
            "tag": "latest",
        }

    def test_port_mapping_and_environment(self, acme_graph):
        """The container port is mapped and exported as PORT."""
        container = _container(acme_graph)

        assert container["portMappings"] == [{"containerPort": 3000, "hostPort": 3000, "protocol": "tcp"}]
        assert {"name": "PORT", "value": "3000"} in container["environment"]
        assert {"name": "ENVIRONMENT", "value": "development"} in container["environment"]

    def test_health_probe(self, acme_graph):
        """The probe runs the configured command as CMD-SHELL."""
        probe = _container(acme_graph)["healthCheck"]

        assert probe["command"] == ["CMD-SHELL", "curl -f http://localhost:3000/health || exit 1"]
        assert probe["interval"] == 30

    def test_logs_to_stack_log_group(self, acme_graph):
        """Container logs go to the stack's log group in the configured region."""
        options = _container(acme_graph)["logConfiguration"]["options"]

        assert options["awslogs-group"] == Ref("acme-log-group", "name")
        assert options["awslogs-region"] == "us-east-1"

    def test_roles_wired(self, acme_graph):
        """Execution and task roles are the stack's own roles."""
        task = acme_graph.get("acme-task").attributes

        assert task["execution_role_arn"] == Ref("acme-execution-role", "arn")
        assert task["task_role_arn"] == Ref("acme-ecr-role", "arn")


class TestService:
    """Tests for the Fargate service."""

    def test_service_placement(self, acme_graph):
        """The service runs in both public subnets behind the workload group."""
        service = acme_graph.get("acme-service").attributes
        network = service["network_configuration"]

        assert service["desired_count"] == 1
        assert service["launch_type"] == "FARGATE"
        assert network["subnets"] == [Ref("acme-public-subnet-a"), Ref("acme-public-subnet-b")]
        assert network["security_groups"] == [Ref("acme-workload-sg")]
        assert network["assign_public_ip"] is True

    def test_service_binds_target_group(self, acme_graph):
        """With a load balancer the service registers the container in the target group."""
        balancers = acme_graph.get("acme-service").attributes["load_balancers"]

        assert balancers == [{
            "target_group_arn": Ref("acme-tg", "arn"),
            "container_name": "acme",
            "container_port": 3000,
        }]

    def test_service_waits_for_listener(self, acme_graph):
        """The service is declared after the listener and health rule."""
        depends_on = acme_graph.get("acme-service").depends_on

        assert {"acme-listener", "acme-health-rule", "acme-tg"} <= depends_on

    def test_service_without_load_balancer(self, compute_config, fake_provider):
        """Compute topology has no load balancer binding."""
        graph = synthesize(compute_config, fake_provider).graph
        service = graph.get("acme-service")

        assert service.attributes["load_balancers"] == []
        assert not graph.nodes_of_kind(ResourceKind.LOAD_BALANCER)
