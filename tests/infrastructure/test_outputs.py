"""
Tests for the output exporter.

Validates:
1. Resolved values for identifiers and derived commands
2. Duplicate keys and missing required keys are builder errors
"""

import pytest

from infra.components.security.iam_roles import IamRoleOutputs
from infra.components.stack_outputs import StackOutputsComponent
from infra.components.storage.ecr_repository import EcrRepositoryOutputs
from infra.core.exceptions import DuplicateOutput, MissingOutput
from infra.core.outputs import OutputTable
from infra.stack import apply_stack, synthesize


@pytest.fixture
def acme_outputs(acme_config, fake_provider):
    """Resolved outputs of the load-balanced acme stack."""
    return apply_stack(synthesize(acme_config, fake_provider), fake_provider)


class TestResolvedOutputs:
    """Tests for output values after apply."""

    def test_repository_outputs(self, acme_outputs):
        """Repository URL, ARN and name come from the registry node."""
        assert acme_outputs["ecr-repository-url"] == "123456789012.dkr.ecr.us-east-1.amazonaws.com/acme"
        assert acme_outputs["ecr-repository-arn"].endswith(":acme-ecr-repository")
        assert acme_outputs["ecr-repository-name"] == "acme"

    def test_docker_login_command(self, acme_outputs):
        """The login command targets the configured region and repository."""
        assert acme_outputs["docker-login-command"] == (
            "aws ecr get-login-password --region us-east-1 | "
            "docker login --username AWS --password-stdin "
            "123456789012.dkr.ecr.us-east-1.amazonaws.com/acme"
        )

    def test_assume_role_command(self, acme_outputs):
        """The assume-role command uses the deployment role."""
        assert acme_outputs["assume-role-command"] == (
            f"aws sts assume-role --role-arn {acme_outputs['deployment-role-arn']} "
            "--role-session-name acme-deployment"
        )

    def test_role_names(self, acme_outputs):
        """Role names are derived from the stack name."""
        assert acme_outputs["access-role-name"] == "acme-ecr-role"
        assert acme_outputs["execution-role-name"] == "acme-execution-role"
        assert acme_outputs["deployment-role-name"] == "acme-deployment-role"

    def test_compute_outputs(self, acme_outputs):
        """Cluster, service, log group and subnets are exported."""
        assert acme_outputs["ecs-cluster-name"] == "acme-cluster"
        assert acme_outputs["ecs-service-name"] == "acme-service"
        assert acme_outputs["log-group-name"] == "/ecs/acme"
        assert acme_outputs["public-subnet-ids"] == ["acme-public-subnet-a-id", "acme-public-subnet-b-id"]

    def test_urls(self, acme_outputs):
        """Application and health URLs are built on the ALB DNS name."""
        dns_name = acme_outputs["load-balancer-dns-name"]

        assert acme_outputs["application-url"] == f"http://{dns_name}"
        assert acme_outputs["health-check-url"] == f"http://{dns_name}/health"

    def test_registry_outputs_only(self, registry_config, fake_provider):
        """Registry topology exports no compute or load balancer keys."""
        outputs = apply_stack(synthesize(registry_config, fake_provider), fake_provider)

        assert "vpc-id" not in outputs
        assert "application-url" not in outputs
        assert "execution-role-arn" not in outputs


class TestOutputErrors:
    """Tests for output table misuse."""

    def test_duplicate_key(self):
        """Registering a key twice is a DuplicateOutput."""
        table = OutputTable()
        table.add("vpc-id", "vpc-1", "VPC")

        with pytest.raises(DuplicateOutput):
            table.add("vpc-id", "vpc-2", "VPC")

    def test_missing_compute_outputs(self, compute_config, fake_provider):
        """A compute topology without its network outputs is a MissingOutput."""
        stack = synthesize(compute_config, fake_provider)
        outputs = {entry.key: entry.value for entry in stack.outputs}

        registry = EcrRepositoryOutputs(
            repository_url=outputs["ecr-repository-url"],
            repository_arn=outputs["ecr-repository-arn"],
            repository_name=outputs["ecr-repository-name"],
        )
        roles = IamRoleOutputs(
            access_role_arn=outputs["access-role-arn"],
            access_role_name=outputs["access-role-name"],
            deployment_role_arn=outputs["deployment-role-arn"],
            deployment_role_name=outputs["deployment-role-name"],
            execution_role_arn=None,
            execution_role_name=None,
        )

        with pytest.raises(MissingOutput) as exc_info:
            StackOutputsComponent(compute_config, registry=registry, roles=roles)

        assert "vpc-id" in exc_info.value.keys
        assert "execution-role-arn" in exc_info.value.keys
