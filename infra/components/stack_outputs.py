"""
Stack outputs exporter.

Collects identifiers, URLs and ARNs from every component into one flat
table, plus convenience strings for humans and CI (registry login, role
assumption, health and application URLs). Runs last; a key a consumer
depends on that was not produced is a MissingOutput error.
"""

from infra.components.compute.alb import AlbOutputs
from infra.components.compute.ecs_cluster import EcsClusterOutputs
from infra.components.compute.ecs_service import EcsServiceOutputs
from infra.components.networking.security_groups import SecurityGroupOutputs
from infra.components.networking.vpc import VpcOutputs
from infra.components.security.iam_roles import IamRoleOutputs
from infra.components.storage.ecr_repository import EcrRepositoryOutputs
from infra.configs.base import StackConfig
from infra.configs.constants import (
    COMPUTE_OUTPUT_KEYS,
    LOAD_BALANCER_OUTPUT_KEYS,
    REGISTRY_OUTPUT_KEYS,
)
from infra.core.graph import Template
from infra.core.outputs import OutputTable


def required_output_keys(config: StackConfig) -> tuple[str, ...]:
    """Output keys the configured topology must produce."""
    keys = REGISTRY_OUTPUT_KEYS
    if config.includes_compute:
        keys += COMPUTE_OUTPUT_KEYS
    if config.includes_load_balancer:
        keys += LOAD_BALANCER_OUTPUT_KEYS
    return keys


class StackOutputsComponent:
    """Builds the output table for one synthesis pass."""

    def __init__(
        self,
        config: StackConfig,
        registry: EcrRepositoryOutputs,
        roles: IamRoleOutputs,
        network: VpcOutputs | None = None,
        security_groups: SecurityGroupOutputs | None = None,
        cluster: EcsClusterOutputs | None = None,
        service: EcsServiceOutputs | None = None,
        load_balancer: AlbOutputs | None = None,
    ) -> None:
        self.table = OutputTable()
        add = self.table.add

        # --- Registry tier ---
        add("ecr-repository-url", registry.repository_url, "ECR Repository URL for pushing/pulling images")
        add("ecr-repository-arn", registry.repository_arn, "ECR Repository ARN")
        add("ecr-repository-name", registry.repository_name, "ECR Repository Name")
        add("access-role-arn", roles.access_role_arn, "IAM Role ARN for pulling images (ECS task role)")
        add("access-role-name", roles.access_role_name, "IAM Role Name for pulling images")
        add("deployment-role-arn", roles.deployment_role_arn, "IAM Role ARN for CI/CD deployments")
        add("deployment-role-name", roles.deployment_role_name, "IAM Role Name for CI/CD deployments")
        add(
            "docker-login-command",
            Template.of(
                "aws ecr get-login-password --region {region} | "
                "docker login --username AWS --password-stdin {repository_url}",
                region=config.region,
                repository_url=registry.repository_url,
            ),
            "Command to authenticate Docker with ECR",
        )
        add(
            "assume-role-command",
            Template.of(
                "aws sts assume-role --role-arn {role_arn} --role-session-name {session}",
                role_arn=roles.deployment_role_arn,
                session=f"{config.name}-deployment",
            ),
            "Command to assume the deployment role",
        )

        # --- Compute tier ---
        if network is not None:
            add("vpc-id", network.vpc_id, "VPC ID")
            add("public-subnet-ids", list(network.subnet_ids), "Public subnet IDs")
        if security_groups is not None:
            add("workload-security-group-id", security_groups.workload_sg_id, "Workload security group ID")
            if security_groups.alb_sg_id is not None:
                add(
                    "load-balancer-security-group-id",
                    security_groups.alb_sg_id,
                    "Load balancer security group ID",
                )
        if roles.execution_role_arn is not None:
            add("execution-role-arn", roles.execution_role_arn, "IAM Role ARN for ECS task execution")
            add("execution-role-name", roles.execution_role_name, "IAM Role Name for ECS task execution")
        if cluster is not None:
            add("ecs-cluster-name", cluster.cluster_name, "ECS Cluster Name")
            add("ecs-cluster-arn", cluster.cluster_arn, "ECS Cluster ARN")
            add("log-group-name", cluster.log_group_ref, "CloudWatch Log Group for the workload")
        if service is not None:
            add("ecs-service-name", service.service_name, "ECS Service Name")
            add("task-definition-arn", service.task_definition_arn, "ECS Task Definition ARN")

        # --- Load balancing tier ---
        if load_balancer is not None:
            add("load-balancer-dns-name", load_balancer.alb_dns_name, "Load balancer DNS name")
            add(
                "health-check-url",
                Template.of(
                    "http://{dns_name}{path}",
                    dns_name=load_balancer.alb_dns_name,
                    path=config.health_check_path,
                ),
                "Health endpoint answered at the load balancer",
            )
            add(
                "application-url",
                Template.of("http://{dns_name}", dns_name=load_balancer.alb_dns_name),
                "Application base URL",
            )

        self.table.require(required_output_keys(config))

    def get_outputs(self) -> OutputTable:
        return self.table
