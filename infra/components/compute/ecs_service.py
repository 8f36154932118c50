"""
ECS Fargate workload: task definition and running service.

The task definition runs the registry image at the configured tag with:
- the container port mapped (awsvpc, so host port == container port)
- a periodic CMD-SHELL health probe
- PORT and ENVIRONMENT variables
- awslogs delivery to the stack's log group

The service keeps desired_count tasks on the public subnets behind the
workload security group. With the load balancing tier it registers against
the target group and waits for the listener and health rule.
"""

from dataclasses import dataclass

from infra.components.compute.alb import AlbOutputs
from infra.components.compute.ecs_cluster import EcsClusterOutputs
from infra.components.security.iam_roles import IamRoleOutputs
from infra.components.storage.ecr_repository import EcrRepositoryOutputs
from infra.configs.base import StackConfig
from infra.configs.constants import HEALTH_CHECK_DEFAULTS, TASK_DEFAULTS
from infra.core.graph import Ref, ResourceKind, StackGraph, Template
from infra.utils.logger import get_logger
from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags

logger = get_logger(__name__)


@dataclass
class EcsServiceOutputs:
    """Output values from ECS service component."""
    service_name: Ref
    task_definition_arn: Ref


class EcsServiceComponent:
    """Task definition plus the Fargate service that runs it."""

    def __init__(
        self,
        graph: StackGraph,
        namer: ResourceNamer,
        config: StackConfig,
        registry: EcrRepositoryOutputs,
        cluster: EcsClusterOutputs,
        roles: IamRoleOutputs,
        subnet_ids: tuple[Ref, ...],
        security_group_id: Ref,
        load_balancer: AlbOutputs | None = None,
    ) -> None:
        self.container_name = config.name
        port = config.container_port
        environment = config.environment

        family = namer.name("task")
        self.task_definition = graph.add(
            ResourceKind.WORKLOAD,
            family,
            {
                "family": family,
                "cpu": TASK_DEFAULTS["cpu"],
                "memory": TASK_DEFAULTS["memory"],
                "network_mode": "awsvpc",
                "requires_compatibilities": ["FARGATE"],
                "execution_role_arn": roles.execution_role_arn,
                "task_role_arn": roles.access_role_arn,
                "container_definitions": [{
                    "name": self.container_name,
                    "image": Template.of(
                        "{repository_url}:{tag}",
                        repository_url=registry.repository_url,
                        tag=config.image_tag,
                    ),
                    "essential": True,
                    "portMappings": [{
                        "containerPort": port,
                        "hostPort": port,
                        "protocol": "tcp",
                    }],
                    "environment": [
                        {"name": "ENVIRONMENT", "value": environment},
                        {"name": "PORT", "value": str(port)},
                    ],
                    "healthCheck": {
                        "command": ["CMD-SHELL", config.health_check_command],
                        "interval": HEALTH_CHECK_DEFAULTS["interval"],
                        "timeout": HEALTH_CHECK_DEFAULTS["timeout"],
                        "retries": HEALTH_CHECK_DEFAULTS["retries"],
                        "startPeriod": HEALTH_CHECK_DEFAULTS["start_period"],
                    },
                    "logConfiguration": {
                        "logDriver": "awslogs",
                        "options": {
                            "awslogs-group": cluster.log_group_ref,
                            "awslogs-region": config.region,
                            "awslogs-stream-prefix": "ecs",
                        },
                    },
                }],
                "tags": create_tags(environment, family, Project=config.name),
            },
        )

        load_balancers = []
        depends_on: list[str] = []
        if load_balancer is not None:
            load_balancers.append({
                "target_group_arn": load_balancer.target_group_arn,
                "container_name": self.container_name,
                "container_port": port,
            })
            depends_on = [load_balancer.listener_name, load_balancer.health_rule_name]

        service_name = namer.name("service")
        self.service = graph.add(
            ResourceKind.SERVICE,
            service_name,
            {
                "name": service_name,
                "cluster": cluster.cluster_arn,
                "task_definition": self.task_definition.ref("arn"),
                "desired_count": config.desired_count,
                "launch_type": "FARGATE",
                "network_configuration": {
                    "subnets": list(subnet_ids),
                    "security_groups": [security_group_id],
                    "assign_public_ip": True,
                },
                "load_balancers": load_balancers,
                "tags": create_tags(environment, service_name, Project=config.name),
            },
            depends_on=depends_on,
        )

        logger.info(
            "Service %s: %d task(s) of %s:%s on port %d",
            service_name,
            config.desired_count,
            config.name,
            config.image_tag,
            port,
        )

    def get_outputs(self) -> EcsServiceOutputs:
        return EcsServiceOutputs(
            service_name=self.service.ref("name"),
            task_definition_arn=self.task_definition.ref("arn"),
        )
