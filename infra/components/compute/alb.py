"""
Application Load Balancer Component for Workload Traffic.

Core Jobs:
1. Stable Endpoint: tasks come and go, the ALB DNS name stays the same.
2. Distribute Traffic: spread requests across the service's tasks.
3. Health Check: ping targets and stop routing to unhealthy ones.

The 4-Resource Chain:
1. Load Balancer: the "building". Internet-facing, spans both public subnets,
   guarded by the ALB security group.
2. Target Group: the "pool of servers". IP targets, because Fargate tasks in
   awsvpc mode get their own ENI address instead of sharing the host's.
3. Listener: the "door". Port 80, forwards to the target group by default.
4. Health Rule: priority 1, answers the health path with a fixed 200 "OK" at
   the edge. Rules are evaluated by ascending priority and the default action
   runs last, so liveness probes never reach (or depend on) the workload.
"""

from dataclasses import dataclass

from infra.configs.base import StackConfig
from infra.configs.constants import (
    HEALTH_RULE_PRIORITY,
    LB_NAME_MAX_LENGTH,
    PORTS,
    TARGET_HEALTH_CHECK,
)
from infra.core.graph import Ref, ResourceKind, StackGraph
from infra.utils.logger import get_logger
from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags

logger = get_logger(__name__)


@dataclass
class AlbOutputs:
    """Output values from ALB component."""
    alb_dns_name: Ref
    target_group_arn: Ref
    listener_name: str
    health_rule_name: str


class AlbComponent:
    """
    Internet-facing Application Load Balancer for the ECS service.
    """

    def __init__(
        self,
        graph: StackGraph,
        namer: ResourceNamer,
        config: StackConfig,
        vpc_id: Ref,
        subnet_ids: tuple[Ref, ...],
        security_group_id: Ref,
    ) -> None:
        environment = config.environment

        alb_name = namer.name("alb", max_length=LB_NAME_MAX_LENGTH)
        self.alb = graph.add(
            ResourceKind.LOAD_BALANCER,
            namer.name("alb"),
            {
                "name": alb_name,
                "internal": False,
                "load_balancer_type": "application",
                "security_groups": [security_group_id],
                "subnets": list(subnet_ids),
                "enable_deletion_protection": False,
                "tags": create_tags(environment, alb_name, Project=config.name),
            },
        )

        # Target Group for Fargate tasks
        tg_name = namer.name("tg", max_length=LB_NAME_MAX_LENGTH)
        self.target_group = graph.add(
            ResourceKind.TARGET_GROUP,
            namer.name("tg"),
            {
                "name": tg_name,
                "port": config.container_port,
                "protocol": "HTTP",
                "vpc_id": vpc_id,
                "target_type": "ip",
                "health_check": {
                    "enabled": True,
                    "path": config.health_check_path,
                    "port": "traffic-port",
                    "protocol": "HTTP",
                    "matcher": "200",
                    **TARGET_HEALTH_CHECK,
                },
                "tags": create_tags(environment, tg_name, Project=config.name),
            },
        )

        # HTTP Listener
        self.listener = graph.add(
            ResourceKind.LISTENER,
            namer.name("listener"),
            {
                "load_balancer_arn": self.alb.ref("arn"),
                "port": PORTS["http"],
                "protocol": "HTTP",
                "default_actions": [{
                    "type": "forward",
                    "target_group_arn": self.target_group.ref("arn"),
                }],
                "tags": create_tags(environment, namer.name("listener"), Project=config.name),
            },
        )

        # Health path answered by the ALB itself
        self.health_rule = graph.add(
            ResourceKind.LISTENER_RULE,
            namer.name("health-rule"),
            {
                "listener_arn": self.listener.ref("arn"),
                "priority": HEALTH_RULE_PRIORITY,
                "actions": [{
                    "type": "fixed-response",
                    "fixed_response": {
                        "content_type": "text/plain",
                        "message_body": "OK",
                        "status_code": "200",
                    },
                }],
                "conditions": [{
                    "path_pattern": {"values": [config.health_check_path]},
                }],
                "tags": create_tags(environment, namer.name("health-rule"), Project=config.name),
            },
        )

        logger.info("Load balancer %s -> target group %s on port %d", alb_name, tg_name, config.container_port)

    def get_outputs(self) -> AlbOutputs:
        """Get ALB output values."""
        return AlbOutputs(
            alb_dns_name=self.alb.ref("dns_name"),
            target_group_arn=self.target_group.ref("arn"),
            listener_name=self.listener.logical_name,
            health_rule_name=self.health_rule.logical_name,
        )
