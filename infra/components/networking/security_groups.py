"""
Security Groups Component for Network Access Control.

Architectural Steps & Flow:
1. Create "Shell" Security Groups:
   - Identity Badges: the ALB and workload groups are created without inline
     rules so each can be referenced by ID from the other's rules.

2. Define Rules (Layering):
   - ALB: accepts HTTP/HTTPS from anywhere, may send anywhere.
   - Workload: accepts the container port ONLY from the ALB group. No CIDR
     source is ever used for workload ingress, so the internet can reach the
     tasks only through the load balancer.
   - Workload egress is limited to what the task needs: HTTPS/HTTP for ECR
     pulls and CloudWatch Logs, DNS over TCP and UDP.

3. Without the load balancing tier the workload group has no ingress at all.

4. Stateful Nature:
   - Security groups are stateful. Allowing an inbound request automatically
     allows the reply.
"""

import enum
from dataclasses import dataclass
from typing import Any

from infra.configs.base import StackConfig
from infra.configs.constants import ANYWHERE_CIDR, PORTS
from infra.core.graph import Ref, ResourceKind, StackGraph
from infra.utils.logger import get_logger
from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags

logger = get_logger(__name__)


class Direction(str, enum.Enum):
    INGRESS = "ingress"
    EGRESS = "egress"


class Protocol(str, enum.Enum):
    TCP = "tcp"
    UDP = "udp"
    ALL = "-1"


@dataclass(frozen=True)
class SecurityRule:
    """
    One directional security group rule.

    Attributes:
        direction: ingress or egress
        protocol: tcp, udp or all
        from_port: First port of the range (ignored for all protocols)
        to_port: Last port of the range
        source: CIDR string, or a Ref to another security group's id
        description: Rule description
    """
    direction: Direction
    protocol: Protocol
    from_port: int
    to_port: int
    source: str | Ref
    description: str = ""

    @property
    def port_range(self) -> tuple[int, int]:
        return (self.from_port, self.to_port)

    @property
    def is_cidr(self) -> bool:
        return isinstance(self.source, str)

    def to_dict(self) -> dict[str, Any]:
        rule: dict[str, Any] = {
            "direction": self.direction.value,
            "ip_protocol": self.protocol.value,
            "description": self.description,
        }
        if self.protocol != Protocol.ALL:
            rule["from_port"] = self.from_port
            rule["to_port"] = self.to_port
        if self.is_cidr:
            rule["cidr_ipv4"] = self.source
        else:
            rule["referenced_security_group_id"] = self.source
        return rule


def security_rules(graph: StackGraph, group_logical_name: str) -> list[SecurityRule]:
    """Return every rule attached to a security group in graph."""
    group = graph.get(group_logical_name)
    return [
        node.attributes["rule"]
        for node in graph.nodes_of_kind(ResourceKind.SECURITY_GROUP_RULE)
        if node.attributes["security_group_id"] == group.ref()
    ]


@dataclass
class SecurityGroupOutputs:
    """Output values from security groups component."""
    workload_sg_id: Ref
    alb_sg_id: Ref | None


class SecurityGroupsComponent:
    """
    Security groups for the load balancer and the workload.

    Implements least-privilege layering:
    - Internet -> ALB on web ports
    - ALB -> workload on the container port
    - Workload -> internet on web and DNS ports only
    """

    def __init__(
        self,
        graph: StackGraph,
        namer: ResourceNamer,
        config: StackConfig,
        vpc_id: Ref,
    ) -> None:
        self.graph = graph
        self.namer = namer
        self.config = config

        # ALB security group
        self.alb_sg = None
        if config.includes_load_balancer:
            self.alb_sg = self._create_group(vpc_id, "alb-sg", "Security group for Application Load Balancer")

        # Workload security group
        self.workload_sg = self._create_group(vpc_id, "workload-sg", "Security group for ECS workload tasks")

        self._create_rules()

    def _create_group(self, vpc_id: Ref, resource: str, description: str):
        group_name = self.namer.name(resource)
        return self.graph.add(
            ResourceKind.SECURITY_GROUP,
            group_name,
            {
                "name": group_name,
                "description": description,
                "vpc_id": vpc_id,
                "tags": create_tags(self.config.environment, group_name, Project=self.config.name),
            },
        )

    def _add_rule(self, group, resource: str, rule: SecurityRule) -> None:
        self.graph.add(
            ResourceKind.SECURITY_GROUP_RULE,
            self.namer.name(resource),
            {
                "security_group_id": group.ref(),
                "rule": rule,
            },
        )

    def _create_rules(self) -> None:
        """Create security group rules."""
        port = self.config.container_port

        if self.alb_sg is not None:
            # ALB: Allow inbound HTTP/HTTPS from anywhere
            for label in ("http", "https"):
                self._add_rule(self.alb_sg, f"alb-ingress-{label}", SecurityRule(
                    direction=Direction.INGRESS,
                    protocol=Protocol.TCP,
                    from_port=PORTS[label],
                    to_port=PORTS[label],
                    source=ANYWHERE_CIDR,
                    description=f"{label.upper()} from internet",
                ))

            # ALB: Allow all outbound
            self._add_rule(self.alb_sg, "alb-egress-all", SecurityRule(
                direction=Direction.EGRESS,
                protocol=Protocol.ALL,
                from_port=0,
                to_port=0,
                source=ANYWHERE_CIDR,
                description="All outbound traffic",
            ))

            # Workload: Allow inbound on the container port from ALB only
            self._add_rule(self.workload_sg, "workload-ingress-app", SecurityRule(
                direction=Direction.INGRESS,
                protocol=Protocol.TCP,
                from_port=port,
                to_port=port,
                source=self.alb_sg.ref(),
                description="Application port from ALB",
            ))

        # Workload: ECR pulls and CloudWatch Logs
        for label in ("https", "http"):
            self._add_rule(self.workload_sg, f"workload-egress-{label}", SecurityRule(
                direction=Direction.EGRESS,
                protocol=Protocol.TCP,
                from_port=PORTS[label],
                to_port=PORTS[label],
                source=ANYWHERE_CIDR,
                description=f"{label.upper()} for registry pulls and log delivery",
            ))

        # Workload: name resolution
        for protocol in (Protocol.TCP, Protocol.UDP):
            self._add_rule(self.workload_sg, f"workload-egress-dns-{protocol.value}", SecurityRule(
                direction=Direction.EGRESS,
                protocol=protocol,
                from_port=PORTS["dns"],
                to_port=PORTS["dns"],
                source=ANYWHERE_CIDR,
                description=f"DNS over {protocol.value.upper()}",
            ))

        logger.info(
            "Security groups: workload=%s alb=%s",
            self.workload_sg.logical_name,
            self.alb_sg.logical_name if self.alb_sg is not None else None,
        )

    def get_outputs(self) -> SecurityGroupOutputs:
        """Get security group output values."""
        return SecurityGroupOutputs(
            workload_sg_id=self.workload_sg.ref(),
            alb_sg_id=self.alb_sg.ref() if self.alb_sg is not None else None,
        )
