"""
VPC Component for Network Topology.

Steps & Architecture:
1. Zones: the first two available zones of the region, in provider order.
   Fewer than two is fatal; the load balancer and the service both need two.
2. VPC (10.0.0.0/16): the isolated network container, DNS enabled.
3. Internet Gateway (IGW): the "door" to the internet, attached to the VPC.
4. Public Subnets: one per zone, consecutive /24 blocks starting at
   10.0.1.0/24, public IPs assigned on launch.
5. Route Table: one public table with 0.0.0.0/0 -> IGW.
6. Associations: each public subnet linked to the public table.

There are no private subnets. Fargate tasks get public IPs so they can pull
from ECR and ship logs without a NAT gateway; the security groups decide
what may reach them.
"""

import ipaddress
from collections.abc import Sequence
from dataclasses import dataclass

from infra.configs.base import StackConfig
from infra.configs.constants import (
    ANYWHERE_CIDR,
    REQUIRED_AVAILABILITY_ZONES,
    SUBNET_PREFIX_LENGTH,
    VPC_CIDR,
)
from infra.core.exceptions import InsufficientAvailabilityZones
from infra.core.graph import Ref, ResourceKind, StackGraph
from infra.utils.logger import get_logger
from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags

logger = get_logger(__name__)


def select_availability_zones(
    zones: Sequence[str],
    region: str,
    count: int = REQUIRED_AVAILABILITY_ZONES,
) -> tuple[str, ...]:
    """
    Pick the first `count` zones in the order the provider returned them.

    Raises:
        InsufficientAvailabilityZones: fewer than `count` zones available
    """
    if len(zones) < count:
        raise InsufficientAvailabilityZones(region, zones, count)
    return tuple(zones[:count])


def carve_subnet_cidrs(
    vpc_cidr: str,
    count: int,
    prefix_length: int = SUBNET_PREFIX_LENGTH,
) -> tuple[str, ...]:
    """
    Split vpc_cidr into `count` consecutive, non-overlapping blocks.

    The first block is skipped so 10.0.0.0/16 yields 10.0.1.0/24, 10.0.2.0/24, ...
    """
    blocks = ipaddress.ip_network(vpc_cidr).subnets(new_prefix=prefix_length)
    next(blocks)
    return tuple(str(next(blocks)) for _ in range(count))


@dataclass
class VpcOutputs:
    """Output values from VPC component."""
    vpc_id: Ref
    vpc_cidr: str
    subnet_ids: tuple[Ref, ...]
    subnet_cidrs: tuple[str, ...]
    availability_zones: tuple[str, ...]
    internet_gateway_id: Ref
    route_table_id: Ref


class VpcComponent:
    """
    VPC with one public subnet per selected zone and an internet route.
    """

    def __init__(
        self,
        graph: StackGraph,
        namer: ResourceNamer,
        config: StackConfig,
        availability_zones: Sequence[str],
    ) -> None:
        self.graph = graph
        self.namer = namer
        self.environment = config.environment
        self.project = config.name

        # Create VPC
        self.vpc = graph.add(
            ResourceKind.NETWORK,
            namer.name("vpc"),
            {
                "cidr_block": VPC_CIDR,
                "enable_dns_hostnames": True,
                "enable_dns_support": True,
                "tags": self._tags("vpc"),
            },
        )

        self.igw = graph.add(
            ResourceKind.INTERNET_GATEWAY,
            namer.name("igw"),
            {
                "vpc_id": self.vpc.ref(),
                "tags": self._tags("igw"),
            },
        )

        # One public subnet per zone (2 AZs required for internet-facing ALB)
        self.zones = tuple(availability_zones)
        self.subnet_cidrs = carve_subnet_cidrs(VPC_CIDR, len(self.zones))
        self.subnets = []
        for suffix, zone, cidr in zip("abcdefgh", self.zones, self.subnet_cidrs):
            self.subnets.append(graph.add(
                ResourceKind.SUBNET,
                namer.name(f"public-subnet-{suffix}"),
                {
                    "vpc_id": self.vpc.ref(),
                    "cidr_block": cidr,
                    "availability_zone": zone,
                    "map_public_ip_on_launch": True,
                    "tags": self._tags(f"public-subnet-{suffix}"),
                },
            ))

        self._create_route_table()
        logger.info(
            "Network %s: %s across %s",
            self.vpc.logical_name,
            ", ".join(self.subnet_cidrs),
            ", ".join(self.zones),
        )

    def _tags(self, resource: str) -> dict[str, str]:
        return create_tags(self.environment, self.namer.name(resource), Project=self.project)

    def _create_route_table(self) -> None:
        """Create the public route table, its default route and associations."""
        self.route_table = self.graph.add(
            ResourceKind.ROUTE_TABLE,
            self.namer.name("public-rt"),
            {
                "vpc_id": self.vpc.ref(),
                "tags": self._tags("public-rt"),
            },
        )

        # Replies to internet clients leave through the IGW
        self.default_route = self.graph.add(
            ResourceKind.ROUTE,
            self.namer.name("public-route"),
            {
                "route_table_id": self.route_table.ref(),
                "destination_cidr_block": ANYWHERE_CIDR,
                "gateway_id": self.igw.ref(),
            },
        )

        for suffix, subnet in zip("abcdefgh", self.subnets):
            self.graph.add(
                ResourceKind.ROUTE_TABLE_ASSOCIATION,
                self.namer.name(f"public-rt-assoc-{suffix}"),
                {
                    "subnet_id": subnet.ref(),
                    "route_table_id": self.route_table.ref(),
                },
            )

    def get_outputs(self) -> VpcOutputs:
        """Get VPC output values."""
        return VpcOutputs(
            vpc_id=self.vpc.ref(),
            vpc_cidr=VPC_CIDR,
            subnet_ids=tuple(subnet.ref() for subnet in self.subnets),
            subnet_cidrs=self.subnet_cidrs,
            availability_zones=self.zones,
            internet_gateway_id=self.igw.ref(),
            route_table_id=self.route_table.ref(),
        )
