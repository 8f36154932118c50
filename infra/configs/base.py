"""
Base configuration dataclasses for stack synthesis.

StackConfig is the immutable, validated value every builder consumes.
Credentials are kept in a separate value so they never reach the graph.
"""

import enum
from dataclasses import dataclass, field

from infra.core.exceptions import InvalidConfig


class ImageTagMutability(str, enum.Enum):
    """ECR tag mutability modes."""

    MUTABLE = "MUTABLE"
    IMMUTABLE = "IMMUTABLE"


class TopologyMode(str, enum.Enum):
    """Which tiers of the stack are synthesized."""

    REGISTRY = "registry"
    COMPUTE = "compute"
    LOAD_BALANCED = "load-balanced"


@dataclass(frozen=True)
class StackConfig:
    """
    Resolved configuration for one synthesis pass.

    Attributes:
        name: Stack and repository name, prefix of every derived resource name
        region: AWS region
        image_tag_mutability: ECR tag mutability
        scan_on_push: Scan images for CVEs on push
        image_tag: Image tag the workload runs
        container_port: Port the application listens on
        topology: Tiers to include
        environment: Deployment environment, used for tagging
        desired_count: Target number of running tasks
        log_retention_days: CloudWatch retention for the workload log group
        health_check_path: Path answered at the load balancer edge
        health_check_command: Shell command the container probe runs
    """
    name: str
    region: str
    image_tag_mutability: ImageTagMutability = ImageTagMutability.MUTABLE
    scan_on_push: bool = False
    image_tag: str = "latest"
    container_port: int = 3000
    topology: TopologyMode = TopologyMode.LOAD_BALANCED
    environment: str = "development"
    desired_count: int = 1
    log_retention_days: int = 7
    health_check_path: str = "/health"
    health_check_command: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidConfig("name", self.name, "must not be empty")
        if not self.region:
            raise InvalidConfig("region", self.region, "must not be empty")
        if self.container_port <= 0:
            raise InvalidConfig("container_port", self.container_port, "must be a positive integer")
        if not self.health_check_command:
            object.__setattr__(
                self,
                "health_check_command",
                f"curl -f http://localhost:{self.container_port}{self.health_check_path} || exit 1",
            )

    @property
    def includes_compute(self) -> bool:
        """Network, cluster and service tiers are synthesized."""
        return self.topology in (TopologyMode.COMPUTE, TopologyMode.LOAD_BALANCED)

    @property
    def includes_load_balancer(self) -> bool:
        """Load balancing tier is synthesized."""
        return self.topology == TopologyMode.LOAD_BALANCED


@dataclass(frozen=True)
class AwsCredentials:
    """Access credentials for the AWS provider."""
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str | None = field(default=None, repr=False)
