"""
Infrastructure constants for the stack assembler.

Contains CIDR blocks, ports, defaults and output key sets.
"""

from typing import Final

# VPC Configuration
VPC_CIDR: Final[str] = "10.0.0.0/16"

# Public subnets are carved from VPC_CIDR as consecutive blocks of this size,
# skipping the first block.
SUBNET_PREFIX_LENGTH: Final[int] = 24

# Load balancer and workload both span this many zones
REQUIRED_AVAILABILITY_ZONES: Final[int] = 2

ANYWHERE_CIDR: Final[str] = "0.0.0.0/0"

# Port configurations
PORTS: Final[dict[str, int]] = {
    "http": 80,
    "https": 443,
    "dns": 53,
}

# Defaults for optional configuration keys
CONFIG_DEFAULTS: Final[dict[str, str]] = {
    "name": "tv-devops-assessment",
    "image_tag_mutability": "MUTABLE",
    "scan_on_push": "false",
    "image_tag": "latest",
    "container_port": "3000",
    "topology": "load-balanced",
    "environment": "development",
    "desired_count": "1",
    "log_retention_days": "7",
    "health_check_path": "/health",
}

# Checked in this order; region last so credential errors surface first
REQUIRED_CONFIG_KEYS: Final[tuple[str, ...]] = (
    "access_key_id",
    "secret_access_key",
    "region",
)

# Values accepted by CloudWatch Logs for retention_in_days
LOG_RETENTION_DAYS: Final[frozenset[int]] = frozenset({
    1, 3, 5, 7, 14, 30, 60, 90, 120, 150, 180, 365, 400, 545, 731,
    1096, 1827, 2192, 2557, 2922, 3288, 3653,
})

# Fargate task sizing
TASK_DEFAULTS: Final[dict[str, str]] = {
    "cpu": "256",
    "memory": "512",
}

# Container health probe (seconds)
HEALTH_CHECK_DEFAULTS: Final[dict[str, int]] = {
    "interval": 30,
    "timeout": 5,
    "retries": 3,
    "start_period": 60,
}

# Target group health check
TARGET_HEALTH_CHECK: Final[dict[str, int]] = {
    "healthy_threshold": 2,
    "unhealthy_threshold": 3,
    "timeout": 5,
    "interval": 30,
}

# Listener rule answering the health path at the edge
HEALTH_RULE_PRIORITY: Final[int] = 1

# ECR lifecycle: images kept before expiry
IMAGE_RETENTION_COUNT: Final[int] = 10

# Load balancer and target group names are limited to 32 characters
LB_NAME_MAX_LENGTH: Final[int] = 32

ECS_TASKS_PRINCIPAL: Final[str] = "ecs-tasks.amazonaws.com"

# Default tags applied to all resources
DEFAULT_TAGS: Final[dict[str, str]] = {
    "ManagedBy": "pulumi",
}

# Output keys each topology tier contributes
REGISTRY_OUTPUT_KEYS: Final[tuple[str, ...]] = (
    "ecr-repository-url",
    "ecr-repository-arn",
    "ecr-repository-name",
    "access-role-arn",
    "access-role-name",
    "deployment-role-arn",
    "deployment-role-name",
    "docker-login-command",
    "assume-role-command",
)

COMPUTE_OUTPUT_KEYS: Final[tuple[str, ...]] = (
    "execution-role-arn",
    "execution-role-name",
    "vpc-id",
    "public-subnet-ids",
    "workload-security-group-id",
    "ecs-cluster-name",
    "ecs-cluster-arn",
    "ecs-service-name",
    "task-definition-arn",
    "log-group-name",
)

LOAD_BALANCER_OUTPUT_KEYS: Final[tuple[str, ...]] = (
    "load-balancer-security-group-id",
    "load-balancer-dns-name",
    "health-check-url",
    "application-url",
)
