"""
Compute components for ECS Fargate and load balancing.

Components:
- EcsClusterComponent: ECS cluster and workload log group
- EcsServiceComponent: Task definition and Fargate service
- AlbComponent: Application Load Balancer, target group, listener, health rule
"""

from infra.components.compute.alb import AlbComponent, AlbOutputs
from infra.components.compute.ecs_cluster import EcsClusterComponent, EcsClusterOutputs
from infra.components.compute.ecs_service import EcsServiceComponent, EcsServiceOutputs

__all__ = [
    "AlbComponent",
    "AlbOutputs",
    "EcsClusterComponent",
    "EcsClusterOutputs",
    "EcsServiceComponent",
    "EcsServiceOutputs",
]
