"""
ECS cluster and workload log group.

Both exist before the IAM roles so the execution and deployment policies
can be scoped to them.
"""

from dataclasses import dataclass

from infra.configs.base import StackConfig
from infra.core.graph import Ref, ResourceKind, StackGraph
from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags


@dataclass
class EcsClusterOutputs:
    """Output values from ECS cluster component."""
    cluster_name: str
    cluster_arn: Ref
    log_group_name: str
    log_group_ref: Ref


class EcsClusterComponent:
    """Fargate cluster with container insights, plus the workload's log group."""

    def __init__(
        self,
        graph: StackGraph,
        namer: ResourceNamer,
        config: StackConfig,
    ) -> None:
        self.log_group_name = namer.log_group_name()
        self.log_group = graph.add(
            ResourceKind.LOG_GROUP,
            namer.name("log-group"),
            {
                "name": self.log_group_name,
                "retention_in_days": config.log_retention_days,
                "tags": create_tags(config.environment, self.log_group_name, Project=config.name),
            },
        )

        self.cluster_name = namer.name("cluster")
        self.cluster = graph.add(
            ResourceKind.CLUSTER,
            self.cluster_name,
            {
                "name": self.cluster_name,
                "settings": [{"name": "containerInsights", "value": "enabled"}],
                "tags": create_tags(config.environment, self.cluster_name, Project=config.name),
            },
        )

    def get_outputs(self) -> EcsClusterOutputs:
        return EcsClusterOutputs(
            cluster_name=self.cluster_name,
            cluster_arn=self.cluster.ref("arn"),
            log_group_name=self.log_group_name,
            log_group_ref=self.log_group.ref("name"),
        )
