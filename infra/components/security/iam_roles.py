"""
IAM roles component for the registry and the ECS workload.

Creates:
- Access role (ECS task role): pull image layers from this stack's repository
- Execution role (ECS task execution role): ECR auth token, write to this
  stack's log group
- Deployment role (CI/CD): push images, roll the service, pass the two
  workload roles to ECS, manage the log group

Each role gets exactly the actions its purpose needs, and the deployment
role only gains ECS/IAM/Logs permissions when the compute tier exists.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from infra.components.storage.ecr_repository import EcrRepositoryOutputs
from infra.configs.base import StackConfig
from infra.configs.constants import ECS_TASKS_PRINCIPAL
from infra.core.graph import Ref, ResourceKind, StackGraph
from infra.core.policies import (
    PolicyDocument,
    PolicyStatement,
    account_trust_policy,
    build_arn,
    service_trust_policy,
)
from infra.core.provider import CallerIdentity
from infra.utils.logger import get_logger
from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags

if TYPE_CHECKING:
    from infra.components.compute.ecs_cluster import EcsClusterOutputs

logger = get_logger(__name__)

ECR_PULL_ACTIONS = (
    "ecr:BatchCheckLayerAvailability",
    "ecr:GetDownloadUrlForLayer",
    "ecr:BatchGetImage",
)

ECR_PUSH_ACTIONS = (
    "ecr:PutImage",
    "ecr:InitiateLayerUpload",
    "ecr:UploadLayerPart",
    "ecr:CompleteLayerUpload",
    "ecr:DescribeImages",
    "ecr:DescribeRepositories",
    "ecr:ListImages",
)


@dataclass
class IamRoleOutputs:
    """Output values from IAM roles component."""
    access_role_arn: Ref
    access_role_name: Ref
    deployment_role_arn: Ref
    deployment_role_name: Ref
    execution_role_arn: Ref | None
    execution_role_name: Ref | None


class IamRolesComponent:
    """
    IAM roles for the workload and its deployment pipeline.

    Follows least-privilege principle with specific resource permissions.
    """

    def __init__(
        self,
        graph: StackGraph,
        namer: ResourceNamer,
        config: StackConfig,
        identity: CallerIdentity,
        registry: EcrRepositoryOutputs,
        cluster: "EcsClusterOutputs | None" = None,
    ) -> None:
        self.graph = graph
        self.namer = namer
        self.config = config
        self.account_id = identity.account_id
        region = config.region

        # Workload roles are assumed by ECS tasks from this account and region
        task_trust = service_trust_policy(ECS_TASKS_PRINCIPAL, "ecs", self.account_id, region)

        # Access role: runtime identity of the task, pull-only on this repository
        self.access_role = self._create_role("ecr-role", task_trust)
        self._attach_policy(self.access_role, "ecr-policy", PolicyDocument(statements=(
            PolicyStatement(
                sid="PullStackImages",
                actions=ECR_PULL_ACTIONS,
                resources=(registry.repository_arn,),
            ),
        )))

        # Execution role: only with the compute tier
        self.execution_role = None
        if cluster is not None:
            self.execution_role = self._create_role("execution-role", task_trust)
            self._attach_policy(self.execution_role, "execution-policy", PolicyDocument(statements=(
                # GetAuthorizationToken has no resource-level permissions
                PolicyStatement(
                    sid="RegistryAuthorization",
                    actions=("ecr:GetAuthorizationToken",),
                    resources=("*",),
                ),
                PolicyStatement(
                    sid="WriteWorkloadLogs",
                    actions=("logs:CreateLogStream", "logs:PutLogEvents"),
                    resources=(self._log_group_arn(cluster.log_group_name, streams=True),),
                ),
            )))

        # Deployment role: assumed by the account's own principals (CI/CD)
        self.deployment_role = self._create_role(
            "deployment-role", account_trust_policy(self.account_id, region)
        )
        self._attach_policy(
            self.deployment_role,
            "deployment-policy",
            PolicyDocument(statements=self._deployment_statements(registry, cluster)),
        )

        logger.info(
            "IAM roles: %s",
            ", ".join(
                role.logical_name
                for role in (self.access_role, self.execution_role, self.deployment_role)
                if role is not None
            ),
        )

    def _create_role(self, resource: str, trust: PolicyDocument):
        role_name = self.namer.name(resource)
        return self.graph.add(
            ResourceKind.ROLE,
            role_name,
            {
                "name": role_name,
                "assume_role_policy": trust,
                "tags": create_tags(self.config.environment, role_name, Project=self.config.name),
            },
        )

    def _attach_policy(self, role, resource: str, document: PolicyDocument):
        policy_name = self.namer.name(resource)
        return self.graph.add(
            ResourceKind.POLICY,
            policy_name,
            {
                "name": policy_name,
                "role": role.ref("id"),
                "policy": document,
            },
        )

    def _log_group_arn(self, log_group_name: str, streams: bool = False) -> str:
        suffix = ":*" if streams else ""
        return build_arn(
            "logs", f"log-group:{log_group_name}{suffix}", self.config.region, self.account_id
        )

    def _ecs_arn(self, resource: str) -> str:
        return build_arn("ecs", resource, self.config.region, self.account_id)

    def _deployment_statements(
        self,
        registry: EcrRepositoryOutputs,
        cluster: "EcsClusterOutputs | None",
    ) -> tuple[PolicyStatement, ...]:
        """Deployment permissions, widened per included tier."""
        statements = [
            PolicyStatement(
                sid="RegistryAuthorization",
                actions=("ecr:GetAuthorizationToken",),
                resources=("*",),
            ),
            PolicyStatement(
                sid="PushPullStackImages",
                actions=ECR_PULL_ACTIONS + ECR_PUSH_ACTIONS,
                resources=(registry.repository_arn,),
            ),
        ]
        if cluster is None:
            return tuple(statements)

        family = self.namer.name("task")
        statements.extend([
            # Task definition APIs have no resource-level permissions
            PolicyStatement(
                sid="ManageTaskDefinitions",
                actions=(
                    "ecs:RegisterTaskDefinition",
                    "ecs:DeregisterTaskDefinition",
                    "ecs:DescribeTaskDefinition",
                    "ecs:ListTaskDefinitions",
                ),
                resources=("*",),
            ),
            PolicyStatement(
                sid="ManageClusterServices",
                actions=(
                    "ecs:DescribeClusters",
                    "ecs:ListServices",
                    "ecs:DescribeServices",
                    "ecs:UpdateService",
                    "ecs:ListTasks",
                    "ecs:DescribeTasks",
                    "ecs:RunTask",
                    "ecs:StopTask",
                ),
                resources=(
                    cluster.cluster_arn,
                    self._ecs_arn(f"service/{cluster.cluster_name}/*"),
                    self._ecs_arn(f"task/{cluster.cluster_name}/*"),
                    self._ecs_arn(f"task-definition/{family}:*"),
                ),
            ),
            PolicyStatement(
                sid="PassWorkloadRoles",
                actions=("iam:PassRole",),
                resources=(self.access_role.ref("arn"), self.execution_role.ref("arn")),
                conditions={"StringEquals": {"iam:PassedToService": ECS_TASKS_PRINCIPAL}},
            ),
            PolicyStatement(
                sid="ManageWorkloadLogs",
                actions=(
                    "logs:CreateLogGroup",
                    "logs:DescribeLogGroups",
                    "logs:DescribeLogStreams",
                    "logs:GetLogEvents",
                    "logs:PutRetentionPolicy",
                ),
                resources=(
                    self._log_group_arn(cluster.log_group_name),
                    self._log_group_arn(cluster.log_group_name, streams=True),
                ),
            ),
        ])
        return tuple(statements)

    def get_outputs(self) -> IamRoleOutputs:
        """Get IAM role output values."""
        return IamRoleOutputs(
            access_role_arn=self.access_role.ref("arn"),
            access_role_name=self.access_role.ref("name"),
            deployment_role_arn=self.deployment_role.ref("arn"),
            deployment_role_name=self.deployment_role.ref("name"),
            execution_role_arn=self.execution_role.ref("arn") if self.execution_role is not None else None,
            execution_role_name=self.execution_role.ref("name") if self.execution_role is not None else None,
        )
