"""Security components: IAM roles for the registry, workload and deployments."""

from infra.components.security.iam_roles import IamRolesComponent, IamRoleOutputs

__all__ = ["IamRolesComponent", "IamRoleOutputs"]
