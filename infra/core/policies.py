"""
IAM policy documents and ARN construction.

Policies are plain data: statements hold literal ARNs or Refs, and
to_dict() produces the IAM JSON shape with Refs left in place for the
provider to resolve.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping

from infra.core.exceptions import InvalidReference
from infra.core.graph import Ref

POLICY_VERSION = "2012-10-17"


class Effect(str, enum.Enum):
    ALLOW = "Allow"
    DENY = "Deny"


@dataclass(frozen=True)
class PolicyStatement:
    """
    One IAM statement.

    Attributes:
        sid: Statement id, unique within the document
        actions: Actions in declaration order, duplicates dropped
        resources: ARNs or refs to resource ARNs
        effect: Allow or Deny
        conditions: Optional IAM condition block
        principal: Set on trust policies only
    """
    sid: str
    actions: tuple[str, ...]
    resources: tuple[str | Ref, ...] = ()
    effect: Effect = Effect.ALLOW
    conditions: Mapping[str, Mapping[str, Any]] | None = None
    principal: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "actions", tuple(dict.fromkeys(self.actions)))
        object.__setattr__(self, "resources", tuple(dict.fromkeys(self.resources)))

    def to_dict(self) -> dict[str, Any]:
        statement: dict[str, Any] = {
            "Sid": self.sid,
            "Effect": self.effect.value,
        }
        if self.principal is not None:
            statement["Principal"] = dict(self.principal)
        statement["Action"] = list(self.actions) if len(self.actions) > 1 else self.actions[0]
        if self.resources:
            statement["Resource"] = (
                list(self.resources) if len(self.resources) > 1 else self.resources[0]
            )
        if self.conditions:
            statement["Condition"] = {key: dict(value) for key, value in self.conditions.items()}
        return statement


@dataclass(frozen=True)
class PolicyDocument:
    """Ordered IAM policy document."""
    statements: tuple[PolicyStatement, ...] = field(default_factory=tuple)
    version: str = POLICY_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "Version": self.version,
            "Statement": [statement.to_dict() for statement in self.statements],
        }

    def actions(self) -> set[str]:
        """Every action granted or denied by the document."""
        return {action for statement in self.statements for action in statement.actions}

    def statement(self, sid: str) -> PolicyStatement:
        for statement in self.statements:
            if statement.sid == sid:
                return statement
        raise KeyError(sid)


def build_arn(
    service: str,
    resource: str,
    region: str = "",
    account_id: str = "",
    partition: str = "aws",
    global_service: bool = False,
) -> str:
    """
    Build an ARN from its parts.

    Args:
        service: Service namespace (iam, logs, ecs, ...)
        resource: Resource part, e.g. 'role/name' or 'log-group:/ecs/x:*'
        region: Region, must be empty for global services
        account_id: Owning account
        partition: ARN partition
        global_service: Service has no region component (IAM)

    Returns:
        Formatted ARN

    Raises:
        InvalidReference: A required component is missing
    """
    if not account_id:
        raise InvalidReference(f"arn:{partition}:{service}:::{resource}", "account identity is missing")
    if not global_service and not region:
        raise InvalidReference(f"arn:{partition}:{service}::{account_id}:{resource}", "region is missing")
    return f"arn:{partition}:{service}:{'' if global_service else region}:{account_id}:{resource}"


def service_trust_policy(
    principal: str,
    source_service: str,
    account_id: str,
    region: str,
) -> PolicyDocument:
    """
    Trust policy for an AWS service principal.

    Assumption is limited to calls made on behalf of this account from
    resources of source_service in the configured region.

    Args:
        principal: Service principal, e.g. ecs-tasks.amazonaws.com
        source_service: ARN namespace of the calling resources, e.g. ecs
        account_id: Owning account
        region: Configured region
    """
    return PolicyDocument(statements=(
        PolicyStatement(
            sid="AllowServiceAssumeRole",
            actions=("sts:AssumeRole",),
            principal={"Service": principal},
            conditions={
                "StringEquals": {"aws:SourceAccount": account_id},
                "ArnLike": {"aws:SourceArn": build_arn(source_service, "*", region, account_id)},
            },
        ),
    ))


def account_trust_policy(account_id: str, region: str) -> PolicyDocument:
    """Trust policy for principals of this account, pinned to the configured region."""
    return PolicyDocument(statements=(
        PolicyStatement(
            sid="AllowAccountAssumeRole",
            actions=("sts:AssumeRole",),
            principal={"AWS": build_arn("iam", "root", account_id=account_id, global_service=True)},
            conditions={"StringEquals": {"aws:RequestedRegion": region}},
        ),
    ))
