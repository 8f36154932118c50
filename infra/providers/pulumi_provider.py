"""
Pulumi/AWS realisation of the provider capability.

Each ResourceNode kind maps to one pulumi_aws resource. Rendered attributes
arrive with refs already replaced by pulumi Outputs, so they are passed
straight through as resource inputs; JSON documents (IAM policies, container
definitions, lifecycle rules) go through pulumi.Output.json_dumps so nested
Outputs are serialised once they resolve.

Explicit node dependencies become ResourceOptions.depends_on. Dependencies
implied by refs are already tracked by Pulumi through the Outputs.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

import pulumi
import pulumi_aws as aws

from infra.core.graph import ResourceKind, ResourceNode
from infra.core.provider import CallerIdentity
from infra.utils.logger import get_logger

logger = get_logger(__name__)


class PulumiProvider:
    """Declares stack nodes as pulumi_aws resources."""

    def __init__(self, aws_provider: aws.Provider | None = None) -> None:
        self.aws_provider = aws_provider
        self._resources: dict[str, pulumi.Resource] = {}
        self._builders: dict[ResourceKind, Callable[..., tuple[pulumi.Resource, Mapping[str, Any]]]] = {
            ResourceKind.NETWORK: self._network,
            ResourceKind.INTERNET_GATEWAY: self._internet_gateway,
            ResourceKind.SUBNET: self._subnet,
            ResourceKind.ROUTE_TABLE: self._route_table,
            ResourceKind.ROUTE: self._route,
            ResourceKind.ROUTE_TABLE_ASSOCIATION: self._route_table_association,
            ResourceKind.SECURITY_GROUP: self._security_group,
            ResourceKind.SECURITY_GROUP_RULE: self._security_group_rule,
            ResourceKind.ROLE: self._role,
            ResourceKind.POLICY: self._policy,
            ResourceKind.REGISTRY: self._registry,
            ResourceKind.LIFECYCLE_POLICY: self._lifecycle_policy,
            ResourceKind.LOG_GROUP: self._log_group,
            ResourceKind.CLUSTER: self._cluster,
            ResourceKind.WORKLOAD: self._task_definition,
            ResourceKind.SERVICE: self._service,
            ResourceKind.LOAD_BALANCER: self._load_balancer,
            ResourceKind.TARGET_GROUP: self._target_group,
            ResourceKind.LISTENER: self._listener,
            ResourceKind.LISTENER_RULE: self._listener_rule,
        }

    # --- Lookups ---

    def lookup_caller_identity(self) -> CallerIdentity:
        identity = aws.get_caller_identity(opts=self._invoke_opts())
        return CallerIdentity(account_id=identity.account_id)

    def list_available_zones(self, region: str) -> Sequence[str]:
        zones = aws.get_availability_zones(state="available", opts=self._invoke_opts())
        logger.info("Region %s has %d available zones", region, len(zones.names))
        return list(zones.names)

    def interpolate(self, template: str, values: Mapping[str, Any]) -> pulumi.Output[str]:
        return pulumi.Output.format(template, **values)

    # --- Declaration ---

    def declare(self, node: ResourceNode, attributes: Mapping[str, Any]) -> Mapping[str, Any]:
        """
        Create the pulumi_aws resource for node.

        Args:
            node: Node being declared
            attributes: Rendered attributes (Outputs in place of refs)

        Returns:
            Exported attributes as pulumi Outputs
        """
        opts = pulumi.ResourceOptions(
            provider=self.aws_provider,
            depends_on=[self._resources[name] for name in sorted(node.depends_on)],
        )
        builder = self._builders[node.kind]
        resource, exported = builder(node.logical_name, attributes, opts)
        self._resources[node.logical_name] = resource
        return exported

    def _invoke_opts(self) -> pulumi.InvokeOptions:
        return pulumi.InvokeOptions(provider=self.aws_provider)

    # --- Networking ---

    def _network(self, name, attrs, opts):
        vpc = aws.ec2.Vpc(
            name,
            cidr_block=attrs["cidr_block"],
            enable_dns_hostnames=attrs["enable_dns_hostnames"],
            enable_dns_support=attrs["enable_dns_support"],
            tags=attrs["tags"],
            opts=opts,
        )
        return vpc, {"id": vpc.id, "arn": vpc.arn, "cidr_block": vpc.cidr_block}

    def _internet_gateway(self, name, attrs, opts):
        igw = aws.ec2.InternetGateway(name, vpc_id=attrs["vpc_id"], tags=attrs["tags"], opts=opts)
        return igw, {"id": igw.id, "arn": igw.arn}

    def _subnet(self, name, attrs, opts):
        subnet = aws.ec2.Subnet(
            name,
            vpc_id=attrs["vpc_id"],
            cidr_block=attrs["cidr_block"],
            availability_zone=attrs["availability_zone"],
            map_public_ip_on_launch=attrs["map_public_ip_on_launch"],
            tags=attrs["tags"],
            opts=opts,
        )
        return subnet, {
            "id": subnet.id,
            "arn": subnet.arn,
            "cidr_block": subnet.cidr_block,
            "availability_zone": subnet.availability_zone,
        }

    def _route_table(self, name, attrs, opts):
        table = aws.ec2.RouteTable(name, vpc_id=attrs["vpc_id"], tags=attrs["tags"], opts=opts)
        return table, {"id": table.id, "arn": table.arn}

    def _route(self, name, attrs, opts):
        route = aws.ec2.Route(
            name,
            route_table_id=attrs["route_table_id"],
            destination_cidr_block=attrs["destination_cidr_block"],
            gateway_id=attrs["gateway_id"],
            opts=opts,
        )
        return route, {"id": route.id}

    def _route_table_association(self, name, attrs, opts):
        association = aws.ec2.RouteTableAssociation(
            name,
            subnet_id=attrs["subnet_id"],
            route_table_id=attrs["route_table_id"],
            opts=opts,
        )
        return association, {"id": association.id}

    def _security_group(self, name, attrs, opts):
        group = aws.ec2.SecurityGroup(
            name,
            name=attrs["name"],
            description=attrs["description"],
            vpc_id=attrs["vpc_id"],
            tags=attrs["tags"],
            opts=opts,
        )
        return group, {"id": group.id, "arn": group.arn, "name": group.name}

    def _security_group_rule(self, name, attrs, opts):
        rule = dict(attrs["rule"])
        direction = rule.pop("direction")
        rule_cls = (
            aws.vpc.SecurityGroupIngressRule if direction == "ingress"
            else aws.vpc.SecurityGroupEgressRule
        )
        resource = rule_cls(name, security_group_id=attrs["security_group_id"], **rule, opts=opts)
        return resource, {"id": resource.id, "arn": resource.arn}

    # --- IAM ---

    def _role(self, name, attrs, opts):
        role = aws.iam.Role(
            name,
            name=attrs["name"],
            assume_role_policy=pulumi.Output.json_dumps(attrs["assume_role_policy"]),
            tags=attrs["tags"],
            opts=opts,
        )
        return role, {"id": role.id, "arn": role.arn, "name": role.name}

    def _policy(self, name, attrs, opts):
        policy = aws.iam.RolePolicy(
            name,
            name=attrs["name"],
            role=attrs["role"],
            policy=pulumi.Output.json_dumps(attrs["policy"]),
            opts=opts,
        )
        return policy, {"id": policy.id, "name": policy.name}

    # --- Registry ---

    def _registry(self, name, attrs, opts):
        repository = aws.ecr.Repository(
            name,
            name=attrs["name"],
            image_tag_mutability=attrs["image_tag_mutability"],
            image_scanning_configuration=aws.ecr.RepositoryImageScanningConfigurationArgs(
                scan_on_push=attrs["scan_on_push"],
            ),
            encryption_configurations=[
                aws.ecr.RepositoryEncryptionConfigurationArgs(
                    encryption_type=attrs["encryption_type"],
                ),
            ],
            force_delete=attrs["force_delete"],
            tags=attrs["tags"],
            opts=opts,
        )
        return repository, {
            "id": repository.id,
            "arn": repository.arn,
            "name": repository.name,
            "repository_url": repository.repository_url,
            "registry_id": repository.registry_id,
        }

    def _lifecycle_policy(self, name, attrs, opts):
        policy = aws.ecr.LifecyclePolicy(
            name,
            repository=attrs["repository"],
            policy=pulumi.Output.json_dumps(attrs["policy"]),
            opts=opts,
        )
        return policy, {"id": policy.id}

    # --- Compute ---

    def _log_group(self, name, attrs, opts):
        log_group = aws.cloudwatch.LogGroup(
            name,
            name=attrs["name"],
            retention_in_days=attrs["retention_in_days"],
            tags=attrs["tags"],
            opts=opts,
        )
        return log_group, {"id": log_group.id, "arn": log_group.arn, "name": log_group.name}

    def _cluster(self, name, attrs, opts):
        cluster = aws.ecs.Cluster(
            name,
            name=attrs["name"],
            settings=[aws.ecs.ClusterSettingArgs(**setting) for setting in attrs["settings"]],
            tags=attrs["tags"],
            opts=opts,
        )
        return cluster, {"id": cluster.id, "arn": cluster.arn, "name": cluster.name}

    def _task_definition(self, name, attrs, opts):
        task = aws.ecs.TaskDefinition(
            name,
            family=attrs["family"],
            cpu=attrs["cpu"],
            memory=attrs["memory"],
            network_mode=attrs["network_mode"],
            requires_compatibilities=attrs["requires_compatibilities"],
            execution_role_arn=attrs["execution_role_arn"],
            task_role_arn=attrs["task_role_arn"],
            container_definitions=pulumi.Output.json_dumps(attrs["container_definitions"]),
            tags=attrs["tags"],
            opts=opts,
        )
        return task, {"id": task.id, "arn": task.arn, "family": task.family, "revision": task.revision}

    def _service(self, name, attrs, opts):
        network = attrs["network_configuration"]
        service = aws.ecs.Service(
            name,
            name=attrs["name"],
            cluster=attrs["cluster"],
            task_definition=attrs["task_definition"],
            desired_count=attrs["desired_count"],
            launch_type=attrs["launch_type"],
            network_configuration=aws.ecs.ServiceNetworkConfigurationArgs(
                subnets=network["subnets"],
                security_groups=network["security_groups"],
                assign_public_ip=network["assign_public_ip"],
            ),
            load_balancers=[
                aws.ecs.ServiceLoadBalancerArgs(**balancer) for balancer in attrs["load_balancers"]
            ],
            tags=attrs["tags"],
            opts=opts,
        )
        # The provider-assigned id of an ECS service is its ARN
        return service, {"id": service.id, "name": service.name}

    # --- Load balancing ---

    def _load_balancer(self, name, attrs, opts):
        alb = aws.lb.LoadBalancer(
            name,
            name=attrs["name"],
            internal=attrs["internal"],
            load_balancer_type=attrs["load_balancer_type"],
            security_groups=attrs["security_groups"],
            subnets=attrs["subnets"],
            enable_deletion_protection=attrs["enable_deletion_protection"],
            tags=attrs["tags"],
            opts=opts,
        )
        return alb, {"id": alb.id, "arn": alb.arn, "dns_name": alb.dns_name, "zone_id": alb.zone_id}

    def _target_group(self, name, attrs, opts):
        target_group = aws.lb.TargetGroup(
            name,
            name=attrs["name"],
            port=attrs["port"],
            protocol=attrs["protocol"],
            vpc_id=attrs["vpc_id"],
            target_type=attrs["target_type"],
            health_check=aws.lb.TargetGroupHealthCheckArgs(**attrs["health_check"]),
            tags=attrs["tags"],
            opts=opts,
        )
        return target_group, {"id": target_group.id, "arn": target_group.arn, "name": target_group.name}

    def _listener(self, name, attrs, opts):
        listener = aws.lb.Listener(
            name,
            load_balancer_arn=attrs["load_balancer_arn"],
            port=attrs["port"],
            protocol=attrs["protocol"],
            default_actions=[aws.lb.ListenerDefaultActionArgs(**action) for action in attrs["default_actions"]],
            tags=attrs["tags"],
            opts=opts,
        )
        return listener, {"id": listener.id, "arn": listener.arn}

    def _listener_rule(self, name, attrs, opts):
        actions = [
            aws.lb.ListenerRuleActionArgs(
                type=action["type"],
                fixed_response=aws.lb.ListenerRuleActionFixedResponseArgs(**action["fixed_response"]),
            )
            for action in attrs["actions"]
        ]
        conditions = [
            aws.lb.ListenerRuleConditionArgs(
                path_pattern=aws.lb.ListenerRuleConditionPathPatternArgs(**condition["path_pattern"]),
            )
            for condition in attrs["conditions"]
        ]
        rule = aws.lb.ListenerRule(
            name,
            listener_arn=attrs["listener_arn"],
            priority=attrs["priority"],
            actions=actions,
            conditions=conditions,
            tags=attrs["tags"],
            opts=opts,
        )
        return rule, {"id": rule.id, "arn": rule.arn}
