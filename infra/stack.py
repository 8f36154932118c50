"""
Stack synthesis pipeline.

Builds the whole resource graph for one StackConfig in dependency order:
1. Provider lookups (caller identity, availability zones) - no nodes yet
2. VPC -> Security Groups                      (compute tiers)
3. ECR Repository
4. Log Group + ECS Cluster                     (compute tiers)
5. IAM Roles
6. ALB                                         (load-balanced tier)
7. Task Definition + Service                   (compute tiers)
8. Outputs

Synthesis either returns a complete graph or raises; nothing is declared
against the provider until apply_stack() is called.
"""

from dataclasses import dataclass
from typing import Any

from infra.components.compute.alb import AlbComponent
from infra.components.compute.ecs_cluster import EcsClusterComponent
from infra.components.compute.ecs_service import EcsServiceComponent
from infra.components.networking.security_groups import SecurityGroupsComponent
from infra.components.networking.vpc import VpcComponent, select_availability_zones
from infra.components.security.iam_roles import IamRolesComponent
from infra.components.stack_outputs import StackOutputsComponent
from infra.components.storage.ecr_repository import EcrRepositoryComponent
from infra.configs.base import StackConfig
from infra.core.apply import StackApplier
from infra.core.exceptions import InvalidReference
from infra.core.graph import StackGraph
from infra.core.outputs import OutputTable
from infra.core.provider import CallerIdentity, ProviderCapability
from infra.utils.logger import get_logger
from infra.utils.naming import ResourceNamer

logger = get_logger(__name__)


@dataclass
class SynthesizedStack:
    """Result of one synthesis pass."""
    config: StackConfig
    identity: CallerIdentity
    availability_zones: tuple[str, ...]
    graph: StackGraph
    outputs: OutputTable


def synthesize(config: StackConfig, provider: ProviderCapability) -> SynthesizedStack:
    """
    Build the resource graph and output table for config.

    Args:
        config: Resolved stack configuration
        provider: Source of caller identity and availability zones

    Returns:
        SynthesizedStack: graph plus outputs, nothing declared yet

    Raises:
        InvalidReference: caller identity has no account id
        InsufficientAvailabilityZones: region has fewer than two zones
    """
    logger.info("Synthesizing stack %s (topology=%s)", config.name, config.topology.value)

    # --- Lookups: consumed once, treated as facts for the rest of the pass ---
    identity = provider.lookup_caller_identity()
    if not identity.account_id:
        raise InvalidReference("caller_identity.account_id", "provider returned no account id")

    zones: tuple[str, ...] = ()
    if config.includes_compute:
        zones = select_availability_zones(provider.list_available_zones(config.region), config.region)

    graph = StackGraph(config.name)
    namer = ResourceNamer(prefix=config.name)

    # --- Layer 1: Networking Foundation ---
    network = security_groups = None
    if config.includes_compute:
        network = VpcComponent(graph, namer, config, zones).get_outputs()
        security_groups = SecurityGroupsComponent(graph, namer, config, network.vpc_id).get_outputs()

    # --- Layer 2: Registry ---
    registry = EcrRepositoryComponent(graph, namer, config).get_outputs()

    # --- Layer 3: Cluster and log group ---
    cluster = None
    if config.includes_compute:
        cluster = EcsClusterComponent(graph, namer, config).get_outputs()

    # --- Layer 4: IAM Roles ---
    roles = IamRolesComponent(graph, namer, config, identity, registry, cluster).get_outputs()

    # --- Layer 5: Load balancing ---
    load_balancer = None
    if config.includes_load_balancer:
        load_balancer = AlbComponent(
            graph,
            namer,
            config,
            vpc_id=network.vpc_id,
            subnet_ids=network.subnet_ids,
            security_group_id=security_groups.alb_sg_id,
        ).get_outputs()

    # --- Layer 6: Workload ---
    service = None
    if config.includes_compute:
        service = EcsServiceComponent(
            graph,
            namer,
            config,
            registry=registry,
            cluster=cluster,
            roles=roles,
            subnet_ids=network.subnet_ids,
            security_group_id=security_groups.workload_sg_id,
            load_balancer=load_balancer,
        ).get_outputs()

    # --- Outputs ---
    outputs = StackOutputsComponent(
        config,
        registry=registry,
        roles=roles,
        network=network,
        security_groups=security_groups,
        cluster=cluster,
        service=service,
        load_balancer=load_balancer,
    ).get_outputs()

    logger.info(
        "Synthesized stack %s: %d resources, %d edges, %d outputs",
        config.name,
        len(graph),
        len(graph.edges()),
        len(outputs),
    )
    return SynthesizedStack(
        config=config,
        identity=identity,
        availability_zones=zones,
        graph=graph,
        outputs=outputs,
    )


def apply_stack(stack: SynthesizedStack, provider: ProviderCapability) -> dict[str, Any]:
    """
    Declare every node through provider and resolve the outputs.

    Returns:
        Output key -> provider value
    """
    applier = StackApplier(provider)
    applier.apply(stack.graph)
    return applier.resolve_outputs(stack.outputs)
