"""
Tests for the Pulumi provider, run against Pulumi's mock runtime.

Validates:
1. Identity and zone lookups go through the AWS invokes
2. Nodes become pulumi_aws resources exporting their attributes
3. The full acme stack applies and exports every output
"""

import pulumi
import pytest

from infra.configs.base import StackConfig, TopologyMode
from infra.core.graph import ResourceKind, StackGraph
from infra.providers.pulumi_provider import PulumiProvider
from infra.stack import apply_stack, synthesize

ACCOUNT_ID = "123456789012"


class InfraMocks(pulumi.runtime.Mocks):
    """Mock AWS: echo inputs back with ARNs and the computed attributes we read."""

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        state = {**args.inputs, "arn": f"arn:aws:mock:us-east-1:{ACCOUNT_ID}:{args.name}"}
        if args.typ == "aws:ecr/repository:Repository":
            state["repositoryUrl"] = f"{ACCOUNT_ID}.dkr.ecr.us-east-1.amazonaws.com/{args.inputs['name']}"
            state["registryId"] = ACCOUNT_ID
        elif args.typ == "aws:lb/loadBalancer:LoadBalancer":
            state["dnsName"] = f"{args.inputs['name']}-1234567890.us-east-1.elb.amazonaws.com"
            state["zoneId"] = "Z35SXDOTRQ7X7K"
        elif args.typ == "aws:ecs/taskDefinition:TaskDefinition":
            state["revision"] = 1
        return [f"{args.name}-id", state]

    def call(self, args: pulumi.runtime.MockCallArgs):
        if args.token == "aws:index/getCallerIdentity:getCallerIdentity":
            return {
                "accountId": ACCOUNT_ID,
                "arn": f"arn:aws:iam::{ACCOUNT_ID}:user/ci",
                "userId": "AIDAEXAMPLE",
                "id": ACCOUNT_ID,
            }
        if args.token == "aws:index/getAvailabilityZones:getAvailabilityZones":
            return {
                "id": "us-east-1",
                "names": ["us-east-1a", "us-east-1b", "us-east-1c"],
                "zoneIds": ["use1-az1", "use1-az2", "use1-az4"],
            }
        return {}


pulumi.runtime.set_mocks(InfraMocks(), preview=False)


class TestLookups:
    """Tests for provider lookups."""

    def test_caller_identity(self):
        """The account id comes from sts:GetCallerIdentity."""
        identity = PulumiProvider().lookup_caller_identity()

        assert identity.account_id == ACCOUNT_ID

    def test_available_zones_in_order(self):
        """Zones are returned in provider order."""
        assert list(PulumiProvider().list_available_zones("us-east-1")) == [
            "us-east-1a",
            "us-east-1b",
            "us-east-1c",
        ]


@pulumi.runtime.test
def test_registry_node_declared():
    """A Registry node becomes an ECR repository exporting its URL."""
    graph = StackGraph("acme")
    node = graph.add(ResourceKind.REGISTRY, "acme-ecr-repository")
    provider = PulumiProvider()

    result = provider.declare(node, {
        "name": "acme",
        "image_tag_mutability": "MUTABLE",
        "scan_on_push": False,
        "encryption_type": "AES256",
        "force_delete": True,
        "tags": {"Name": "acme"},
    })

    def check(args):
        url, name = args
        assert url == f"{ACCOUNT_ID}.dkr.ecr.us-east-1.amazonaws.com/acme"
        assert name == "acme"

    return pulumi.Output.all(result["repository_url"], result["name"]).apply(check)


@pulumi.runtime.test
def test_interpolate_waits_for_outputs():
    """Templates render once their Output values resolve."""
    rendered = PulumiProvider().interpolate(
        "http://{dns_name}{path}",
        {"dns_name": pulumi.Output.from_input("acme.elb.amazonaws.com"), "path": "/health"},
    )

    def check(value):
        assert value == "http://acme.elb.amazonaws.com/health"

    return rendered.apply(check)


@pulumi.runtime.test
def test_full_stack_applies():
    """The load-balanced acme stack applies and exports its outputs."""
    config = StackConfig(name="acme", region="us-east-1", container_port=3000)
    provider = PulumiProvider()
    stack = synthesize(config, provider)

    outputs = apply_stack(stack, provider)

    def check(args):
        repository_name, application_url, login = args
        assert repository_name == "acme"
        assert application_url == "http://acme-alb-1234567890.us-east-1.elb.amazonaws.com"
        assert login.endswith(f"{ACCOUNT_ID}.dkr.ecr.us-east-1.amazonaws.com/acme")

    return pulumi.Output.all(
        outputs["ecr-repository-name"],
        outputs["application-url"],
        outputs["docker-login-command"],
    ).apply(check)


@pytest.mark.parametrize("topology", [TopologyMode.REGISTRY, TopologyMode.COMPUTE])
def test_smaller_topologies_synthesize(topology):
    """Registry and compute stacks synthesize against the Pulumi provider's lookups."""
    config = StackConfig(name="acme", region="us-east-1", topology=topology)

    stack = synthesize(config, PulumiProvider())

    assert stack.identity.account_id == ACCOUNT_ID
    assert bool(stack.availability_zones) == config.includes_compute
