"""Pytest fixtures for infrastructure tests."""

import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest

PROJECT_ROOT = Path(__file__).parent.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from infra.configs.base import StackConfig, TopologyMode  # noqa: E402
from infra.core.graph import EXPORTED_ATTRIBUTES, ResourceNode  # noqa: E402
from infra.core.provider import CallerIdentity  # noqa: E402

ACCOUNT_ID = "123456789012"
REGION = "us-east-1"


class FakeProvider:
    """
    In-memory provider capability.

    Returns deterministic values for every exported attribute and records
    the order in which nodes were declared.
    """

    def __init__(
        self,
        account_id: str = ACCOUNT_ID,
        zones: Sequence[str] = ("us-east-1a", "us-east-1b", "us-east-1c"),
        region: str = REGION,
    ) -> None:
        self.account_id = account_id
        self.zones = list(zones)
        self.region = region
        self.declared: list[str] = []
        self.attributes: dict[str, Mapping[str, Any]] = {}
        self.zone_lookups = 0

    def lookup_caller_identity(self) -> CallerIdentity:
        return CallerIdentity(account_id=self.account_id)

    def list_available_zones(self, region: str) -> Sequence[str]:
        self.zone_lookups += 1
        return list(self.zones)

    def interpolate(self, template: str, values: Mapping[str, Any]) -> str:
        return template.format(**values)

    def declare(self, node: ResourceNode, attributes: Mapping[str, Any]) -> Mapping[str, Any]:
        self.declared.append(node.logical_name)
        self.attributes[node.logical_name] = attributes
        name = attributes.get("name", node.logical_name)
        values = {
            "id": f"{node.logical_name}-id",
            "arn": f"arn:aws:fake:{self.region}:{self.account_id}:{node.logical_name}",
            "name": name,
            "cidr_block": attributes.get("cidr_block"),
            "availability_zone": attributes.get("availability_zone"),
            "repository_url": f"{self.account_id}.dkr.ecr.{self.region}.amazonaws.com/{name}",
            "registry_id": self.account_id,
            "family": attributes.get("family"),
            "revision": 1,
            "dns_name": f"{name}-1234567890.{self.region}.elb.amazonaws.com",
            "zone_id": "Z35SXDOTRQ7X7K",
        }
        return {key: values[key] for key in EXPORTED_ATTRIBUTES[node.kind]}


@pytest.fixture
def fake_provider():
    """Provider with three zones in us-east-1."""
    return FakeProvider()


@pytest.fixture
def provider_factory():
    """Build a FakeProvider with custom zones or account."""
    return FakeProvider


@pytest.fixture
def acme_config():
    """Load-balanced stack named acme on port 3000."""
    return StackConfig(name="acme", region=REGION, container_port=3000)


@pytest.fixture
def registry_config():
    """Registry-only stack."""
    return StackConfig(name="acme", region=REGION, topology=TopologyMode.REGISTRY)


@pytest.fixture
def compute_config():
    """Registry and compute, no load balancer."""
    return StackConfig(name="acme", region=REGION, topology=TopologyMode.COMPUTE)


@pytest.fixture
def raw_source():
    """Minimal valid raw configuration."""
    return {
        "access_key_id": "AKIAEXAMPLE",
        "secret_access_key": "secret",
        "region": REGION,
    }


@pytest.fixture
def infra_project_root():
    """Return the infra package directory."""
    return PROJECT_ROOT / "infra"


@pytest.fixture
def python_files_in_infra(infra_project_root):
    """Return all Python files in the infra package."""
    return [f for f in infra_project_root.rglob("*.py") if "__pycache__" not in str(f)]
