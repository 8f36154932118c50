"""
Networking components.

Components:
- VpcComponent: VPC, internet gateway, public subnets, route table
- SecurityGroupsComponent: ALB and workload security groups with rules
"""

from infra.components.networking.vpc import VpcComponent, VpcOutputs
from infra.components.networking.security_groups import SecurityGroupsComponent, SecurityGroupOutputs

__all__ = [
    "VpcComponent",
    "VpcOutputs",
    "SecurityGroupsComponent",
    "SecurityGroupOutputs",
]
