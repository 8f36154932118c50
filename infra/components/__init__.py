"""
Stack components for the container deployment.

Each submodule adds one group of nodes to a StackGraph:
- networking: VPC, public subnets, security groups
- storage: ECR repository and lifecycle policy
- security: IAM roles and inline policies
- compute: ECS cluster, workload service, application load balancer
- stack_outputs: exported identifiers and convenience commands
"""
