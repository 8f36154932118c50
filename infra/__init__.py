"""
Pulumi infrastructure-as-code for a containerised web workload on AWS.

This package assembles, per configured topology:
- ECR repository with scan/lifecycle settings and least-privilege IAM roles
- VPC with two public subnets, ECS Fargate cluster, task definition and service
- Internet-facing Application Load Balancer with an edge health rule

Synthesis builds a provider-agnostic resource graph (infra.core); the
Pulumi provider (infra.providers) turns it into pulumi_aws resources.
"""
