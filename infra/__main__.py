"""
Pulumi program entry point for the container deployment stack.

Order of operations:
1. Configuration (environment/.env, overridden by Pulumi stack config)
2. Explicit AWS provider from the resolved credentials and region
3. Synthesis: identity/zone lookups, then the resource graph
   VPC -> Security Groups -> ECR -> Cluster -> IAM Roles -> ALB -> Service
4. Apply: every node declared as a pulumi_aws resource
5. Exports
"""

import pulumi
import pulumi_aws as aws

from infra.configs.environment import load_source, resolve_config, resolve_credentials
from infra.providers.pulumi_provider import PulumiProvider
from infra.stack import apply_stack, synthesize
from infra.utils.logger import configure_logging


def main() -> None:
    """Deploy the container stack."""
    configure_logging()

    # Load configuration
    source = load_source(pulumi.Config())
    config = resolve_config(source)
    credentials = resolve_credentials(source)

    aws_provider = aws.Provider(
        "aws",
        region=config.region,
        access_key=credentials.access_key_id,
        secret_key=pulumi.Output.secret(credentials.secret_access_key),
        token=pulumi.Output.secret(credentials.session_token) if credentials.session_token else None,
    )
    provider = PulumiProvider(aws_provider)

    stack = synthesize(config, provider)
    outputs = apply_stack(stack, provider)

    # Export to Pulumi stack
    for key, value in outputs.items():
        pulumi.export(key, value)

    pulumi.log.info(
        f"✓ {config.topology.value} deployment of {config.name}: {len(stack.graph)} resources"
    )


# Execute
main()
