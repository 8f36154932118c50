"""Provider implementations."""

from infra.providers.pulumi_provider import PulumiProvider

__all__ = ["PulumiProvider"]
