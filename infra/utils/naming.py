"""
Resource naming conventions for consistent AWS resource names.

Follows pattern: {prefix}-{resource}, where prefix is the stack name.
"""

import hashlib
from dataclasses import dataclass


@dataclass(frozen=True)
class ResourceNamer:
    """
    Generates consistent resource names for AWS resources.

    Attributes:
        prefix: Stack name, namespaces every derived name
    """
    prefix: str

    def name(self, resource: str, max_length: int | None = None) -> str:
        """
        Generate a resource name.

        Args:
            resource: Resource identifier (e.g., 'vpc', 'workload-sg')
            max_length: Provider limit; longer names are cut and suffixed
                with a stable hash so they stay unique and deterministic

        Returns:
            Formatted resource name
        """
        full = f"{self.prefix}-{resource}" if resource else self.prefix
        if max_length is None or len(full) <= max_length:
            return full
        digest = hashlib.sha1(full.encode("utf-8")).hexdigest()[:6]
        return f"{full[:max_length - 7].rstrip('-')}-{digest}"

    def log_group_name(self) -> str:
        """
        Generate the CloudWatch log group path for the workload.

        Returns:
            Log group name, e.g. /ecs/<prefix>
        """
        return f"/ecs/{self.prefix}"
