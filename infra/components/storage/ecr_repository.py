"""
ECR Repository Component for Workload Container Images.

Stores the Docker image the ECS service runs.

Integration Flow:
  1. CI builds the image: docker build -t <name>:<tag> .
  2. CI authenticates with ECR using the `docker-login-command` output
     (after assuming the deployment role).
  3. CI pushes: docker push <ECR_URL>:<tag>
  4. The task definition references <ECR_URL>:<image_tag>.
  5. ECS pulls the image when tasks start.

Key Features:
- Tag mutability and scan-on-push come from configuration.
- Encryption: images encrypted at rest (AES256).
- Lifecycle Policy: keep the newest images, expire the rest.
- force_delete: the repository can be destroyed with images in it.

Outputs:
  - repository_url: <ACCOUNT>.dkr.ecr.<REGION>.amazonaws.com/<REPO>
  - repository_arn: arn:aws:ecr:<REGION>:<ACCOUNT>:repository/<REPO>
  - repository_name: <REPO>
"""

from dataclasses import dataclass

from infra.configs.base import StackConfig
from infra.configs.constants import IMAGE_RETENTION_COUNT
from infra.core.graph import Ref, ResourceKind, StackGraph
from infra.utils.logger import get_logger
from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags

logger = get_logger(__name__)


@dataclass
class EcrRepositoryOutputs:
    """Output values from ECR repository component."""
    repository_url: Ref
    repository_arn: Ref
    repository_name: Ref


class EcrRepositoryComponent:
    """
    ECR repository for workload container images.
    """

    def __init__(
        self,
        graph: StackGraph,
        namer: ResourceNamer,
        config: StackConfig,
    ) -> None:
        # ECR Repository, named exactly after the stack
        self.repository = graph.add(
            ResourceKind.REGISTRY,
            namer.name("ecr-repository"),
            {
                "name": config.name,
                "image_tag_mutability": config.image_tag_mutability.value,
                "scan_on_push": config.scan_on_push,
                "encryption_type": "AES256",
                "force_delete": True,
                "tags": create_tags(config.environment, config.name, Project=config.name),
            },
        )

        # Lifecycle Policy: Keep the newest images, delete older ones
        graph.add(
            ResourceKind.LIFECYCLE_POLICY,
            namer.name("ecr-lifecycle"),
            {
                "repository": self.repository.ref("name"),
                "policy": {
                    "rules": [{
                        "rulePriority": 1,
                        "description": f"Keep last {IMAGE_RETENTION_COUNT} images",
                        "selection": {
                            "tagStatus": "any",
                            "countType": "imageCountMoreThan",
                            "countNumber": IMAGE_RETENTION_COUNT,
                        },
                        "action": {"type": "expire"},
                    }],
                },
            },
        )

        logger.info(
            "Registry %s (mutability=%s, scan_on_push=%s)",
            config.name,
            config.image_tag_mutability.value,
            config.scan_on_push,
        )

    def get_outputs(self) -> EcrRepositoryOutputs:
        """Get ECR repository output values."""
        return EcrRepositoryOutputs(
            repository_url=self.repository.ref("repository_url"),
            repository_arn=self.repository.ref("arn"),
            repository_name=self.repository.ref("name"),
        )
