"""Storage components: container image registry."""

from infra.components.storage.ecr_repository import EcrRepositoryComponent, EcrRepositoryOutputs

__all__ = ["EcrRepositoryComponent", "EcrRepositoryOutputs"]
