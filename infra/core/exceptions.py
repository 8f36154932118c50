"""
Exception hierarchy for stack synthesis.

Every failure is raised during synthesis and aborts the pass; there is no
partial graph. Each exception carries a details dict naming the offending
configuration key or resource reference.

Dependencies: None (pure domain layer)
System role: Centralized error taxonomy for the stack assembler
"""

from typing import Any, Sequence


class StackSynthesisError(Exception):
    """Base exception for all stack synthesis errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class MissingRequiredConfig(StackSynthesisError):
    """Raised when a mandatory configuration key is absent or blank."""

    def __init__(self, keys: Sequence[str], details: dict[str, Any] | None = None) -> None:
        """
        Initialize missing configuration error.

        Args:
            keys: Names of the missing keys, in check order
            details: Additional context
        """
        self.keys = tuple(keys)
        self.key = self.keys[0] if self.keys else ""
        details = details or {}
        details["keys"] = list(self.keys)
        super().__init__(
            f"Required configuration not set: {', '.join(self.keys)}",
            details,
        )


class InvalidConfig(StackSynthesisError):
    """Raised when a configuration value cannot be coerced or is out of range."""

    def __init__(
        self,
        key: str,
        value: Any,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize invalid configuration error.

        Args:
            key: Configuration key holding the bad value
            value: The offending raw value
            reason: Why the value was rejected
            details: Additional context
        """
        self.key = key
        self.value = value
        details = details or {}
        details.update({"key": key, "value": value})
        super().__init__(f"Invalid value for '{key}': {reason}", details)


class InsufficientAvailabilityZones(StackSynthesisError):
    """Raised when the region exposes fewer zones than the topology needs."""

    def __init__(
        self,
        region: str,
        zones: Sequence[str],
        required: int,
    ) -> None:
        self.region = region
        self.zones = tuple(zones)
        self.required = required
        super().__init__(
            f"Region {region} has {len(self.zones)} available zone(s), {required} required",
            {"region": region, "zones": list(self.zones), "required": required},
        )


class InvalidReference(StackSynthesisError):
    """Raised when a cross-resource reference cannot be resolved."""

    def __init__(self, reference: str, reason: str) -> None:
        """
        Initialize invalid reference error.

        Args:
            reference: The reference that failed (logical name, attribute or ARN part)
            reason: Why it could not be resolved
        """
        self.reference = reference
        super().__init__(
            f"Cannot resolve reference '{reference}': {reason}",
            {"reference": reference},
        )


class DuplicateResource(StackSynthesisError):
    """Raised when two nodes are declared with the same logical name."""

    def __init__(self, logical_name: str) -> None:
        self.logical_name = logical_name
        super().__init__(
            f"Resource already declared: {logical_name}",
            {"logical_name": logical_name},
        )


class MissingOutput(StackSynthesisError):
    """Raised when a required stack output was never produced."""

    def __init__(self, keys: Sequence[str]) -> None:
        self.keys = tuple(keys)
        super().__init__(
            f"Stack outputs missing: {', '.join(self.keys)}",
            {"keys": list(self.keys)},
        )


class DuplicateOutput(StackSynthesisError):
    """Raised when an output key is registered twice in one synthesis."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Output already registered: {key}", {"key": key})
