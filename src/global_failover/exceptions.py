"""
Exception classes for the global failover topology.

All exceptions inherit from TopologyError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class TopologyError(Exception):
    """Base exception for all topology errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(TopologyError):
    """Raised when a required input is missing or invalid (region, hosted zone, domain)."""

    pass


class ProvisioningError(TopologyError):
    """Raised by the provisioning collaborator when an entity cannot be applied or removed."""

    pass


class ReferenceResolutionError(ProvisioningError, ConfigurationError):
    """
    Raised when a secondary region's table reference does not match an existing table.

    Surfaced by the provisioning collaborator, but caused by configuration:
    the referenced name differs from the one MAIN created.
    """

    pass


class HealthCheckActivationError(TopologyError):
    """Raised when provisioned health checks are not confirmed enabled."""

    pass
