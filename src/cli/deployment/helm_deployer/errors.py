"""Exception hierarchy for provisioning and teardown.

Every error carries a short ``message`` and optional multi-line ``details``
so the CLI can render it in a panel without further formatting.
"""

from __future__ import annotations

from enum import Enum


class DeploymentError(Exception):
    """Raised when a deployment operation fails."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ConfigError(DeploymentError):
    """The merged configuration is incomplete or invalid.

    Attributes:
        missing: Environment variable names of required fields with no value
        invalid: Human-readable descriptions of values that failed validation
    """

    def __init__(self, missing: list[str], invalid: list[str] | None = None):
        self.missing = list(missing)
        self.invalid = list(invalid or [])
        lines = [f"missing: {name}" for name in self.missing]
        lines += [f"invalid: {problem}" for problem in self.invalid]
        count = len(lines)
        super().__init__(
            f"Configuration has {count} problem{'s' if count != 1 else ''}",
            "\n".join(lines),
        )


class BrokerErrorKind(Enum):
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


class BrokerError(DeploymentError):
    """The database credential could not be resolved."""

    def __init__(self, kind: BrokerErrorKind, secret_name: str, cause: str = ""):
        self.kind = kind
        self.secret_name = secret_name
        if kind is BrokerErrorKind.NOT_FOUND:
            message = f"Secret '{secret_name}' not found or empty in the secret store"
        else:
            message = f"Secret store unavailable while reading '{secret_name}'"
        super().__init__(message, cause or None)


class ControlPlaneError(DeploymentError):
    """A Kubernetes API operation failed."""


class ReleaseManagerError(DeploymentError):
    """A Helm operation failed."""


class ReadinessTimeout(DeploymentError):
    """Workloads did not report Ready within the allotted time."""
