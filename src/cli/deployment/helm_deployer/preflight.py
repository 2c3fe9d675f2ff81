"""Pre-install environment checks.

Verifies, before anything is changed:
- The kubectl and helm binaries are on PATH
- AWS credentials resolve to an identity
- A Kubernetes context is active

All checks run; problems are reported together.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from src.infra.aws import AwsServiceError, caller_identity
from src.infra.constants import DEFAULT_CONSTANTS, DeploymentConstants
from src.infra.k8s import KubernetesControllerSync

from ..shell_commands import CommandRunner
from .errors import DeploymentError


class PreflightSeverity(Enum):
    """Severity levels for preflight issues."""

    WARNING = "warning"  # Can proceed
    ERROR = "error"  # Install cannot work


@dataclass
class PreflightIssue:
    """A single failed preflight check."""

    severity: PreflightSeverity
    title: str
    recovery_hint: str


@dataclass
class PreflightResult:
    """Result of preflight checks."""

    issues: list[PreflightIssue] = field(default_factory=list)
    aws_identity: str = ""
    kube_context: str = ""

    @property
    def has_errors(self) -> bool:
        return any(i.severity == PreflightSeverity.ERROR for i in self.issues)

    @property
    def is_clean(self) -> bool:
        return len(self.issues) == 0

    def raise_for_errors(self) -> None:
        """Raise a DeploymentError listing every error-level issue."""
        errors = [i for i in self.issues if i.severity == PreflightSeverity.ERROR]
        if errors:
            raise DeploymentError(
                f"{len(errors)} preflight check(s) failed",
                "\n".join(f"{i.title} ({i.recovery_hint})" for i in errors),
            )


class PreflightChecker:
    """Runs environment checks ahead of an install."""

    def __init__(
        self,
        controller: KubernetesControllerSync,
        session: Any,
        *,
        binary_available: Callable[[str], bool] = CommandRunner.is_available,
        constants: DeploymentConstants = DEFAULT_CONSTANTS,
    ) -> None:
        """Initialize the checker.

        Args:
            controller: Kubernetes controller
            session: boto3 session whose credentials will be used
            binary_available: Predicate telling whether an executable exists
            constants: Deployment constants
        """
        self._controller = controller
        self._session = session
        self._binary_available = binary_available
        self._constants = constants

    def check(self) -> PreflightResult:
        result = PreflightResult()
        self._check_binaries(result)
        self._check_aws_identity(result)
        self._check_kube_context(result)
        logger.debug("Preflight finished with {} issue(s)", len(result.issues))
        return result

    def _check_binaries(self, result: PreflightResult) -> None:
        for binary in self._constants.REQUIRED_BINARIES:
            if not self._binary_available(binary):
                result.issues.append(
                    PreflightIssue(
                        severity=PreflightSeverity.ERROR,
                        title=f"{binary} not found on PATH",
                        recovery_hint=f"install {binary} and make sure it is on PATH",
                    )
                )

    def _check_aws_identity(self, result: PreflightResult) -> None:
        try:
            identity = caller_identity(self._session)
        except AwsServiceError as e:
            result.issues.append(
                PreflightIssue(
                    severity=PreflightSeverity.ERROR,
                    title=f"AWS credentials not usable: {e}",
                    recovery_hint="run 'aws configure' or set AWS_PROFILE",
                )
            )
            return
        result.aws_identity = identity["arn"]

    def _check_kube_context(self, result: PreflightResult) -> None:
        context = self._controller.get_current_context()
        if not context or context == "unknown":
            result.issues.append(
                PreflightIssue(
                    severity=PreflightSeverity.ERROR,
                    title="No active Kubernetes context",
                    recovery_hint="run 'aws eks update-kubeconfig --name <cluster>'",
                )
            )
            return
        result.kube_context = context
