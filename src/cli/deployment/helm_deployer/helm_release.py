"""Helm release management.

This module handles chart repository setup, release install/upgrade and
uninstall for the flyte-binary chart.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

import yaml  # type: ignore[import-untyped]
from loguru import logger

from src.infra.constants import DeploymentConstants

from .errors import ReleaseManagerError

if TYPE_CHECKING:
    from ..shell_commands import ShellCommands


class UninstallOutcome(Enum):
    UNINSTALLED = "uninstalled"
    NOT_FOUND = "not_found"


class ReleaseManager(Protocol):
    """Release operations the orchestrator and teardown coordinator rely on."""

    def ensure_repository(self) -> None: ...

    def install_or_upgrade(
        self, name: str, namespace: str, version: str, values: dict[str, Any]
    ) -> str: ...

    def uninstall(self, name: str, namespace: str) -> UninstallOutcome: ...

    def release_exists(self, name: str, namespace: str) -> bool: ...


class HelmReleaseManager:
    """Manages the Flyte Helm release via the helm CLI.

    Handles:
    - Chart repository registration and index refresh
    - Release deployment via upgrade --install, values streamed on stdin
    - Release removal
    - Release presence checks for status reporting
    """

    def __init__(
        self,
        commands: ShellCommands,
        constants: DeploymentConstants | None = None,
    ) -> None:
        """Initialize the Helm release manager.

        Args:
            commands: Shell command executor
            constants: Optional deployment constants
        """
        self.commands = commands
        self.constants = constants or DeploymentConstants()

    def ensure_repository(self) -> None:
        """Register the chart repository and refresh its index.

        Raises:
            ReleaseManagerError: If either helm command fails
        """
        repo = self.constants.HELM_REPO_NAME
        result = self.commands.helm.repo_add(repo, self.constants.HELM_REPO_URL)
        if not result.success:
            raise ReleaseManagerError(
                f"helm repo add {repo} failed", result.stderr.strip() or None
            )
        result = self.commands.helm.repo_update(repo)
        if not result.success:
            raise ReleaseManagerError(
                f"helm repo update {repo} failed", result.stderr.strip() or None
            )
        logger.debug("Helm repository {} is up to date", repo)

    def install_or_upgrade(
        self,
        name: str,
        namespace: str,
        version: str,
        values: dict[str, Any],
    ) -> str:
        """Install the release or upgrade it in place.

        Returns:
            Short description of what helm did

        Raises:
            ReleaseManagerError: If helm exits non-zero
        """
        logger.info(
            "Applying release {} ({} {}) in {}",
            name,
            self.constants.HELM_CHART,
            version,
            namespace,
        )
        result = self.commands.helm.upgrade_install(
            name,
            self.constants.HELM_CHART,
            namespace,
            version=version,
            values_yaml=yaml.safe_dump(values, sort_keys=False),
            timeout=self.constants.HELM_TIMEOUT,
        )
        if not result.success:
            raise ReleaseManagerError(
                f"helm upgrade --install {name} failed",
                result.stderr.strip() or result.stdout.strip() or None,
            )
        return f"{self.constants.HELM_CHART} {version} applied"

    def uninstall(self, name: str, namespace: str) -> UninstallOutcome:
        """Uninstall the release.

        Raises:
            ReleaseManagerError: On any failure other than a missing release
        """
        result = self.commands.helm.uninstall(name, namespace)
        if result.success:
            return UninstallOutcome.UNINSTALLED
        if "not found" in result.stderr.lower():
            return UninstallOutcome.NOT_FOUND
        raise ReleaseManagerError(
            f"helm uninstall {name} failed", result.stderr.strip() or None
        )

    def release_exists(self, name: str, namespace: str) -> bool:
        """Check whether the release is installed in the namespace.

        Raises:
            ReleaseManagerError: If helm could not list releases
        """
        releases = self.commands.helm.list_releases(namespace)
        if releases is None:
            raise ReleaseManagerError(f"helm list -n {namespace} failed")
        return any(r.name == name for r in releases)
