"""Helm command abstractions.

This module provides commands for Helm repository and release management,
including chart repository registration, upgrades, uninstallation, and
status queries.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from .types import CommandResult, HelmRelease

if TYPE_CHECKING:
    from .runner import CommandRunner


class HelmCommands:
    """Helm-related shell commands.

    Provides operations for:
    - Chart repositories (add, update)
    - Release management (install, upgrade, uninstall)
    - Status queries (list releases)
    """

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    # =========================================================================
    # Repositories
    # =========================================================================

    def repo_add(self, name: str, url: str) -> CommandResult:
        """Register a chart repository, updating it if already present.

        Args:
            name: Local repository alias (e.g., "flyteorg")
            url: Repository URL

        Returns:
            CommandResult with registration status
        """
        return self._runner.run(["helm", "repo", "add", name, url, "--force-update"])

    def repo_update(self, name: str | None = None) -> CommandResult:
        """Refresh chart indexes for one or all repositories."""
        cmd = ["helm", "repo", "update"]
        if name:
            cmd.append(name)
        return self._runner.run(cmd)

    # =========================================================================
    # Release Management
    # =========================================================================

    def upgrade_install(
        self,
        release_name: str,
        chart: str,
        namespace: str,
        *,
        version: str | None = None,
        values_yaml: str | None = None,
        timeout: str = "10m",
        wait: bool = False,
    ) -> CommandResult:
        """Deploy or upgrade a Helm release.

        Uses `helm upgrade --install` to idempotently deploy a chart.
        If the release doesn't exist, it will be installed. If it exists,
        it will be upgraded.

        Values are streamed to helm on stdin (`-f -`) so rendered values
        never land on disk.

        Args:
            release_name: Name for the Helm release (e.g., "flyte-binary")
            chart: Chart reference (e.g., "flyteorg/flyte-binary")
            namespace: Kubernetes namespace for deployment
            version: Chart version to pin
            values_yaml: Rendered values document
            timeout: Maximum time helm may spend on the operation
            wait: Whether helm itself should wait for resources to be ready

        Returns:
            CommandResult with deployment status

        Example:
            >>> helm.upgrade_install(
            ...     "flyte-binary",
            ...     "flyteorg/flyte-binary",
            ...     "flyte",
            ...     version="v1.10.6",
            ...     values_yaml="configuration: {}\n",
            ... )
        """
        cmd = [
            "helm",
            "upgrade",
            "--install",
            release_name,
            chart,
            "--namespace",
            namespace,
        ]

        if version:
            cmd.extend(["--version", version])
        if wait:
            cmd.append("--wait")
        cmd.extend(["--timeout", timeout])
        if values_yaml is not None:
            cmd.extend(["-f", "-"])

        return self._runner.run(cmd, capture_output=True, input_data=values_yaml)

    def uninstall(
        self,
        release_name: str,
        namespace: str,
        *,
        wait: bool = False,
    ) -> CommandResult:
        """Uninstall a Helm release.

        Args:
            release_name: Name of the release to uninstall
            namespace: Kubernetes namespace
            wait: Whether to wait for resources to be deleted

        Returns:
            CommandResult with uninstall status
        """
        cmd = ["helm", "uninstall", release_name, "-n", namespace]
        if wait:
            cmd.append("--wait")
        return self._runner.run(cmd)

    # =========================================================================
    # Status Queries
    # =========================================================================

    def list_releases(self, namespace: str) -> list[HelmRelease] | None:
        """List Helm releases in a namespace.

        Args:
            namespace: Kubernetes namespace to query

        Returns:
            List of HelmRelease objects, or None if helm could not list them
        """
        cmd = ["helm", "list", "-n", namespace, "-o", "json"]

        result = self._runner.run(cmd)
        if not result.success:
            return None
        if not result.stdout.strip():
            return []

        try:
            releases_data = json.loads(result.stdout)
            return [
                HelmRelease(
                    name=r.get("name", ""),
                    namespace=r.get("namespace", ""),
                    status=r.get("status", ""),
                    revision=str(r.get("revision", "")),
                    chart=r.get("chart", ""),
                    app_version=r.get("app_version", ""),
                )
                for r in releases_data
            ]
        except json.JSONDecodeError:
            return None
