"""Data types for shell command results.

This module contains the dataclasses shared across the shell command modules.

Note: CommandResult is re-exported from src.infra.k8s.controller so that the
kr8s-backed controller and the subprocess runner report results the same way.
"""

from __future__ import annotations

from dataclasses import dataclass

# Re-export Kubernetes types from canonical location
from src.infra.k8s.controller import CommandResult

__all__ = [
    "CommandResult",
    "HelmRelease",
]


@dataclass
class HelmRelease:
    """Information about a Helm release.

    Attributes:
        name: Release name
        namespace: Kubernetes namespace
        status: Release status (deployed, failed, pending, uninstalling)
        revision: Release revision number
        chart: Chart name and version (e.g. flyte-binary-v1.10.6)
        app_version: Application version reported by the chart
    """

    name: str
    namespace: str
    status: str
    revision: str
    chart: str = ""
    app_version: str = ""
