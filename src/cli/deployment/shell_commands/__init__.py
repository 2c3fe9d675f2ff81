"""Shell command abstractions for Helm and kubectl operations.

This package wraps the external binaries the deployer drives:

- helm: chart repositories and release management
- kubectl: port forwarding to the Flyte console

Kubernetes API calls do not go through here; they use the kr8s-backed
controller in src.infra.k8s.

Usage:
    from src.cli.deployment.shell_commands import ShellCommands

    commands = ShellCommands(project_root=Path("."))
    commands.helm.repo_add("flyteorg", "https://flyteorg.github.io/flyte")
"""

from pathlib import Path

from .helm import HelmCommands
from .kubectl import KubectlCommands
from .runner import CommandRunner
from .types import CommandResult, HelmRelease


class ShellCommands:
    """Unified interface for all shell command operations.

    Attributes:
        helm: Helm-related commands
        kubectl: kubectl commands

    Example:
        >>> commands = ShellCommands(Path("."))
        >>> commands.helm.upgrade_install("flyte-binary", "flyteorg/flyte-binary", "flyte")
    """

    def __init__(self, project_root: Path) -> None:
        """Initialize the shell commands executor.

        Args:
            project_root: Path to the project root directory.
                         Commands will be executed from this directory by default.
        """
        self._project_root = Path(project_root)
        self._runner = CommandRunner(self._project_root)

        self.helm = HelmCommands(self._runner)
        self.kubectl = KubectlCommands(self._runner)

    @property
    def project_root(self) -> Path:
        """Get the project root path."""
        return self._project_root

    @property
    def runner(self) -> CommandRunner:
        """Get the underlying command runner."""
        return self._runner


__all__ = [
    "ShellCommands",
    "CommandResult",
    "HelmRelease",
    # Specialized command classes for direct usage
    "HelmCommands",
    "KubectlCommands",
    "CommandRunner",
]
