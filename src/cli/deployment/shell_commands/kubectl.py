"""Kubectl command abstractions.

Only the operations kr8s cannot cover cleanly live here. Port forwarding
is a long-running, interactive process, so it goes through the kubectl
binary and streams its output.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class KubectlCommands:
    """Kubectl-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize kubectl commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    def port_forward(
        self,
        namespace: str,
        service: str,
        local_port: int,
        remote_port: int,
        *,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Forward a local port to a Service until interrupted.

        Args:
            namespace: Kubernetes namespace
            service: Service name (without the "svc/" prefix)
            local_port: Port to bind locally
            remote_port: Service port to forward to
            on_output: Optional callback for each line kubectl prints

        Returns:
            CommandResult once kubectl exits
        """
        cmd = [
            "kubectl",
            "port-forward",
            "-n",
            namespace,
            f"svc/{service}",
            f"{local_port}:{remote_port}",
        ]
        return self._runner.run_streaming(cmd, on_output=on_output)
