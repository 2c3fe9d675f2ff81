"""Rich rendering of snapshots, step results and teardown reports."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel
from rich.table import Table

from src.infra.constants import DEFAULT_CONSTANTS, DeploymentConstants

from .helm_deployer.steps import StepResult, StepStatus

if TYPE_CHECKING:
    from rich.console import Console

    from .helm_deployer.orchestrator import InstallOutcome
    from .helm_deployer.preflight import PreflightResult
    from .helm_deployer.status_reporter import StatusSnapshot
    from .helm_deployer.teardown import TeardownReport

_STATUS_STYLE = {
    StepStatus.APPLIED: "[green]applied[/green]",
    StepStatus.SKIPPED: "[dim]skipped[/dim]",
    StepStatus.WARNING: "[yellow]warning[/yellow]",
    StepStatus.FAILED: "[red]failed[/red]",
}


class StatusDisplay:
    """Renders deployer output tables."""

    def __init__(
        self,
        console: Console,
        constants: DeploymentConstants = DEFAULT_CONSTANTS,
    ) -> None:
        self.console = console
        self.constants = constants

    def show_results(self, results: list[StepResult], title: str) -> None:
        table = Table(title=title)
        table.add_column("Step", style="cyan")
        table.add_column("System")
        table.add_column("Result")
        table.add_column("Detail", overflow="fold")
        for r in results:
            table.add_row(r.step, r.system, _STATUS_STYLE[r.status], r.detail)
        self.console.print(table)

    def show_install_outcome(self, outcome: InstallOutcome) -> None:
        if outcome.results:
            self.show_results(outcome.results, "Install steps")

        if outcome.succeeded:
            self.console.print("\n[bold green]🎉 Flyte install complete[/bold green]")
            for w in outcome.warnings:
                self.console.print(f"[yellow]⚠️  {w.step}: {w.detail}[/yellow]")
        else:
            completed = ", ".join(outcome.completed_steps) or "none"
            self.console.print(
                Panel(
                    f"{outcome.abort_reason}\n\nCompleted steps: {completed}",
                    title="Install aborted",
                    border_style="red",
                )
            )

        if outcome.snapshot is not None:
            self.show_snapshot(outcome.snapshot)

    def show_teardown_report(self, report: TeardownReport) -> None:
        self.show_results(report.results, "Teardown steps")
        if report.succeeded:
            self.console.print("[green]✅ Teardown finished[/green]")
        else:
            self.console.print(
                f"[red]❌ {len(report.failed)} teardown step(s) failed[/red]"
            )

    def show_preflight(self, result: PreflightResult) -> None:
        if result.aws_identity:
            self.console.print(f"[dim]AWS identity: {result.aws_identity}[/dim]")
        if result.kube_context:
            self.console.print(f"[dim]Kube context: {result.kube_context}[/dim]")
        for issue in result.issues:
            self.console.print(
                f"[red]✗[/red] {issue.title}\n  [dim]{issue.recovery_hint}[/dim]"
            )

    def show_snapshot(self, snapshot: StatusSnapshot) -> None:
        ns = snapshot.namespace
        if not snapshot.namespace_exists:
            self.console.print(f"[yellow]Namespace '{ns}' does not exist[/yellow]")
            return

        pods = Table(title=f"Pods in {ns}")
        pods.add_column("Name", style="cyan")
        pods.add_column("Status")
        pods.add_column("Ready")
        pods.add_column("Restarts", justify="right")
        for pod in snapshot.workloads:
            ready = "[green]yes[/green]" if pod.ready else "[red]no[/red]"
            pods.add_row(pod.name, pod.status, ready, str(pod.restarts))
        self.console.print(pods)

        services = Table(title="Services")
        services.add_column("Name", style="cyan")
        services.add_column("Type")
        services.add_column("Cluster IP")
        services.add_column("Ports")
        for svc in snapshot.services:
            services.add_row(svc.name, svc.type, svc.cluster_ip, svc.ports)
        self.console.print(services)

        if snapshot.recent_events:
            events = Table(title="Recent events")
            events.add_column("Type")
            events.add_column("Reason")
            events.add_column("Object")
            events.add_column("Message", overflow="fold")
            for ev in snapshot.recent_events:
                style = "yellow" if ev.type == "Warning" else "dim"
                events.add_row(
                    f"[{style}]{ev.type}[/{style}]", ev.reason, ev.object, ev.message
                )
            self.console.print(events)

        self._show_summary(snapshot)

    def _show_summary(self, snapshot: StatusSnapshot) -> None:
        c = self.constants
        lines = [f"Pods ready: {snapshot.ready_count}/{snapshot.total_count}"]
        if snapshot.release_installed is not None:
            lines.append(
                f"Helm release {c.HELM_RELEASE_NAME}: "
                + ("installed" if snapshot.release_installed else "not installed")
            )
        lines.append(
            f"Service {c.HTTP_SERVICE_NAME}: "
            + ("endpoints ready" if snapshot.endpoints_ready else "no ready endpoints")
        )
        if snapshot.ingress is None:
            lines.append("Ingress: none")
        elif snapshot.console_host:
            lines.append(f"Console: http://{snapshot.console_host}{c.CONSOLE_PATH}")
        else:
            lines.append("Ingress: no load balancer hostname yet")

        if snapshot.healthy:
            style, title = "green", "Healthy"
        else:
            style, title = "yellow", "Not healthy"
            lines.append("")
            lines.append(f"[dim]kubectl describe pods -n {snapshot.namespace}[/dim]")
            lines.append(
                f"[dim]kubectl logs -n {snapshot.namespace} -l {c.READINESS_LABEL}[/dim]"
            )

        self.console.print(Panel("\n".join(lines), title=title, border_style=style))
