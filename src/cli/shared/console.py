"""Shared utilities for CLI commands.

This module provides common utilities used across all command modules,
including console output, confirmation dialogs, logging setup and error
handling.
"""

import sys
from collections.abc import Callable

import typer
from loguru import logger
from rich.console import Console, ConsoleRenderable
from rich.panel import Panel


class CLIConsole:
    """Rich console wrapper for consistent CLI output."""

    def __init__(self) -> None:
        """Initialize the CLI console."""
        self.console = Console()

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        self.console.print(msg)

    def info(self, msg: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan]  {msg}")

    def ok(self, msg: str) -> None:
        self.console.print(f"[green]✅[/green] {msg}")

    def error(self, msg: str) -> None:
        self.console.print(f"[red]❌[/red] {msg}")

    def warn(self, msg: str) -> None:
        self.console.print(f"[yellow]⚠️[/yellow]  {msg}")

    def confirm_action(
        self,
        action: str,
        details: str | None = None,
        extra_warning: str | None = None,
        force: bool = False,
        prompt: str = "Are you sure you want to proceed?",
        expected: tuple[str, ...] = ("y", "yes"),
    ) -> bool:
        """Prompt user to confirm a potentially destructive action.

        Args:
            action: Description of the action (e.g., "Delete namespace flyte")
            details: Additional details about what will be affected
            extra_warning: Extra warning message (e.g., for data loss)
            force: If True, skip the confirmation prompt
            prompt: Question shown under the panel
            expected: Answers (lowercased) that count as confirmation

        Returns:
            True if the user confirmed, False otherwise
        """
        if force:
            return True

        # Build warning message
        warning_lines = [f"[bold red]⚠️  {action}[/bold red]"]

        if details:
            warning_lines.append(f"\n{details}")

        if extra_warning:
            warning_lines.append(f"\n[yellow]{extra_warning}[/yellow]")

        self.console.print(
            Panel(
                "\n".join(warning_lines),
                title="Confirmation Required",
                border_style="red",
            )
        )

        try:
            response = self.console.input(f"\n[bold]{prompt}[/bold] ")
            return response.strip().lower() in expected
        except (KeyboardInterrupt, EOFError):
            self.console.print("\n[dim]Cancelled.[/dim]")
            return False

    def confirm_step(self, step: str, message: str, permanent: bool) -> bool:
        """Confirmation callback for teardown steps.

        Permanent steps require typing PERMANENT rather than y/yes.
        """
        if permanent:
            return self.confirm_action(
                message,
                details=f"Step: {step}",
                extra_warning="This action is PERMANENT and cannot be undone.",
                prompt="Type PERMANENT to confirm:",
                expected=("permanent",),
            )
        return self.confirm_action(
            message,
            details=f"Step: {step}",
            prompt="Are you sure you want to proceed? \\[y/N]:",
        )

    def handle_error(
        self, message: str, details: str | None = None, exit_code: int = 1
    ) -> None:
        """Handle an error by printing a message and exiting.

        Args:
            message: Error message to display
            details: Optional additional details
            exit_code: Exit code to use
        """
        self.error(f"\n[bold red]{message}[/bold red]\n")
        if details:
            self.console.print(Panel(details, title="Details", border_style="red"))
        raise typer.Exit(exit_code)

    def print_header(self, title: str, style: str = "blue") -> None:
        """Print a styled header panel.

        Args:
            title: Header title text
            style: Border style color
        """
        self.console.print(
            Panel.fit(
                f"[bold {style}]{title}[/bold {style}]",
                border_style=style,
            )
        )


def configure_logging(verbose: bool = False) -> None:
    """Route loguru output to stderr at DEBUG (verbose) or WARNING level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Decorator to wrap command functions with standard error handling.

    Catches common exceptions and formats them consistently.

    Args:
        func: The command function to wrap

    Returns:
        Wrapped function with error handling
    """
    from functools import wraps

    from src.cli.deployment.helm_deployer.errors import DeploymentError
    from src.infra.aws import AwsServiceError
    from src.infra.k8s.errors import KubernetesApiError

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except DeploymentError as e:
            console.handle_error(e.message, e.details)
        except AwsServiceError as e:
            console.handle_error("AWS request failed", str(e))
        except KubernetesApiError as e:
            console.handle_error("Kubernetes request failed", str(e))
        except KeyboardInterrupt:
            console.print("\n[dim]Operation cancelled by user.[/dim]")
            raise typer.Exit(130) from None

    return wrapper


# Shared console instance for consistent output
console = CLIConsole()
