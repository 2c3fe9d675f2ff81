"""Base deployer class with shared functionality."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from rich.console import Console


class BaseDeployer(ABC):
    """Abstract base class for all deployers."""

    def __init__(self, console: Console, project_root: Path):
        """Initialize the deployer.

        Args:
            console: Rich console for output
            project_root: Path to the project root directory
        """
        self.console = console
        self.project_root = project_root

    @abstractmethod
    def deploy(self, **kwargs: Any) -> Any:
        """Deploy the environment.

        Args:
            **kwargs: Environment-specific deployment options
        """
        pass

    @abstractmethod
    def teardown(self, **kwargs: Any) -> Any:
        """Tear down the environment.

        Args:
            **kwargs: Environment-specific teardown options
        """
        pass

    @abstractmethod
    def show_status(self, **kwargs: Any) -> Any:
        """Display the current status of the deployment."""
        pass

    def success(self, message: str) -> None:
        """Print a success message.

        Args:
            message: The message to print
        """
        self.console.print(f"[green]✅ {message}[/green]")

    def info(self, message: str) -> None:
        """Print an info message.

        Args:
            message: The message to print
        """
        self.console.print(f"[blue]ℹ {message}[/blue]")
