"""Main CLI application module.

This module provides the main entry point for the Flyte deployer CLI.

Commands:
- install: Install or upgrade Flyte on EKS
- status: Show the Flyte namespace health
- teardown: Remove Flyte and its AWS resources
- ui: Port-forward the Flyte console
- secrets: Database password management
"""

from typing import Annotated

import typer

from .commands import install, secrets_app, status, teardown, ui
from .shared.console import configure_logging

# Create the main CLI application
app = typer.Typer(
    help="🚁 Flyte on EKS - install, inspect and tear down a Flyte stack",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def _root(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logs on stderr"),
    ] = False,
) -> None:
    configure_logging(verbose)


# Register lifecycle commands
app.command("install")(install)
app.command("status")(status)
app.command("teardown")(teardown)
app.command("ui")(ui)

# Register utility command groups
app.add_typer(secrets_app, name="secrets")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
