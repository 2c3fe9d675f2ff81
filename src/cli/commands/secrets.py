"""Secrets Manager helpers for the Flyte database password."""

from typing import Annotated

import typer

from src.cli.context import get_cli_context
from src.cli.shared.console import with_error_handling

from .stack import ConfigFileOption, EnvFileOption, load_config

secrets_app = typer.Typer(
    name="secrets",
    help="Manage the Flyte database password in AWS Secrets Manager.",
    no_args_is_help=True,
)

SecretNameOption = Annotated[
    str | None,
    typer.Option(
        "--name",
        help="Secret name (default: DB_PASSWORD_SECRET or flyte-db-password)",
    ),
]


@secrets_app.command("create-db-password")
@with_error_handling
def create_db_password(
    ctx: typer.Context,
    env_file: EnvFileOption = None,
    config_file: ConfigFileOption = None,
    name: SecretNameOption = None,
) -> None:
    """Generate a random database password and store it.

    Creates the secret if missing, otherwise stores a new version. The
    password is never printed.

    Examples:
        flyte-deploy secrets create-db-password
        flyte-deploy secrets create-db-password --name my-flyte-db
    """
    cli = get_cli_context(ctx)
    config = load_config(
        cli,
        ("region",),
        env_file=env_file,
        config_file=config_file,
        overrides={"db_password_secret": name},
    )
    secret_name = config.db_password_secret or cli.constants.DEFAULT_STORE_SECRET_NAME

    created = cli.deployer().create_db_password(
        config.region or "", secret_name, profile=config.aws_profile
    )
    verb = "Created" if created else "Updated"
    cli.console.ok(f"{verb} secret '{secret_name}' in {config.region}")
    cli.console.info(f"Set DB_PASSWORD_SECRET={secret_name} before running install")


@secrets_app.command("check")
@with_error_handling
def check(
    ctx: typer.Context,
    env_file: EnvFileOption = None,
    config_file: ConfigFileOption = None,
    name: SecretNameOption = None,
) -> None:
    """Confirm the database password secret exists, without showing it.

    Examples:
        flyte-deploy secrets check
    """
    cli = get_cli_context(ctx)
    config = load_config(
        cli,
        ("region",),
        env_file=env_file,
        config_file=config_file,
        overrides={"db_password_secret": name},
    )
    secret_name = config.db_password_secret or cli.constants.DEFAULT_STORE_SECRET_NAME

    if cli.deployer().check_secret(
        config.region or "", secret_name, profile=config.aws_profile
    ):
        cli.console.ok(f"Secret '{secret_name}' exists")
        return

    cli.console.error(f"Secret '{secret_name}' not found or empty")
    cli.console.info("Create it with: flyte-deploy secrets create-db-password")
    raise typer.Exit(1)
