"""Flyte stack commands: install, status, teardown and console access.

Every command resolves its configuration from config/environment.env, an
optional YAML file, the environment and CLI flags, in that precedence order.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Annotated, Any

import typer

from src.cli.context import CLIContext, get_cli_context
from src.cli.deployment.helm_deployer import (
    INSTALL_REQUIRED,
    STATUS_REQUIRED,
    TEARDOWN_REQUIRED,
    ConfigSources,
    DeploymentConfig,
    TeardownOptions,
    resolve,
)
from src.cli.shared.console import with_error_handling

EnvFileOption = Annotated[
    Path | None,
    typer.Option(
        "--env-file",
        "-e",
        help="dotenv file with deployment settings (default: config/environment.env)",
    ),
]
ConfigFileOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML file with a top-level 'config:' mapping",
    ),
]
NamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--namespace",
        "-n",
        help="Kubernetes namespace (default: flyte)",
    ),
]


def load_config(
    cli: CLIContext,
    required: Iterable[str],
    *,
    env_file: Path | None = None,
    config_file: Path | None = None,
    overrides: dict[str, Any] | None = None,
    require_secret: bool = False,
) -> DeploymentConfig:
    """Resolve a DeploymentConfig for one command.

    Raises:
        ConfigError: Listing every missing or invalid value
    """
    env_file = env_file or cli.paths.env_file
    if config_file is None and cli.paths.config_yaml.exists():
        config_file = cli.paths.config_yaml

    sources = ConfigSources.load(
        env_file=env_file,
        config_file=config_file,
        overrides=overrides,
    )
    return resolve(sources, required, require_secret=require_secret)


@with_error_handling
def install(
    ctx: typer.Context,
    env_file: EnvFileOption = None,
    config_file: ConfigFileOption = None,
    namespace: NamespaceOption = None,
    version: Annotated[
        str | None,
        typer.Option(
            "--version",
            help="flyte-binary chart version (default: v1.10.6)",
        ),
    ] = None,
    ready_timeout: Annotated[
        int | None,
        typer.Option(
            "--ready-timeout",
            help="Seconds to wait for Flyte pods to become ready",
        ),
    ] = None,
    skip_preflight: Annotated[
        bool,
        typer.Option(
            "--skip-preflight",
            help="Skip binary, AWS credential and kube context checks",
        ),
    ] = False,
) -> None:
    """Install or upgrade Flyte on the EKS cluster.

    This command:
    - Checks kubectl, helm, AWS credentials and the kube context
    - Resolves the database password (literal or Secrets Manager)
    - Ensures the namespace and the flyte-db-pass secret
    - Runs helm upgrade --install for flyteorg/flyte-binary
    - Waits for Flyte pods to become ready

    Examples:
        flyte-deploy install
        flyte-deploy install -n flyte-staging --version v1.10.6
        flyte-deploy install --env-file config/staging.env
    """
    cli = get_cli_context(ctx)
    cli.console.print_header("Installing Flyte")

    config = load_config(
        cli,
        INSTALL_REQUIRED,
        env_file=env_file,
        config_file=config_file,
        overrides={
            "namespace": namespace,
            "release_version": version,
            "readiness_timeout_seconds": ready_timeout,
        },
        require_secret=True,
    )

    outcome = cli.deployer().deploy(config, skip_preflight=skip_preflight)
    if not outcome.succeeded:
        raise typer.Exit(1)


@with_error_handling
def status(
    ctx: typer.Context,
    env_file: EnvFileOption = None,
    config_file: ConfigFileOption = None,
    namespace: NamespaceOption = None,
) -> None:
    """Show pods, services, ingress and recent events for Flyte.

    Examples:
        flyte-deploy status
        flyte-deploy status -n flyte-staging
    """
    cli = get_cli_context(ctx)
    cli.console.print_header("Flyte Status")

    config = load_config(
        cli,
        STATUS_REQUIRED,
        env_file=env_file,
        config_file=config_file,
        overrides={"namespace": namespace},
    )
    cli.deployer().show_status(namespace=config.namespace)


@with_error_handling
def teardown(
    ctx: typer.Context,
    env_file: EnvFileOption = None,
    config_file: ConfigFileOption = None,
    namespace: NamespaceOption = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Skip every confirmation, including permanent deletions",
        ),
    ] = False,
    confirm_once: Annotated[
        bool,
        typer.Option(
            "--confirm-once",
            help="Ask once up front instead of before every step",
        ),
    ] = False,
    keep_buckets: Annotated[
        bool,
        typer.Option(
            "--keep-buckets",
            help="Do not empty or delete the S3 buckets",
        ),
    ] = False,
    keep_roles: Annotated[
        bool,
        typer.Option(
            "--keep-roles",
            help="Do not delete the IAM roles",
        ),
    ] = False,
) -> None:
    """Remove Flyte and the AWS resources it used.

    Steps, each run even if an earlier one fails:
    - Uninstall the flyte-binary Helm release
    - Delete the namespace (does not wait for completion)
    - Permanently delete the Secrets Manager entry
    - Empty and delete the metadata and userdata buckets
    - Delete the backend and user IAM roles

    Examples:
        flyte-deploy teardown
        flyte-deploy teardown --confirm-once --keep-buckets
        flyte-deploy teardown --force
    """
    cli = get_cli_context(ctx)
    cli.console.print_header("Tearing down Flyte", style="red")

    config = load_config(
        cli,
        TEARDOWN_REQUIRED,
        env_file=env_file,
        config_file=config_file,
        overrides={"namespace": namespace},
    )
    options = TeardownOptions(
        confirm_each=not confirm_once,
        force=force,
        delete_buckets=not keep_buckets,
        delete_roles=not keep_roles,
    )
    if force:
        cli.console.warn("Skipping every confirmation, including permanent deletions")

    report = cli.deployer().teardown(config, options)
    if not report.succeeded:
        raise typer.Exit(1)


@with_error_handling
def ui(
    ctx: typer.Context,
    env_file: EnvFileOption = None,
    config_file: ConfigFileOption = None,
    namespace: NamespaceOption = None,
    port: Annotated[
        int | None,
        typer.Option(
            "--port",
            "-p",
            help="Local port to forward (default: 8080)",
        ),
    ] = None,
) -> None:
    """Port-forward the Flyte console to localhost.

    Examples:
        flyte-deploy ui
        flyte-deploy ui --port 9090
    """
    cli = get_cli_context(ctx)
    config = load_config(
        cli,
        STATUS_REQUIRED,
        env_file=env_file,
        config_file=config_file,
        overrides={"namespace": namespace},
    )
    cli.deployer().open_console(namespace=config.namespace, local_port=port)
