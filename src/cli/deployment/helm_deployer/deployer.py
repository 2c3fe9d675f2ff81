"""Flyte deployer for EKS.

This module provides the FlyteDeployer class which wires the configuration,
the AWS adapters, the Kubernetes controller and Helm together for the CLI.
It coordinates specialized components for:
- Preflight checks
- Credential resolution
- The install state machine
- Status snapshots
- Teardown
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Callable
from pathlib import Path
from typing import Any

from loguru import logger
from rich.console import Console

from src.infra.aws import (
    IdentityAdmin,
    ObjectStorage,
    SecretsManagerStore,
    make_session,
)
from src.infra.constants import DeploymentConstants
from src.infra.k8s import KubernetesControllerSync, get_k8s_controller_sync

from ..base import BaseDeployer
from ..shell_commands import ShellCommands
from ..status_display import StatusDisplay
from .config_resolver import DeploymentConfig
from .credential_broker import CredentialBroker
from .errors import DeploymentError
from .helm_release import HelmReleaseManager
from .orchestrator import InstallOrchestrator, InstallOutcome
from .preflight import PreflightChecker
from .status_reporter import StatusReporter, StatusSnapshot
from .steps import ConfirmFn
from .teardown import TeardownCoordinator, TeardownOptions, TeardownReport

SessionFactory = Callable[[str | None, str | None], Any]


def _decline(step: str, message: str, permanent: bool) -> bool:
    return False


def generate_password(length: int) -> str:
    """Random alphanumeric password."""
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


class FlyteDeployer(BaseDeployer):
    """Deployer for Flyte on an existing EKS cluster.

    Attributes:
        constants: Deployment configuration constants
        commands: Shell command executor
        controller: Kubernetes controller
        release_manager: Helm release manager
        status_reporter: Read-only status snapshots
    """

    def __init__(
        self,
        console: Console,
        project_root: Path,
        *,
        controller: KubernetesControllerSync | None = None,
        commands: ShellCommands | None = None,
        constants: DeploymentConstants | None = None,
        confirm: ConfirmFn | None = None,
        session_factory: SessionFactory = make_session,
    ):
        """Initialize the deployer.

        Args:
            console: Rich console for output
            project_root: Path to the project root directory
            controller: Kubernetes controller (defaults to the kr8s one)
            commands: Shell command executor
            constants: Deployment constants
            confirm: Teardown confirmation callback; declines by default
            session_factory: Builds a boto3 session from (region, profile)
        """
        super().__init__(console, project_root)

        # Core configuration
        self.constants = constants or DeploymentConstants()

        # UI components
        self.status_display = StatusDisplay(console, self.constants)

        # External systems
        self.commands = commands or ShellCommands(project_root)
        self.controller = controller or get_k8s_controller_sync()
        self._session_factory = session_factory
        self._confirm = confirm or _decline

        # Components
        self.release_manager = HelmReleaseManager(self.commands, self.constants)
        self.status_reporter = StatusReporter(
            self.controller, self.constants, self.release_manager
        )

    # =========================================================================
    # Public Interface
    # =========================================================================

    def deploy(  # type: ignore[override]
        self,
        config: DeploymentConfig,
        *,
        skip_preflight: bool = False,
        **kwargs: Any,
    ) -> InstallOutcome:
        """Install or upgrade Flyte.

        Workflow:
        1. Preflight checks (binaries, AWS identity, kube context)
        2. Resolve the database credential
        3. Namespace, secret, Helm release, readiness wait

        Args:
            config: Resolved deployment configuration
            skip_preflight: Skip environment checks
            **kwargs: Reserved for future options

        Returns:
            The terminal InstallOutcome

        Raises:
            DeploymentError: If preflight checks fail
        """
        session = self._session_factory(config.region, config.aws_profile)

        if not skip_preflight:
            with self.console.status("[bold blue]Running preflight checks..."):
                preflight = PreflightChecker(
                    self.controller, session, constants=self.constants
                ).check()
            self.status_display.show_preflight(preflight)
            preflight.raise_for_errors()

        store = (
            SecretsManagerStore.from_session(session)
            if config.db_password_secret
            else None
        )
        orchestrator = InstallOrchestrator(
            self.controller,
            self.release_manager,
            self.status_reporter,
            self.constants,
        )

        with self.console.status(
            f"[bold blue]Installing Flyte into {config.namespace}..."
        ):
            outcome = orchestrator.provision(config, CredentialBroker(store))

        self.status_display.show_install_outcome(outcome)
        return outcome

    def teardown(  # type: ignore[override]
        self,
        config: DeploymentConfig,
        options: TeardownOptions | None = None,
        **kwargs: Any,
    ) -> TeardownReport:
        """Remove the Flyte release, namespace and external resources.

        Args:
            config: Resolved deployment configuration
            options: Confirmation and optional-step settings
            **kwargs: Reserved for future options

        Returns:
            A TeardownReport covering every step
        """
        session = self._session_factory(config.region, config.aws_profile)
        coordinator = TeardownCoordinator(
            self.controller,
            self.release_manager,
            self._confirm,
            secret_store=SecretsManagerStore.from_session(session),
            object_storage=ObjectStorage.from_session(session),
            iam=IdentityAdmin.from_session(session),
            constants=self.constants,
        )
        report = coordinator.teardown(config, options)
        self.status_display.show_teardown_report(report)
        return report

    def show_status(self, namespace: str | None = None, **kwargs: Any) -> StatusSnapshot:  # type: ignore[override]
        """Display the current status of the Flyte namespace.

        Args:
            namespace: Kubernetes namespace to check (default: flyte)
        """
        namespace = namespace or self.constants.DEFAULT_NAMESPACE
        snapshot = self.status_reporter.snapshot(namespace)
        self.status_display.show_snapshot(snapshot)
        return snapshot

    # =========================================================================
    # Secret Store Helpers
    # =========================================================================

    def create_db_password(
        self, region: str, secret_name: str, profile: str | None = None
    ) -> bool:
        """Generate a database password and store it in Secrets Manager.

        The generated value is never printed.

        Returns:
            True if the secret was created, False if a new version was stored
        """
        store = SecretsManagerStore.from_session(self._session_factory(region, profile))
        password = generate_password(self.constants.GENERATED_PASSWORD_LENGTH)
        created = store.put(
            secret_name, password, description="Flyte database password"
        )
        logger.info("Database password stored in {}", secret_name)
        return created

    def check_secret(
        self, region: str, secret_name: str, profile: str | None = None
    ) -> bool:
        """Check that a secret exists and is non-empty without revealing it."""
        store = SecretsManagerStore.from_session(self._session_factory(region, profile))
        return bool(store.get(secret_name))

    # =========================================================================
    # Console Access
    # =========================================================================

    def open_console(self, namespace: str | None = None, local_port: int | None = None) -> None:
        """Port-forward the Flyte HTTP service until interrupted.

        Raises:
            DeploymentError: If the namespace or service is missing, or
                kubectl exits with an error
        """
        c = self.constants
        namespace = namespace or c.DEFAULT_NAMESPACE
        local_port = local_port or c.LOCAL_CONSOLE_PORT

        if not self.controller.namespace_exists(namespace):
            raise DeploymentError(f"Namespace '{namespace}' does not exist")
        services = {svc.name for svc in self.controller.get_services(namespace)}
        if c.HTTP_SERVICE_NAME not in services:
            raise DeploymentError(
                f"Service '{c.HTTP_SERVICE_NAME}' not found in '{namespace}'",
                "Is Flyte installed? Run the install command first.",
            )

        self.success(
            f"Flyte console: http://localhost:{local_port}{c.CONSOLE_PATH}"
        )
        self.info("Press Ctrl+C to stop port forwarding")
        result = self.commands.kubectl.port_forward(
            namespace,
            c.HTTP_SERVICE_NAME,
            local_port,
            c.HTTP_SERVICE_PORT,
            on_output=lambda line: self.console.print(f"[dim]{line}[/dim]"),
        )
        if not result.success:
            raise DeploymentError("Port forwarding stopped", result.stdout or None)
