"""Install path state machine.

States advance strictly in order::

    INIT -> NAMESPACE_ENSURED -> SECRET_MATERIALIZED -> RELEASE_APPLIED
         -> READINESS_AWAITED -> DONE

Any fatal step failure, a credential that cannot be resolved, or an operator
interrupt moves the run to ABORTED. Nothing already applied is rolled back;
every step is create-or-update so a later run picks up where this one
stopped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from src.infra.constants import DEFAULT_CONSTANTS, DeploymentConstants
from src.infra.k8s import KubernetesApiError, KubernetesControllerSync

from .config_resolver import DeploymentConfig
from .credential_broker import CredentialBroker, SecretHandle
from .errors import (
    BrokerError,
    ControlPlaneError,
    ReadinessTimeout,
    ReleaseManagerError,
)
from .helm_release import ReleaseManager
from .status_reporter import StatusReporter, StatusSnapshot
from .steps import ProvisioningStep, StepResult, StepSkipped, StepStatus, run_halting
from .values import build_values


class InstallState(Enum):
    INIT = "init"
    NAMESPACE_ENSURED = "namespace_ensured"
    SECRET_MATERIALIZED = "secret_materialized"
    RELEASE_APPLIED = "release_applied"
    READINESS_AWAITED = "readiness_awaited"
    DONE = "done"
    ABORTED = "aborted"


# State reached once the named step has completed without failing
_STATE_AFTER_STEP: dict[str, InstallState] = {
    "namespace": InstallState.NAMESPACE_ENSURED,
    "secret": InstallState.SECRET_MATERIALIZED,
    "release": InstallState.RELEASE_APPLIED,
    "readiness": InstallState.READINESS_AWAITED,
}


@dataclass
class InstallOutcome:
    """Terminal state of an install run and everything it did."""

    state: InstallState
    results: list[StepResult] = field(default_factory=list)
    snapshot: StatusSnapshot | None = None
    abort_reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is InstallState.DONE

    @property
    def completed_steps(self) -> list[str]:
        return [r.step for r in self.results if r.ok]

    @property
    def warnings(self) -> list[StepResult]:
        return [r for r in self.results if r.status is StepStatus.WARNING]

    @property
    def statuses(self) -> list[StepStatus]:
        return [r.status for r in self.results]


class InstallOrchestrator:
    """Drives a Flyte install against the control plane and release manager."""

    def __init__(
        self,
        controller: KubernetesControllerSync,
        release_manager: ReleaseManager,
        status_reporter: StatusReporter | None = None,
        constants: DeploymentConstants = DEFAULT_CONSTANTS,
    ) -> None:
        self._controller = controller
        self._release_manager = release_manager
        self._status_reporter = status_reporter or StatusReporter(
            controller, constants, release_manager
        )
        self._constants = constants
        self.state = InstallState.INIT

    def provision(
        self, config: DeploymentConfig, broker: CredentialBroker
    ) -> InstallOutcome:
        """Resolve the credential and run the install.

        A credential failure aborts before any cluster mutation.
        """
        self.state = InstallState.INIT
        try:
            secret = broker.resolve_secret(config)
        except BrokerError as e:
            logger.error("Credential resolution failed: {}", e.message)
            self.state = InstallState.ABORTED
            return InstallOutcome(
                state=InstallState.ABORTED,
                abort_reason=f"{e.message} ({e.kind.value})",
            )
        return self.install(config, secret)

    def install(self, config: DeploymentConfig, secret: SecretHandle) -> InstallOutcome:
        """Run the install steps in order, halting on the first fatal failure."""
        self.state = InstallState.INIT
        outcome = InstallOutcome(state=self.state)
        logger.info(
            "Installing {} into namespace {} (secret from {})",
            self._constants.HELM_RELEASE_NAME,
            config.namespace,
            secret.provenance,
        )

        try:
            for result in run_halting(self.build_steps(config, secret)):
                outcome.results.append(result)
                if result.status is StepStatus.FAILED:
                    self.state = InstallState.ABORTED
                    outcome.abort_reason = (
                        f"step '{result.step}' failed on {result.system}: {result.detail}"
                    )
                    break
                self.state = _STATE_AFTER_STEP[result.step]
        except KeyboardInterrupt:
            logger.warning("Install interrupted by operator in state {}", self.state.value)
            self.state = InstallState.ABORTED
            outcome.abort_reason = "interrupted by operator"

        if self.state is InstallState.READINESS_AWAITED:
            self.state = InstallState.DONE
            try:
                outcome.snapshot = self._status_reporter.snapshot(config.namespace)
            except (KubernetesApiError, ReleaseManagerError) as e:
                logger.warning("Post-install status unavailable: {}", e)

        outcome.state = self.state
        return outcome

    def build_steps(
        self, config: DeploymentConfig, secret: SecretHandle
    ) -> list[ProvisioningStep]:
        """Install steps in execution order."""
        namespace = config.namespace
        controller = self._controller
        constants = self._constants

        def create_namespace() -> str:
            result = controller.create_namespace(namespace)
            if not result.success:
                raise ControlPlaneError(
                    f"Failed to create namespace {namespace}", result.stderr or None
                )
            return f"namespace {namespace} created"

        def materialize_secret() -> str:
            desired = {constants.DB_SECRET_KEY: secret.reveal()}
            current = controller.get_secret_data(constants.DB_SECRET_NAME, namespace)
            if current == desired:
                raise StepSkipped(f"secret {constants.DB_SECRET_NAME} unchanged")
            result = controller.apply_secret(constants.DB_SECRET_NAME, namespace, desired)
            if not result.success:
                raise ControlPlaneError(
                    f"Failed to write secret {constants.DB_SECRET_NAME}",
                    result.stderr or None,
                )
            verb = "created" if current is None else "updated"
            return f"secret {constants.DB_SECRET_NAME} {verb}"

        def apply_release() -> str:
            self._release_manager.ensure_repository()
            return self._release_manager.install_or_upgrade(
                constants.HELM_RELEASE_NAME,
                namespace,
                config.release_version,
                build_values(config, constants),
            )

        def await_readiness() -> str:
            result = controller.wait_for_pods_ready(
                namespace,
                constants.READINESS_LABEL,
                timeout_seconds=config.readiness_timeout_seconds,
                poll_seconds=constants.READINESS_POLL_SECONDS,
            )
            if not result.success:
                raise ReadinessTimeout(
                    "Workloads not ready before timeout", result.stderr or None
                )
            return result.stdout

        return [
            ProvisioningStep(
                name="namespace",
                system="kubernetes",
                apply=create_namespace,
                is_satisfied=lambda: controller.namespace_exists(namespace),
                satisfied_detail=f"namespace {namespace} exists",
            ),
            ProvisioningStep(
                name="secret",
                system="kubernetes",
                apply=materialize_secret,
            ),
            ProvisioningStep(
                name="release",
                system="helm",
                apply=apply_release,
            ),
            ProvisioningStep(
                name="readiness",
                system="kubernetes",
                apply=await_readiness,
            ),
        ]
