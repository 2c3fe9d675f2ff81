"""Teardown of a Flyte deployment.

Removes resources in reverse install order and then the external artefacts
the install depended on. Each step is independent: a failure is recorded and
the remaining steps still run.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from src.infra.aws import IdentityAdmin, ObjectStorage, SecretStore
from src.infra.constants import DEFAULT_CONSTANTS, DeploymentConstants
from src.infra.k8s import KubernetesControllerSync

from .config_resolver import DeploymentConfig
from .errors import ControlPlaneError, DeploymentError
from .helm_release import ReleaseManager, UninstallOutcome
from .steps import (
    ConfirmFn,
    ProvisioningStep,
    StepResult,
    StepSkipped,
    StepStatus,
    run_continuing,
)


@dataclass(frozen=True)
class TeardownOptions:
    """How teardown asks for confirmation and which optional steps run.

    Attributes:
        confirm_each: Ask before every step. When False a single upfront
            confirmation covers all steps except permanent ones.
        force: Never ask. Overrides confirm_each.
        delete_buckets: Empty and delete both storage buckets
        delete_roles: Delete the backend and user IAM roles
    """

    confirm_each: bool = True
    force: bool = False
    delete_buckets: bool = True
    delete_roles: bool = True


@dataclass
class TeardownReport:
    results: list[StepResult] = field(default_factory=list)

    def _with(self, status: StepStatus) -> list[StepResult]:
        return [r for r in self.results if r.status is status]

    @property
    def failed(self) -> list[StepResult]:
        return self._with(StepStatus.FAILED)

    @property
    def applied(self) -> list[StepResult]:
        return self._with(StepStatus.APPLIED)

    @property
    def skipped(self) -> list[StepResult]:
        return self._with(StepStatus.SKIPPED)

    @property
    def succeeded(self) -> bool:
        return not self.failed


class TeardownCoordinator:
    """Runs teardown steps with the continue-on-failure policy."""

    def __init__(
        self,
        controller: KubernetesControllerSync,
        release_manager: ReleaseManager,
        confirm: ConfirmFn,
        *,
        secret_store: SecretStore | None = None,
        object_storage: ObjectStorage | None = None,
        iam: IdentityAdmin | None = None,
        constants: DeploymentConstants = DEFAULT_CONSTANTS,
    ) -> None:
        self._controller = controller
        self._release_manager = release_manager
        self._confirm = confirm
        self._secret_store = secret_store
        self._object_storage = object_storage
        self._iam = iam
        self._constants = constants

    def teardown(
        self, config: DeploymentConfig, options: TeardownOptions | None = None
    ) -> TeardownReport:
        options = options or TeardownOptions()
        steps = self.build_steps(config, options)
        report = TeardownReport()

        if options.force:
            gate: ConfirmFn | None = None
        elif options.confirm_each:
            gate = self._confirm
        else:
            summary = ", ".join(s.name for s in steps if s.confirm_message)
            if not self._confirm(
                "teardown",
                f"Tear down Flyte in namespace '{config.namespace}' ({summary})?",
                False,
            ):
                logger.info("Teardown declined by operator")
                report.results = [
                    StepResult.skipped(s.name, s.system, "declined by operator")
                    for s in steps
                ]
                return report
            gate = self._permanent_only

        for result in run_continuing(steps, gate):
            report.results.append(result)

        logger.info(
            "Teardown finished: {} applied, {} skipped, {} failed",
            len(report.applied),
            len(report.skipped),
            len(report.failed),
        )
        return report

    def _permanent_only(self, name: str, message: str, permanent: bool) -> bool:
        return self._confirm(name, message, True) if permanent else True

    def build_steps(
        self, config: DeploymentConfig, options: TeardownOptions
    ) -> list[ProvisioningStep]:
        """Teardown steps in execution order."""
        c = self._constants
        namespace = config.namespace
        steps = [
            ProvisioningStep(
                name="release",
                system="helm",
                apply=lambda: self._uninstall_release(namespace),
                confirm_message=f"Uninstall Helm release '{c.HELM_RELEASE_NAME}' from '{namespace}'?",
            ),
            ProvisioningStep(
                name="namespace",
                system="kubernetes",
                apply=lambda: self._delete_namespace(namespace),
                is_satisfied=lambda: not self._controller.namespace_exists(namespace),
                satisfied_detail=f"namespace {namespace} not found",
                confirm_message=f"Delete namespace '{namespace}' and everything in it?",
            ),
            self._secret_step(config),
        ]

        buckets = config.buckets if options.delete_buckets else None
        for label, bucket in (
            ("metadata", config.metadata_bucket),
            ("userdata", config.userdata_bucket),
        ):
            steps.append(self._bucket_step(label, bucket if buckets else None, options))

        for label, arn in (
            ("backend", config.backend_role_arn),
            ("user", config.user_role_arn),
        ):
            steps.append(self._role_step(label, arn, options))

        return steps

    # =========================================================================
    # Step actions
    # =========================================================================

    def _uninstall_release(self, namespace: str) -> str:
        name = self._constants.HELM_RELEASE_NAME
        if self._release_manager.uninstall(name, namespace) is UninstallOutcome.NOT_FOUND:
            raise StepSkipped(f"release {name} not found")
        return f"release {name} uninstalled"

    def _delete_namespace(self, namespace: str) -> str:
        result = self._controller.delete_namespace(namespace, wait=False)
        if not result.success:
            raise ControlPlaneError(
                f"Failed to delete namespace {namespace}", result.stderr or None
            )
        return f"namespace {namespace} deletion initiated"

    def _secret_step(self, config: DeploymentConfig) -> ProvisioningStep:
        name = config.db_password_secret

        def delete_secret() -> str:
            if not name:
                raise StepSkipped("no secret store reference configured")
            if self._secret_store is None:
                raise DeploymentError(f"No secret store available to delete '{name}'")
            if not self._secret_store.delete(name, recoverable=False):
                raise StepSkipped(f"secret {name} not found")
            return f"secret {name} permanently deleted"

        return ProvisioningStep(
            name="secret-store",
            system="secretsmanager",
            apply=delete_secret,
            confirm_message=(
                f"PERMANENTLY delete secret '{name}' from Secrets Manager? "
                "This cannot be recovered."
                if name
                else None
            ),
            permanent=True,
        )

    def _bucket_step(
        self, label: str, bucket: str | None, options: TeardownOptions
    ) -> ProvisioningStep:
        def delete_bucket() -> str:
            if not options.delete_buckets:
                raise StepSkipped("bucket deletion not requested")
            if not bucket:
                raise StepSkipped("both bucket names are required for bucket deletion")
            if self._object_storage is None:
                raise DeploymentError(f"No object storage client to delete '{bucket}'")
            if not self._object_storage.bucket_exists(bucket):
                raise StepSkipped(f"bucket {bucket} not found")
            removed = self._object_storage.empty_bucket(bucket)
            self._object_storage.delete_bucket(bucket)
            return f"bucket {bucket} emptied ({removed} object(s)) and deleted"

        return ProvisioningStep(
            name=f"bucket:{label}",
            system="s3",
            apply=delete_bucket,
            confirm_message=(
                f"Empty and delete bucket '{bucket}'?" if bucket else None
            ),
        )

    def _role_step(
        self, label: str, arn: str | None, options: TeardownOptions
    ) -> ProvisioningStep:
        def delete_role() -> str:
            if not options.delete_roles:
                raise StepSkipped("role deletion not requested")
            if not arn:
                raise StepSkipped(f"no {label} role configured")
            if self._iam is None:
                raise DeploymentError(f"No IAM client to delete '{arn}'")
            if not self._iam.delete_role(arn):
                raise StepSkipped(f"role {arn} not found")
            return f"role {arn} deleted"

        return ProvisioningStep(
            name=f"role:{label}",
            system="iam",
            apply=delete_role,
            confirm_message=(
                f"Delete IAM role '{arn}'?" if arn and options.delete_roles else None
            ),
        )
