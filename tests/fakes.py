"""In-memory stand-ins for the external systems the deployer drives."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.cli.deployment.helm_deployer.errors import ReleaseManagerError
from src.cli.deployment.helm_deployer.helm_release import UninstallOutcome
from src.infra.aws import AwsServiceError
from src.infra.k8s.controller import (
    CommandResult,
    EventInfo,
    IngressInfo,
    PodInfo,
    ServiceInfo,
)
from src.infra.k8s.errors import KubernetesApiError


FULL_ENV = {
    "CLUSTER_NAME": "flyte-cluster",
    "AWS_REGION": "us-east-1",
    "FLYTE_NAMESPACE": "flyte",
    "DB_HOST": "flyte-db.cluster-abc.us-east-1.rds.amazonaws.com",
    "DB_PASSWORD_SECRET": "flyte-db-password",
    "METADATA_BUCKET": "flyte-metadata",
    "USERDATA_BUCKET": "flyte-userdata",
    "FLYTE_BACKEND_ROLE_ARN": "arn:aws:iam::123456789012:role/flyte-backend",
    "FLYTE_USER_ROLE_ARN": "arn:aws:iam::123456789012:role/flyte/flyte-user",
}


@dataclass
class FakeController:
    """Synchronous Kubernetes controller backed by dictionaries."""

    namespaces: set[str] = field(default_factory=set)
    secrets: dict[tuple[str, str], dict[str, str]] = field(default_factory=dict)
    pods: dict[str, list[PodInfo]] = field(default_factory=dict)
    services: dict[str, list[ServiceInfo]] = field(default_factory=dict)
    ingresses: dict[str, list[IngressInfo]] = field(default_factory=dict)
    events: dict[str, list[EventInfo]] = field(default_factory=dict)
    endpoints: set[tuple[str, str]] = field(default_factory=set)
    context: str = "arn:aws:eks:us-east-1:123456789012:cluster/flyte"
    ready: bool = True
    fail_namespace_create: bool = False
    fail_secret_apply: bool = False
    interrupt_on_wait: bool = False
    unreachable: bool = False
    fail_secret_read: bool = False
    calls: list[str] = field(default_factory=list)

    def _check_reachable(self, target: str) -> None:
        if self.unreachable:
            raise KubernetesApiError("get", target, "connection refused")

    def get_current_context(self) -> str:
        return self.context

    def namespace_exists(self, namespace: str) -> bool:
        self._check_reachable(f"namespace/{namespace}")
        return namespace in self.namespaces

    def create_namespace(self, namespace: str) -> CommandResult:
        self.calls.append(f"create_namespace:{namespace}")
        if self.fail_namespace_create:
            return CommandResult(success=False, stderr="forbidden", returncode=1)
        self.namespaces.add(namespace)
        return CommandResult(success=True)

    def delete_namespace(
        self, namespace: str, *, wait: bool = False, timeout: str = "120s"
    ) -> CommandResult:
        self.calls.append(f"delete_namespace:{namespace}")
        self.namespaces.discard(namespace)
        return CommandResult(success=True)

    def get_secret_data(self, name: str, namespace: str) -> dict[str, str] | None:
        self._check_reachable(f"secret/{namespace}/{name}")
        if self.fail_secret_read:
            raise KubernetesApiError(
                "get", f"secret/{namespace}/{name}", "secrets is forbidden"
            )
        data = self.secrets.get((namespace, name))
        return dict(data) if data is not None else None

    def apply_secret(
        self, name: str, namespace: str, data: dict[str, str]
    ) -> CommandResult:
        self.calls.append(f"apply_secret:{name}")
        if self.fail_secret_apply:
            return CommandResult(success=False, stderr="denied", returncode=1)
        self.secrets[(namespace, name)] = dict(data)
        return CommandResult(success=True)

    def get_pods(
        self, namespace: str, label_selector: str | None = None
    ) -> list[PodInfo]:
        return list(self.pods.get(namespace, []))

    def wait_for_pods_ready(
        self,
        namespace: str,
        label_selector: str,
        *,
        timeout_seconds: float,
        poll_seconds: float = 5.0,
    ) -> CommandResult:
        self.calls.append(f"wait:{namespace}")
        if self.interrupt_on_wait:
            raise KeyboardInterrupt
        if self.ready:
            return CommandResult(success=True, stdout="1/1 pod(s) ready")
        return CommandResult(
            success=False, stderr=f"timed out after {timeout_seconds:.0f}s", returncode=1
        )

    def get_services(self, namespace: str) -> list[ServiceInfo]:
        return list(self.services.get(namespace, []))

    def service_has_endpoints(self, name: str, namespace: str) -> bool:
        self._check_reachable(f"endpoints/{namespace}/{name}")
        return (namespace, name) in self.endpoints

    def get_ingresses(self, namespace: str) -> list[IngressInfo]:
        return list(self.ingresses.get(namespace, []))

    def get_events(self, namespace: str, limit: int = 10) -> list[EventInfo]:
        return list(self.events.get(namespace, []))[-limit:]


@dataclass
class FakeReleaseManager:
    releases: dict[tuple[str, str], str] = field(default_factory=dict)
    fail_install: bool = False
    fail_uninstall: bool = False
    fail_list: bool = False
    calls: list[str] = field(default_factory=list)
    last_values: dict[str, Any] | None = None

    def ensure_repository(self) -> None:
        self.calls.append("ensure_repository")

    def install_or_upgrade(
        self, name: str, namespace: str, version: str, values: dict[str, Any]
    ) -> str:
        self.calls.append(f"install:{name}")
        if self.fail_install:
            raise ReleaseManagerError("helm upgrade --install failed", "chart not found")
        self.releases[(namespace, name)] = version
        self.last_values = values
        return f"{version} applied"

    def uninstall(self, name: str, namespace: str) -> UninstallOutcome:
        self.calls.append(f"uninstall:{name}")
        if self.fail_uninstall:
            raise ReleaseManagerError(f"helm uninstall {name} failed", "timeout")
        if self.releases.pop((namespace, name), None) is None:
            return UninstallOutcome.NOT_FOUND
        return UninstallOutcome.UNINSTALLED

    def release_exists(self, name: str, namespace: str) -> bool:
        if self.fail_list:
            raise ReleaseManagerError(f"helm list -n {namespace} failed")
        return (namespace, name) in self.releases


@dataclass
class FakeSecretStore:
    values: dict[str, str] = field(default_factory=dict)
    unavailable: bool = False
    fail_delete: bool = False
    gets: list[str] = field(default_factory=list)
    deletes: list[tuple[str, bool]] = field(default_factory=list)

    def get(self, name: str) -> str | None:
        self.gets.append(name)
        if self.unavailable:
            raise AwsServiceError("secretsmanager", "GetSecretValue", "endpoint timeout")
        return self.values.get(name)

    def put(self, name: str, value: str, *, description: str = "") -> bool:
        created = name not in self.values
        self.values[name] = value
        return created

    def delete(self, name: str, *, recoverable: bool = False) -> bool:
        self.deletes.append((name, recoverable))
        if self.fail_delete:
            raise AwsServiceError(
                "secretsmanager", "DeleteSecret", "access denied", "AccessDeniedException"
            )
        return self.values.pop(name, None) is not None


@dataclass
class FakeObjectStorage:
    buckets: dict[str, int] = field(default_factory=dict)
    deleted: list[str] = field(default_factory=list)

    def bucket_exists(self, bucket: str) -> bool:
        return bucket in self.buckets

    def empty_bucket(self, bucket: str) -> int:
        count = self.buckets[bucket]
        self.buckets[bucket] = 0
        return count

    def delete_bucket(self, bucket: str) -> None:
        del self.buckets[bucket]
        self.deleted.append(bucket)


@dataclass
class FakeIdentityAdmin:
    roles: set[str] = field(default_factory=set)
    deleted: list[str] = field(default_factory=list)

    def delete_role(self, role_arn: str) -> bool:
        name = role_arn.rsplit("/", 1)[-1]
        if name not in self.roles:
            return False
        self.roles.remove(name)
        self.deleted.append(name)
        return True
