"""Read-only status snapshots of a Flyte namespace."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from src.infra.constants import DEFAULT_CONSTANTS, DeploymentConstants
from src.infra.k8s import EventInfo, IngressInfo, KubernetesControllerSync
from src.infra.k8s.controller import PodInfo, ServiceInfo

if TYPE_CHECKING:
    from .helm_release import ReleaseManager


@dataclass(frozen=True)
class StatusSnapshot:
    """Point-in-time view of the workloads in a namespace.

    ``ingress`` is None when the namespace has no Ingress objects, so callers
    can tell "no ingress" apart from "ingress without a hostname".
    ``release_installed`` is None when no release manager was consulted.
    """

    namespace: str
    namespace_exists: bool
    workloads: list[PodInfo] = field(default_factory=list)
    services: list[ServiceInfo] = field(default_factory=list)
    ingress: list[IngressInfo] | None = None
    recent_events: list[EventInfo] = field(default_factory=list)
    endpoints_ready: bool = False
    release_installed: bool | None = None

    @classmethod
    def missing(cls, namespace: str) -> StatusSnapshot:
        return cls(namespace=namespace, namespace_exists=False)

    @property
    def ready_count(self) -> int:
        return sum(1 for pod in self.workloads if pod.ready)

    @property
    def total_count(self) -> int:
        return len(self.workloads)

    @property
    def healthy(self) -> bool:
        return (
            self.namespace_exists
            and self.total_count > 0
            and self.ready_count == self.total_count
            and self.endpoints_ready
            and self.release_installed is not False
        )

    @property
    def console_host(self) -> str | None:
        """Load balancer hostname of the first ingress that has one."""
        for ing in self.ingress or []:
            if ing.load_balancer_hostname:
                return ing.load_balancer_hostname
        return None

    @property
    def warning_events(self) -> list[EventInfo]:
        return [ev for ev in self.recent_events if ev.type == "Warning"]


class StatusReporter:
    """Builds StatusSnapshots. Never modifies the cluster."""

    def __init__(
        self,
        controller: KubernetesControllerSync,
        constants: DeploymentConstants = DEFAULT_CONSTANTS,
        release_manager: ReleaseManager | None = None,
    ) -> None:
        self._controller = controller
        self._constants = constants
        self._release_manager = release_manager

    def snapshot(self, namespace: str) -> StatusSnapshot:
        """Collect the current state of a namespace.

        Raises:
            KubernetesApiError: If the API server could not answer
        """
        if not self._controller.namespace_exists(namespace):
            logger.debug("Namespace {} not found; returning empty snapshot", namespace)
            return StatusSnapshot.missing(namespace)

        workloads = self._controller.get_pods(namespace, self._constants.READINESS_LABEL)
        services = self._controller.get_services(namespace)
        ingresses = self._controller.get_ingresses(namespace)
        events = self._controller.get_events(
            namespace, self._constants.RECENT_EVENTS_LIMIT
        )
        endpoints_ready = self._controller.service_has_endpoints(
            self._constants.HTTP_SERVICE_NAME, namespace
        )
        release_installed = None
        if self._release_manager is not None:
            release_installed = self._release_manager.release_exists(
                self._constants.HELM_RELEASE_NAME, namespace
            )

        snapshot = StatusSnapshot(
            namespace=namespace,
            namespace_exists=True,
            workloads=workloads,
            services=services,
            ingress=ingresses or None,
            recent_events=events,
            endpoints_ready=endpoints_ready,
            release_installed=release_installed,
        )
        logger.debug(
            "Snapshot of {}: {}/{} ready, {} service(s)",
            namespace,
            snapshot.ready_count,
            snapshot.total_count,
            len(services),
        )
        return snapshot
