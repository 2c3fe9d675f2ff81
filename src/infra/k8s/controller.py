"""Abstract Kubernetes controller interface.

Defines the contract for the Kubernetes operations the provisioning and
teardown paths need, and a synchronous facade over it for CLI code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from .utils import run_sync

# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


@dataclass
class PodInfo:
    """Information about a Kubernetes pod."""

    name: str
    status: str
    ready: bool = False
    restarts: int = 0
    creation_timestamp: str = ""
    ip: str = ""
    node: str = ""


@dataclass
class ServiceInfo:
    """Information about a Kubernetes Service."""

    name: str
    type: str
    cluster_ip: str
    external_ip: str = ""
    ports: str = ""


@dataclass
class IngressInfo:
    """Information about a Kubernetes Ingress."""

    name: str
    hosts: list[str] = field(default_factory=list)
    load_balancer_hostname: str = ""


@dataclass
class EventInfo:
    """A namespaced Kubernetes event, newest last when listed."""

    type: str
    reason: str
    object: str
    message: str
    last_timestamp: str = ""


# =============================================================================
# Abstract Controller
# =============================================================================


class KubernetesController(ABC):
    """Abstract base class for Kubernetes operations.

    All methods are async to support the native async kr8s client. Use
    `KubernetesControllerSync` (or `run_sync()`) from synchronous code.
    """

    # =========================================================================
    # Cluster Context
    # =========================================================================

    @abstractmethod
    async def get_current_context(self) -> str:
        """Get the current kubeconfig context name.

        Returns:
            Context name, or "unknown" if detection fails
        """
        ...

    # =========================================================================
    # Namespace Operations
    # =========================================================================

    @abstractmethod
    async def namespace_exists(self, namespace: str) -> bool:
        """Check if a namespace exists.

        Args:
            namespace: Namespace to check

        Returns:
            True if the namespace exists, False otherwise

        Raises:
            KubernetesApiError: If the API server could not answer
        """
        ...

    @abstractmethod
    async def create_namespace(self, namespace: str) -> CommandResult:
        """Create a namespace.

        Args:
            namespace: Namespace to create

        Returns:
            CommandResult with creation status
        """
        ...

    @abstractmethod
    async def delete_namespace(
        self,
        namespace: str,
        *,
        wait: bool = False,
        timeout: str = "120s",
    ) -> CommandResult:
        """Delete a Kubernetes namespace and all its resources.

        Warning: This is a destructive operation.

        Args:
            namespace: Namespace to delete
            wait: Whether to wait for deletion to complete
            timeout: Maximum time to wait

        Returns:
            CommandResult with deletion status
        """
        ...

    # =========================================================================
    # Secret Operations
    # =========================================================================

    @abstractmethod
    async def get_secret_data(self, name: str, namespace: str) -> dict[str, str] | None:
        """Read a Secret's decoded key/value data.

        Args:
            name: Secret name
            namespace: Kubernetes namespace

        Returns:
            Decoded data, or None if the secret does not exist

        Raises:
            KubernetesApiError: If the API server could not answer
        """
        ...

    @abstractmethod
    async def apply_secret(
        self,
        name: str,
        namespace: str,
        data: dict[str, str],
    ) -> CommandResult:
        """Create or update an Opaque Secret with the given plaintext data.

        Args:
            name: Secret name
            namespace: Kubernetes namespace
            data: Plaintext key/value pairs (encoded by the implementation)

        Returns:
            CommandResult with apply status
        """
        ...

    # =========================================================================
    # Pod Operations
    # =========================================================================

    @abstractmethod
    async def get_pods(
        self,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[PodInfo]:
        """Get pods in a namespace with their status.

        Args:
            namespace: Kubernetes namespace
            label_selector: Optional label selector to filter pods

        Returns:
            List of PodInfo objects
        """
        ...

    @abstractmethod
    async def wait_for_pods_ready(
        self,
        namespace: str,
        label_selector: str,
        *,
        timeout_seconds: float,
        poll_seconds: float = 5.0,
    ) -> CommandResult:
        """Block until every pod matching a selector reports Ready.

        Args:
            namespace: Kubernetes namespace
            label_selector: Label selector identifying the workloads
            timeout_seconds: Upper bound on the wait
            poll_seconds: Delay between readiness checks

        Returns:
            CommandResult; success is False when the timeout elapsed
        """
        ...

    # =========================================================================
    # Service / Ingress / Event Operations
    # =========================================================================

    @abstractmethod
    async def get_services(self, namespace: str) -> list[ServiceInfo]:
        """Get all services in a namespace."""
        ...

    @abstractmethod
    async def service_has_endpoints(self, name: str, namespace: str) -> bool:
        """Check whether a service has at least one ready endpoint address.

        Raises:
            KubernetesApiError: If the API server could not answer
        """
        ...

    @abstractmethod
    async def get_ingresses(self, namespace: str) -> list[IngressInfo]:
        """Get all ingresses in a namespace."""
        ...

    @abstractmethod
    async def get_events(self, namespace: str, limit: int = 10) -> list[EventInfo]:
        """Get the most recent events in a namespace, oldest first.

        Args:
            namespace: Kubernetes namespace
            limit: Maximum number of events to return

        Returns:
            List of EventInfo objects
        """
        ...


# =============================================================================
# Sync Facade
# =============================================================================


class KubernetesControllerSync:
    """Blocking facade over an async KubernetesController.

    Every call runs the underlying coroutine to completion with `run_sync()`,
    so a KeyboardInterrupt raised while blocked cancels the in-flight call.
    """

    def __init__(self, controller: KubernetesController) -> None:
        self._controller = controller

    def get_current_context(self) -> str:
        return run_sync(self._controller.get_current_context())

    def namespace_exists(self, namespace: str) -> bool:
        return run_sync(self._controller.namespace_exists(namespace))

    def create_namespace(self, namespace: str) -> CommandResult:
        return run_sync(self._controller.create_namespace(namespace))

    def delete_namespace(
        self,
        namespace: str,
        *,
        wait: bool = False,
        timeout: str = "120s",
    ) -> CommandResult:
        return run_sync(
            self._controller.delete_namespace(namespace, wait=wait, timeout=timeout)
        )

    def get_secret_data(self, name: str, namespace: str) -> dict[str, str] | None:
        return run_sync(self._controller.get_secret_data(name, namespace))

    def apply_secret(
        self, name: str, namespace: str, data: dict[str, str]
    ) -> CommandResult:
        return run_sync(self._controller.apply_secret(name, namespace, data))

    def get_pods(
        self, namespace: str, label_selector: str | None = None
    ) -> list[PodInfo]:
        return run_sync(self._controller.get_pods(namespace, label_selector))

    def wait_for_pods_ready(
        self,
        namespace: str,
        label_selector: str,
        *,
        timeout_seconds: float,
        poll_seconds: float = 5.0,
    ) -> CommandResult:
        return run_sync(
            self._controller.wait_for_pods_ready(
                namespace,
                label_selector,
                timeout_seconds=timeout_seconds,
                poll_seconds=poll_seconds,
            )
        )

    def get_services(self, namespace: str) -> list[ServiceInfo]:
        return run_sync(self._controller.get_services(namespace))

    def service_has_endpoints(self, name: str, namespace: str) -> bool:
        return run_sync(self._controller.service_has_endpoints(name, namespace))

    def get_ingresses(self, namespace: str) -> list[IngressInfo]:
        return run_sync(self._controller.get_ingresses(namespace))

    def get_events(self, namespace: str, limit: int = 10) -> list[EventInfo]:
        return run_sync(self._controller.get_events(namespace, limit))
