"""Kubernetes infrastructure abstraction layer.

This module provides a clean abstraction over the Control Plane operations
used by the Flyte deployer, backed by the kr8s library.

Example:
    from src.infra.k8s import get_k8s_controller_sync

    controller = get_k8s_controller_sync()
    if not controller.namespace_exists("flyte"):
        controller.create_namespace("flyte")
"""

from .controller import (
    CommandResult,
    EventInfo,
    IngressInfo,
    KubernetesController,
    KubernetesControllerSync,
    PodInfo,
    ServiceInfo,
)
from .errors import KubernetesApiError
from .helpers import get_k8s_controller, get_k8s_controller_sync
from .kr8s_controller import Kr8sController
from .utils import run_sync

__all__ = [
    # Controller classes
    "KubernetesController",
    "KubernetesControllerSync",
    "Kr8sController",
    # Errors
    "KubernetesApiError",
    # Data classes
    "CommandResult",
    "PodInfo",
    "ServiceInfo",
    "IngressInfo",
    "EventInfo",
    # Factories / utilities
    "get_k8s_controller",
    "get_k8s_controller_sync",
    "run_sync",
]
