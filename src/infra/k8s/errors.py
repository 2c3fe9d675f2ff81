"""Errors raised by the Kubernetes controller."""

from __future__ import annotations


class KubernetesApiError(Exception):
    """A Kubernetes API call failed for a reason other than "not found".

    Attributes:
        operation: Controller operation that failed
        target: Object the call was about (e.g. "namespace/flyte")
    """

    def __init__(self, operation: str, target: str, message: str):
        self.operation = operation
        self.target = target
        super().__init__(f"{operation} {target} failed: {message}")
