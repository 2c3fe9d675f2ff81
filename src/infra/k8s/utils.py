"""Utility functions for the Kubernetes infrastructure layer."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine in a blocking sync context.

    Used by `KubernetesControllerSync` so the orchestrator can stay a plain
    synchronous step sequence while kr8s does its work on an event loop.

    Args:
        coro: The coroutine to execute

    Returns:
        The result of the coroutine

    Example:
        from src.infra.k8s import Kr8sController, run_sync

        pods = run_sync(Kr8sController().get_pods("flyte"))
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    # Already inside a running loop: hand the coroutine to a fresh loop on a
    # worker thread instead of re-entering this one.
    import concurrent.futures

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()
