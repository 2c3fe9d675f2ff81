"""Kr8s-based implementation of KubernetesController.

Uses the kr8s library for native async Kubernetes operations.
"""

from __future__ import annotations

import asyncio
import base64
from typing import Any

import kr8s
from kr8s.asyncio.objects import (
    Endpoints,
    Event,
    Ingress,
    Namespace,
    Pod,
    Secret,
    Service,
)

from .controller import (
    CommandResult,
    EventInfo,
    IngressInfo,
    KubernetesController,
    PodInfo,
    ServiceInfo,
)
from .errors import KubernetesApiError


class Kr8sController(KubernetesController):
    """Kubernetes controller using kr8s library.

    All methods are natively async, leveraging kr8s's async API.

    Note: The kr8s API client is NOT cached because it's tied to the event loop
    that was running when created. When using run_sync() which calls asyncio.run(),
    each call creates a new event loop, making the cached API unusable.
    """

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        """Create a kr8s API client bound to the running event loop."""
        return await kr8s.asyncio.api()

    # =========================================================================
    # Cluster Context
    # =========================================================================

    async def get_current_context(self) -> str:
        """Get the current kubeconfig context name."""
        try:
            api = await self._get_api()
            return api.auth.active_context or "unknown"
        except Exception:
            return "unknown"

    # =========================================================================
    # Namespace Operations
    # =========================================================================

    async def namespace_exists(self, namespace: str) -> bool:
        """Check if a namespace exists.

        Raises:
            KubernetesApiError: If the API server could not answer
        """
        try:
            api = await self._get_api()
            ns = await Namespace.get(namespace, api=api)
            return ns is not None
        except kr8s.NotFoundError:
            return False
        except Exception as e:
            raise KubernetesApiError("get", f"namespace/{namespace}", str(e)) from e

    async def create_namespace(self, namespace: str) -> CommandResult:
        """Create a namespace."""
        try:
            api = await self._get_api()
            ns = Namespace(
                {
                    "apiVersion": "v1",
                    "kind": "Namespace",
                    "metadata": {"name": namespace},
                },
                api=api,
            )
            await ns.create()
            return CommandResult(success=True, stdout=f"namespace/{namespace} created")
        except Exception as e:
            return CommandResult(success=False, stderr=str(e), returncode=1)

    async def delete_namespace(
        self,
        namespace: str,
        *,
        wait: bool = False,
        timeout: str = "120s",
    ) -> CommandResult:
        """Delete a Kubernetes namespace and all its resources."""
        try:
            api = await self._get_api()
            ns = await Namespace.get(namespace, api=api)
            await ns.delete()

            if wait:
                try:
                    await asyncio.wait_for(
                        self._wait_for_namespace_deletion(namespace),
                        timeout=self._parse_timeout(timeout),
                    )
                except TimeoutError:
                    return CommandResult(
                        success=False,
                        stderr=f"Timeout waiting for namespace {namespace} deletion",
                        returncode=1,
                    )
                return CommandResult(
                    success=True, stdout=f'namespace "{namespace}" deleted'
                )

            return CommandResult(
                success=True, stdout=f'namespace "{namespace}" deletion initiated'
            )
        except kr8s.NotFoundError:
            return CommandResult(
                success=False,
                stderr=f'namespace "{namespace}" not found',
                returncode=1,
            )
        except Exception as e:
            return CommandResult(success=False, stderr=str(e), returncode=1)

    async def _wait_for_namespace_deletion(self, namespace: str) -> None:
        """Wait until a namespace no longer exists."""
        while await self.namespace_exists(namespace):
            await asyncio.sleep(1)

    # =========================================================================
    # Secret Operations
    # =========================================================================

    async def get_secret_data(self, name: str, namespace: str) -> dict[str, str] | None:
        """Read a Secret's decoded key/value data.

        Returns:
            The decoded data, or None when the Secret does not exist

        Raises:
            KubernetesApiError: If the API server could not answer
        """
        try:
            api = await self._get_api()
            secret = await Secret.get(name, namespace=namespace, api=api)
        except kr8s.NotFoundError:
            return None
        except Exception as e:
            raise KubernetesApiError(
                "get", f"secret/{namespace}/{name}", str(e)
            ) from e

        encoded: dict[str, str] = secret.raw.get("data") or {}
        return {
            key: base64.b64decode(value).decode("utf-8")
            for key, value in encoded.items()
        }

    async def apply_secret(
        self,
        name: str,
        namespace: str,
        data: dict[str, str],
    ) -> CommandResult:
        """Create or update an Opaque Secret with the given plaintext data."""
        encoded = {
            key: base64.b64encode(value.encode("utf-8")).decode("ascii")
            for key, value in data.items()
        }
        try:
            api = await self._get_api()
            try:
                secret = await Secret.get(name, namespace=namespace, api=api)
            except kr8s.NotFoundError:
                secret = Secret(
                    {
                        "apiVersion": "v1",
                        "kind": "Secret",
                        "type": "Opaque",
                        "metadata": {"name": name, "namespace": namespace},
                        "data": encoded,
                    },
                    api=api,
                )
                await secret.create()
                return CommandResult(success=True, stdout=f"secret/{name} created")

            await secret.patch({"data": encoded}, type="merge")
            return CommandResult(success=True, stdout=f"secret/{name} configured")
        except Exception as e:
            # Never echo the payload; the exception text comes from the API server
            return CommandResult(success=False, stderr=str(e), returncode=1)

    # =========================================================================
    # Pod Operations
    # =========================================================================

    async def get_pods(
        self,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[PodInfo]:
        """Get pods in a namespace with their status."""
        try:
            api = await self._get_api()
            kwargs: dict[str, Any] = {"namespace": namespace, "api": api}
            if label_selector:
                kwargs["label_selector"] = label_selector

            return [self._to_pod_info(pod) async for pod in Pod.list(**kwargs)]
        except Exception:
            return []

    def _to_pod_info(self, pod: Any) -> PodInfo:
        """Flatten a kr8s Pod into a PodInfo."""
        metadata = pod.metadata
        spec = pod.spec
        status = pod.status

        phase = status.get("phase", "Unknown")
        pod_status = phase
        restarts = 0
        for cs in status.get("containerStatuses", []):
            restarts += cs.get("restartCount", 0)
            state = cs.get("state", {})
            if "waiting" in state:
                reason = state["waiting"].get("reason", "")
                if reason:
                    pod_status = reason
            elif "terminated" in state:
                if state["terminated"].get("reason", "") == "Error":
                    pod_status = "Error"

        ready = any(
            condition.get("type") == "Ready" and condition.get("status") == "True"
            for condition in status.get("conditions", [])
        )

        return PodInfo(
            name=metadata.get("name", ""),
            status=pod_status,
            ready=ready,
            restarts=restarts,
            creation_timestamp=metadata.get("creationTimestamp", ""),
            ip=status.get("podIP", ""),
            node=spec.get("nodeName", ""),
        )

    async def wait_for_pods_ready(
        self,
        namespace: str,
        label_selector: str,
        *,
        timeout_seconds: float,
        poll_seconds: float = 5.0,
    ) -> CommandResult:
        """Poll until every matching pod is Ready or the timeout elapses."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_seconds
        pods: list[PodInfo] = []

        while True:
            pods = await self.get_pods(namespace, label_selector)
            if pods and all(pod.ready for pod in pods):
                return CommandResult(
                    success=True,
                    stdout=f"{len(pods)}/{len(pods)} pod(s) ready",
                )
            if loop.time() >= deadline:
                break
            await asyncio.sleep(min(poll_seconds, max(deadline - loop.time(), 0)))

        ready = sum(1 for pod in pods if pod.ready)
        return CommandResult(
            success=False,
            stderr=(
                f"timed out after {timeout_seconds:.0f}s waiting for pods "
                f"'{label_selector}' ({ready}/{len(pods)} ready)"
            ),
            returncode=1,
        )

    # =========================================================================
    # Service / Ingress / Event Operations
    # =========================================================================

    async def get_services(self, namespace: str) -> list[ServiceInfo]:
        """Get all services in a namespace."""
        try:
            api = await self._get_api()
            result = []

            async for svc in Service.list(namespace=namespace, api=api):
                spec = svc.spec
                status = svc.status

                # Get external IP from LoadBalancer status
                external_ip = ""
                lb_ingress = status.get("loadBalancer", {}).get("ingress", [])
                if lb_ingress:
                    external_ip = lb_ingress[0].get(
                        "ip", lb_ingress[0].get("hostname", "")
                    )

                ports = []
                for port in spec.get("ports", []):
                    port_str = f"{port.get('port')}"
                    if target := port.get("targetPort"):
                        port_str += f":{target}"
                    if proto := port.get("protocol"):
                        port_str += f"/{proto}"
                    ports.append(port_str)

                result.append(
                    ServiceInfo(
                        name=svc.metadata.get("name", ""),
                        type=spec.get("type", ""),
                        cluster_ip=spec.get("clusterIP", ""),
                        external_ip=external_ip,
                        ports=",".join(ports),
                    )
                )

            return result
        except Exception:
            return []

    async def service_has_endpoints(self, name: str, namespace: str) -> bool:
        """Check whether a service has at least one ready endpoint address."""
        try:
            api = await self._get_api()
            endpoints = await Endpoints.get(name, namespace=namespace, api=api)
        except kr8s.NotFoundError:
            return False
        except Exception as e:
            raise KubernetesApiError(
                "get", f"endpoints/{namespace}/{name}", str(e)
            ) from e

        subsets = endpoints.raw.get("subsets") or []
        return any(subset.get("addresses") for subset in subsets)

    async def get_ingresses(self, namespace: str) -> list[IngressInfo]:
        """Get all ingresses in a namespace."""
        try:
            api = await self._get_api()
            result = []

            async for ing in Ingress.list(namespace=namespace, api=api):
                hosts = [
                    rule.get("host", "")
                    for rule in ing.spec.get("rules", [])
                    if rule.get("host")
                ]
                lb_ingress = ing.status.get("loadBalancer", {}).get("ingress", [])
                hostname = ""
                if lb_ingress:
                    hostname = lb_ingress[0].get(
                        "hostname", lb_ingress[0].get("ip", "")
                    )
                result.append(
                    IngressInfo(
                        name=ing.metadata.get("name", ""),
                        hosts=hosts,
                        load_balancer_hostname=hostname,
                    )
                )

            return result
        except Exception:
            return []

    async def get_events(self, namespace: str, limit: int = 10) -> list[EventInfo]:
        """Get the most recent events in a namespace, oldest first."""
        try:
            api = await self._get_api()
            events = []

            async for ev in Event.list(namespace=namespace, api=api):
                raw = ev.raw
                involved = raw.get("involvedObject", {})
                events.append(
                    EventInfo(
                        type=raw.get("type", ""),
                        reason=raw.get("reason", ""),
                        object=f"{involved.get('kind', '').lower()}/{involved.get('name', '')}",
                        message=raw.get("message", ""),
                        last_timestamp=raw.get("lastTimestamp")
                        or raw.get("eventTime")
                        or "",
                    )
                )

            events.sort(key=lambda e: e.last_timestamp)
            return events[-limit:] if limit > 0 else events
        except Exception:
            return []

    # =========================================================================
    # Helpers
    # =========================================================================

    def _parse_timeout(self, timeout: str) -> float:
        """Parse a timeout string like '120s' or '5m' to seconds."""
        if timeout.endswith("s"):
            return float(timeout[:-1])
        elif timeout.endswith("m"):
            return float(timeout[:-1]) * 60
        elif timeout.endswith("h"):
            return float(timeout[:-1]) * 3600
        else:
            return float(timeout)
