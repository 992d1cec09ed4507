"""Kubernetes API access for dependency discovery.

KubernetesServiceReader implements ServiceReader on top of
kubernetes-asyncio's CoreV1Api. Every failure of the list call surfaces as
ClusterQueryError chained to the underlying exception; no retries happen
here, the caller owns backoff.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import aiohttp
from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio import config as k8s_config  # type: ignore[import-untyped]
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kubedeps.errors import ClusterQueryError
from kubedeps.interpreter.services import parse_service_type
from kubedeps.models.references import ServiceDescriptor
from kubedeps.observability.logging import get_logger

if TYPE_CHECKING:
    from kubedeps.models.config import ClusterConfig

_logger = get_logger("cluster")


def service_from_v1(service: Any) -> ServiceDescriptor:
    """Map a ``V1Service`` to a ServiceDescriptor, keeping a nil selector nil."""
    spec = service.spec
    selector = spec.selector if spec is not None else None
    return ServiceDescriptor(
        name=service.metadata.name,
        namespace=service.metadata.namespace or "",
        type=parse_service_type(spec.type if spec is not None else None),
        selector=None if selector is None else dict(selector),
    )


class KubernetesServiceReader:
    """Lists Services through ``CoreV1Api.list_namespaced_service``.

    Args:
        core_v1:         A kubernetes-asyncio CoreV1Api.
        request_timeout: Per-request timeout in seconds; None leaves the
                         client default in place.
    """

    def __init__(self, core_v1: Any, request_timeout: float | None = None) -> None:
        self._core_v1 = core_v1
        self._request_timeout = request_timeout

    async def list_services(self, namespace: str) -> list[ServiceDescriptor]:
        kwargs: dict[str, Any] = {"namespace": namespace}
        if self._request_timeout is not None:
            kwargs["_request_timeout"] = self._request_timeout
        try:
            service_list = await self._core_v1.list_namespaced_service(**kwargs)
        except ApiException as exc:
            raise ClusterQueryError(namespace, f"API error {exc.status}: {exc.reason}") from exc
        except aiohttp.ClientError as exc:
            raise ClusterQueryError(namespace, f"connection error: {exc}") from exc
        except TimeoutError as exc:
            raise ClusterQueryError(namespace, "request timed out") from exc
        return [service_from_v1(svc) for svc in service_list.items]


async def load_cluster_config(config: ClusterConfig) -> None:
    """Configure kubernetes-asyncio from in-cluster config or kubeconfig.

    In-cluster config is tried first unless a kubeconfig path or context is
    set explicitly; ``in_cluster=True`` makes the service account mandatory.
    """
    explicit_kubeconfig = bool(config.kubeconfig or config.context)
    if config.in_cluster or not explicit_kubeconfig:
        try:
            # load_incluster_config() is synchronous in kubernetes-asyncio
            k8s_config.load_incluster_config()
            _logger.info("k8s_client_configured", source="in_cluster")
            return
        except k8s_config.ConfigException:
            if config.in_cluster:
                raise
    await k8s_config.load_kube_config(
        config_file=config.kubeconfig or None,
        context=config.context or None,
    )
    _logger.info("k8s_client_configured", source="kubeconfig", context=config.context or "<current>")


def new_api_client() -> Any:
    """Return a fresh ApiClient bound to the loaded configuration."""
    return k8s_client.ApiClient()


def core_v1_api(api_client: Any) -> Any:
    return k8s_client.CoreV1Api(api_client)
