"""Service selector matching.

Decides which Services in a namespace target a workload's pods, following
cluster label-selection semantics with two exclusions:

1. LoadBalancer Services are external endpoints, never structural
   dependencies.
2. A Service with no selector (``None``) matches no pods. It does not mean
   "match everything". An empty-but-present selector (``{}``) matches every
   pod, as an empty label set selector does in the cluster.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from kubedeps.errors import ClusterQueryError, MalformedWorkloadError
from kubedeps.models.references import ServiceDescriptor, ServiceType
from kubedeps.observability.logging import get_logger
from kubedeps.observability.metrics import service_list_duration_seconds

_logger = get_logger("interpreter.services")


class ServiceReader(Protocol):
    """Namespace-scoped read access to Services.

    Implementations raise ClusterQueryError when the read fails; they never
    return a partial or empty list in place of an error.
    """

    async def list_services(self, namespace: str) -> list[ServiceDescriptor]: ...


class StaticServiceReader:
    """ServiceReader over a fixed set of Services held in memory."""

    def __init__(self, services: Iterable[ServiceDescriptor] = ()) -> None:
        self._services = tuple(services)

    async def list_services(self, namespace: str) -> list[ServiceDescriptor]:
        return [svc for svc in self._services if svc.namespace == namespace]


def parse_service_type(value: str | None) -> ServiceType:
    """Map a raw ``spec.type`` to ServiceType; missing means ClusterIP."""
    if not value:
        return ServiceType.CLUSTER_IP
    try:
        return ServiceType(value)
    except ValueError:
        _logger.debug("unknown_service_type", service_type=value)
        return ServiceType.CLUSTER_IP


def _manifest_mapping(obj: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = obj.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise MalformedWorkloadError("Service", f"{key}: expected an object, got {type(value).__name__}")
    return value


def service_from_manifest(obj: Mapping[str, Any]) -> ServiceDescriptor:
    """Build a ServiceDescriptor from a decoded Service manifest.

    Raises:
        MalformedWorkloadError: metadata, spec or spec.selector has the wrong
            shape, or the Service has no name.
    """
    metadata = _manifest_mapping(obj, "metadata")
    spec = _manifest_mapping(obj, "spec")
    name = metadata.get("name")
    if not isinstance(name, str) or not name:
        raise MalformedWorkloadError("Service", "metadata.name: expected a non-empty string")
    namespace = metadata.get("namespace")
    if namespace is not None and not isinstance(namespace, str):
        raise MalformedWorkloadError(
            "Service", f"metadata.namespace: expected a string, got {type(namespace).__name__}"
        )
    service_type = spec.get("type")
    if service_type is not None and not isinstance(service_type, str):
        raise MalformedWorkloadError("Service", f"spec.type: expected a string, got {type(service_type).__name__}")
    selector = spec.get("selector")
    if selector is not None and not isinstance(selector, Mapping):
        raise MalformedWorkloadError("Service", f"spec.selector: expected an object, got {type(selector).__name__}")
    return ServiceDescriptor(
        name=name,
        namespace=namespace or "default",
        type=parse_service_type(service_type),
        selector=None if selector is None else {str(k): str(v) for k, v in selector.items()},
    )


def selector_matches(selector: Mapping[str, str], labels: Mapping[str, str]) -> bool:
    """Return True if every selector pair is present with an equal value."""
    return all(key in labels and labels[key] == value for key, value in selector.items())


def match_services(pod_labels: Mapping[str, str], services: Iterable[ServiceDescriptor]) -> set[str]:
    """Return the names of *services* whose selector targets *pod_labels*."""
    matched: set[str] = set()
    for service in services:
        if service.type == ServiceType.LOAD_BALANCER:
            continue
        if service.selector is None:
            continue
        if selector_matches(service.selector, pod_labels):
            matched.add(service.name)
    return matched


async def dependent_service_names(
    reader: ServiceReader,
    namespace: str,
    pod_labels: Mapping[str, str],
) -> set[str]:
    """List Services in *namespace* and return those selecting *pod_labels*.

    Raises:
        ClusterQueryError: propagated from the reader.
    """
    t_start = time.monotonic()
    try:
        services = await reader.list_services(namespace)
    except ClusterQueryError as exc:
        _logger.warning("service_list_failed", namespace=namespace, error=str(exc))
        raise
    finally:
        service_list_duration_seconds.observe(time.monotonic() - t_start)

    matched = match_services(pod_labels, services)
    _logger.debug(
        "services_matched",
        namespace=namespace,
        services_listed=len(services),
        services_matched=len(matched),
    )
    return matched
