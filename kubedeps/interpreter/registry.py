"""Kind-polymorphic dependency dispatch.

``build_registry()`` returns the immutable WorkloadKind -> extractor table.
Each extractor converts the generic object to its typed form, resolves the
pod template and aggregates ConfigMap, Secret and Service references.

``DependencyInterpreter`` is the entry point callers use: it resolves an
object's kind, dispatches, logs and records metrics. It holds no mutable
state, so one instance may serve any number of concurrent discoveries.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from kubedeps.errors import (
    ClusterQueryError,
    DependencyError,
    MalformedWorkloadError,
    UnsupportedKindError,
)
from kubedeps.interpreter.convert import (
    convert_to_daemon_set,
    convert_to_deployment,
    convert_to_job,
    convert_to_pod,
    convert_to_stateful_set,
)
from kubedeps.interpreter.dependencies import dependencies_from_pod_template
from kubedeps.interpreter.services import ServiceReader
from kubedeps.interpreter.templates import extract_pod_template
from kubedeps.models.references import DependentObjectReference, DiscoveryOutcome
from kubedeps.models.workloads import DAEMON_SET, DEPLOYMENT, JOB, POD, STATEFUL_SET, WorkloadKind
from kubedeps.observability.logging import get_logger
from kubedeps.observability.metrics import dependencies_found_total, discoveries_total

_logger = get_logger("interpreter.registry")

Extractor = Callable[[ServiceReader, Mapping[str, Any]], Awaitable[list[DependentObjectReference]]]


# ---------------------------------------------------------------------------
# Per-kind extractors
# ---------------------------------------------------------------------------


async def get_deployment_dependencies(
    reader: ServiceReader, obj: Mapping[str, Any]
) -> list[DependentObjectReference]:
    deployment = convert_to_deployment(obj)
    return await dependencies_from_pod_template(reader, extract_pod_template(deployment))


async def get_daemon_set_dependencies(
    reader: ServiceReader, obj: Mapping[str, Any]
) -> list[DependentObjectReference]:
    daemon_set = convert_to_daemon_set(obj)
    return await dependencies_from_pod_template(reader, extract_pod_template(daemon_set))


async def get_stateful_set_dependencies(
    reader: ServiceReader, obj: Mapping[str, Any]
) -> list[DependentObjectReference]:
    stateful_set = convert_to_stateful_set(obj)
    return await dependencies_from_pod_template(reader, extract_pod_template(stateful_set))


async def get_job_dependencies(reader: ServiceReader, obj: Mapping[str, Any]) -> list[DependentObjectReference]:
    job = convert_to_job(obj)
    return await dependencies_from_pod_template(reader, extract_pod_template(job))


async def get_pod_dependencies(reader: ServiceReader, obj: Mapping[str, Any]) -> list[DependentObjectReference]:
    pod = convert_to_pod(obj)
    return await dependencies_from_pod_template(reader, extract_pod_template(pod))


def build_registry() -> Mapping[WorkloadKind, Extractor]:
    """Return the read-only table of supported kinds and their extractors."""
    return MappingProxyType(
        {
            DEPLOYMENT: get_deployment_dependencies,
            JOB: get_job_dependencies,
            POD: get_pod_dependencies,
            DAEMON_SET: get_daemon_set_dependencies,
            STATEFUL_SET: get_stateful_set_dependencies,
        }
    )


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


def kind_of(obj: object) -> WorkloadKind:
    """Read the WorkloadKind from an object's ``apiVersion`` and ``kind``.

    Raises:
        MalformedWorkloadError: if either field is missing or not a string.
    """
    if not isinstance(obj, Mapping):
        raise MalformedWorkloadError("<unknown>", f"expected an object, got {type(obj).__name__}")
    api_version = obj.get("apiVersion")
    kind = obj.get("kind")
    if not isinstance(api_version, str) or not api_version or not isinstance(kind, str) or not kind:
        raise MalformedWorkloadError(str(kind or "<unknown>"), "apiVersion and kind are required")
    return WorkloadKind.from_api_version(api_version, kind)


def _identity(obj: object) -> tuple[str, str, str]:
    """Best-effort (kind, namespace, name) for reporting, never raises."""
    if not isinstance(obj, Mapping):
        return "", "", ""
    metadata = obj.get("metadata")
    if not isinstance(metadata, Mapping):
        metadata = {}
    return (
        str(obj.get("kind") or ""),
        str(metadata.get("namespace") or "default"),
        str(metadata.get("name") or ""),
    )


class DependencyInterpreter:
    """Discovers the dependencies of workload objects.

    Args:
        reader:   ServiceReader used for the Service list of each discovery.
        registry: Kind -> extractor table; defaults to ``build_registry()``.
    """

    def __init__(self, reader: ServiceReader, registry: Mapping[WorkloadKind, Extractor] | None = None) -> None:
        self._reader = reader
        self._registry = registry if registry is not None else build_registry()

    def supports(self, kind: WorkloadKind) -> bool:
        return kind in self._registry

    def supported_kinds(self) -> list[WorkloadKind]:
        return list(self._registry)

    async def get_dependencies(self, obj: Mapping[str, Any]) -> list[DependentObjectReference]:
        """Return the ConfigMap, Secret and Service references of *obj*.

        Raises:
            UnsupportedKindError:   no extractor is registered for the kind.
            MalformedWorkloadError: the object does not convert.
            ClusterQueryError:      the Service list read failed.
        """
        kind_name, namespace, name = _identity(obj)
        try:
            kind = kind_of(obj)
        except MalformedWorkloadError as exc:
            discoveries_total.labels(kind=kind_name, outcome="malformed").inc()
            _logger.warning("malformed_workload", kind=kind_name, namespace=namespace, name=name, error=str(exc))
            raise

        extractor = self._registry.get(kind)
        if extractor is None:
            discoveries_total.labels(kind=kind.kind, outcome="unsupported").inc()
            _logger.debug("unsupported_kind", kind=str(kind), namespace=namespace, name=name)
            raise UnsupportedKindError(kind)

        try:
            refs = await extractor(self._reader, obj)
        except MalformedWorkloadError as exc:
            discoveries_total.labels(kind=kind.kind, outcome="malformed").inc()
            _logger.warning("malformed_workload", kind=kind.kind, namespace=namespace, name=name, error=exc.reason)
            raise
        except ClusterQueryError as exc:
            discoveries_total.labels(kind=kind.kind, outcome="cluster_error").inc()
            _logger.warning(
                "dependency_discovery_failed",
                kind=kind.kind,
                namespace=namespace,
                name=name,
                error=str(exc),
            )
            raise

        discoveries_total.labels(kind=kind.kind, outcome="success").inc()
        for ref in refs:
            dependencies_found_total.labels(kind=ref.kind).inc()
        _logger.info(
            "dependencies_discovered",
            kind=kind.kind,
            namespace=namespace,
            name=name,
            dependencies=len(refs),
        )
        return refs

    async def discover_all(self, objects: Iterable[Mapping[str, Any]]) -> list[DiscoveryOutcome]:
        """Discover each object independently; one failure never stops the rest."""
        outcomes: list[DiscoveryOutcome] = []
        for obj in objects:
            kind_name, namespace, name = _identity(obj)
            outcome = DiscoveryOutcome(kind=kind_name, namespace=namespace, name=name)
            try:
                outcome.dependencies = await self.get_dependencies(obj)
            except DependencyError as exc:
                outcome.error = exc
            outcomes.append(outcome)
        return outcomes
