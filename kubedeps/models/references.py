"""Dependency reference and Service data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class DependencyKind(StrEnum):
    """Kinds of auxiliary objects a workload can depend on."""

    CONFIG_MAP = "ConfigMap"
    SECRET = "Secret"
    SERVICE = "Service"


class ServiceType(StrEnum):
    """Kubernetes Service exposure type."""

    CLUSTER_IP = "ClusterIP"
    NODE_PORT = "NodePort"
    LOAD_BALANCER = "LoadBalancer"
    EXTERNAL_NAME = "ExternalName"


@dataclass(frozen=True)
class ServiceDescriptor:
    """Read-only view of a Service as seen by the selector matcher.

    ``selector`` is None when the Service declares no selector at all, which
    matches no pods. An empty dict is a present-but-empty selector.
    """

    name: str
    namespace: str
    type: ServiceType = ServiceType.CLUSTER_IP
    selector: dict[str, str] | None = None


@dataclass(frozen=True)
class DependentObjectReference:
    """Pointer to an auxiliary object a workload relies on at runtime."""

    api_version: str
    kind: str
    namespace: str
    name: str

    def to_dict(self) -> dict[str, str]:
        """Render the wire shape consumed by propagation logic."""
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "namespace": self.namespace,
            "name": self.name,
        }


@dataclass
class DiscoveryOutcome:
    """Per-object result of batch discovery.

    Exactly one of ``dependencies`` (possibly empty) or ``error`` is
    meaningful: on failure ``dependencies`` stays empty.
    """

    kind: str
    namespace: str
    name: str
    dependencies: list[DependentObjectReference] = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "kind": self.kind,
            "namespace": self.namespace,
            "name": self.name,
            "dependencies": [ref.to_dict() for ref in self.dependencies],
        }
        if self.error is not None:
            payload["error"] = {"type": type(self.error).__name__, "detail": str(self.error)}
        return payload
