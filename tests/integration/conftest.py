"""Shared fixtures for kubedeps integration tests.

Provides manifest factories for every supported workload kind and a
namespace of Services, so integration tests can exercise full discovery
without touching a real Kubernetes cluster.
"""

from __future__ import annotations

from typing import Any

import pytest

from kubedeps.interpreter import DependencyInterpreter, StaticServiceReader
from kubedeps.models.references import DependentObjectReference, ServiceDescriptor, ServiceType

# ---------------------------------------------------------------------------
# Manifest factory helpers
# ---------------------------------------------------------------------------

_API_VERSIONS = {
    "Deployment": "apps/v1",
    "DaemonSet": "apps/v1",
    "StatefulSet": "apps/v1",
    "Job": "batch/v1",
    "Pod": "v1",
}


def make_pod_spec() -> dict[str, Any]:
    """A pod spec referencing ConfigMaps and Secrets through every common site."""
    return {
        "initContainers": [
            {
                "name": "migrate",
                "image": "my-app:v2",
                "envFrom": [{"secretRef": {"name": "db-credentials"}}],
            }
        ],
        "containers": [
            {
                "name": "my-app",
                "image": "my-app:v2",
                "envFrom": [{"configMapRef": {"name": "app-settings"}}],
                "env": [
                    {"name": "LOG_LEVEL", "valueFrom": {"configMapKeyRef": {"name": "app-settings", "key": "level"}}},
                    {"name": "API_TOKEN", "valueFrom": {"secretKeyRef": {"name": "api-token", "key": "token"}}},
                    {"name": "PLAIN", "value": "literal"},
                ],
                "volumeMounts": [{"name": "config", "mountPath": "/etc/app"}],
            }
        ],
        "volumes": [
            {"name": "config", "configMap": {"name": "app-settings"}},
            {"name": "tls", "secret": {"secretName": "app-tls"}},
            {
                "name": "bundle",
                "projected": {
                    "sources": [
                        {"configMap": {"name": "ca-bundle"}},
                        {"secret": {"name": "signing-key"}},
                    ]
                },
            },
            {"name": "scratch", "emptyDir": {}},
        ],
        "imagePullSecrets": [{"name": "registry-creds"}],
    }


def make_workload(
    kind: str = "Deployment",
    name: str = "my-app",
    namespace: str | None = "default",
    labels: dict[str, str] | None = None,
    pod_spec: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create a workload manifest of *kind* wrapping *pod_spec*."""
    pod_labels = labels if labels is not None else {"app": "web", "tier": "frontend"}
    spec = pod_spec if pod_spec is not None else make_pod_spec()
    metadata: dict[str, Any] = {"name": name}
    if namespace is not None:
        metadata["namespace"] = namespace

    if kind == "Pod":
        return {
            "apiVersion": "v1",
            "kind": "Pod",
            "metadata": {**metadata, "labels": pod_labels},
            "spec": spec,
        }
    return {
        "apiVersion": _API_VERSIONS[kind],
        "kind": kind,
        "metadata": {**metadata, "labels": {"owner": "platform"}},
        "spec": {
            "template": {
                "metadata": {"labels": pod_labels},
                "spec": spec,
            }
        },
    }


def make_service(
    name: str,
    selector: dict[str, str] | None,
    type: ServiceType = ServiceType.CLUSTER_IP,
    namespace: str = "default",
) -> ServiceDescriptor:
    return ServiceDescriptor(name=name, namespace=namespace, type=type, selector=selector)


def as_set(refs: list[DependentObjectReference]) -> set[tuple[str, str, str]]:
    """Compare results as sets: within-group order is not part of the contract."""
    return {(ref.kind, ref.namespace, ref.name) for ref in refs}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def services() -> list[ServiceDescriptor]:
    """A namespace of Services covering every selector edge case."""
    return [
        make_service("svc-a", {"app": "web"}),
        make_service("svc-b", {"app": "web", "tier": "backend"}),
        make_service("svc-nil", None),
        make_service("svc-lb", {"app": "web"}, type=ServiceType.LOAD_BALANCER),
        make_service("svc-np", {"tier": "frontend"}, type=ServiceType.NODE_PORT),
        make_service("svc-other-ns", {"app": "web"}, namespace="staging"),
    ]


@pytest.fixture
def interpreter(services: list[ServiceDescriptor]) -> DependencyInterpreter:
    return DependencyInterpreter(StaticServiceReader(services))
