"""Core data structures for kubedeps."""

from kubedeps.models.config import KubeDepsConfig
from kubedeps.models.references import (
    DependencyKind,
    DependentObjectReference,
    DiscoveryOutcome,
    ServiceDescriptor,
    ServiceType,
)
from kubedeps.models.workloads import (
    DAEMON_SET,
    DEPLOYMENT,
    JOB,
    POD,
    STATEFUL_SET,
    PodTemplate,
    WorkloadKind,
)

__all__ = [
    "DAEMON_SET",
    "DEPLOYMENT",
    "DependencyKind",
    "DependentObjectReference",
    "DiscoveryOutcome",
    "JOB",
    "KubeDepsConfig",
    "POD",
    "PodTemplate",
    "STATEFUL_SET",
    "ServiceDescriptor",
    "ServiceType",
    "WorkloadKind",
]
