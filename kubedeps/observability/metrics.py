"""Prometheus metrics for dependency discovery.

All collectors live in the default registry so an embedding process can
expose them with its own ``prometheus_client`` HTTP handler.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

discoveries_total = Counter(
    "kubedeps_discoveries_total",
    "Dependency discovery invocations by workload kind and outcome.",
    ["kind", "outcome"],
)

dependencies_found_total = Counter(
    "kubedeps_dependencies_found_total",
    "Dependent object references reported, by dependency kind.",
    ["kind"],
)

service_list_duration_seconds = Histogram(
    "kubedeps_service_list_duration_seconds",
    "Latency of the namespace-scoped Service list read.",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
