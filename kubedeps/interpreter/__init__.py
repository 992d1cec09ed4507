"""Dependency interpreter for workload objects.

Exposes:
    build_registry        -- immutable WorkloadKind -> extractor table.
    DependencyInterpreter -- dispatcher used by callers and the CLI.
    ServiceReader         -- protocol for namespace-scoped Service reads.
    StaticServiceReader   -- in-memory ServiceReader.

Submodules:
    convert       -- generic mapping -> typed workload dataclasses.
    templates     -- typed workload -> canonical PodTemplate.
    references    -- ConfigMap/Secret reference scanner.
    services      -- Service selector matcher.
    dependencies  -- aggregation into DependentObjectReference lists.
    registry      -- per-kind extractors and the dispatcher.
"""

from kubedeps.interpreter.registry import DependencyInterpreter, Extractor, build_registry
from kubedeps.interpreter.services import ServiceReader, StaticServiceReader

__all__ = [
    "DependencyInterpreter",
    "Extractor",
    "ServiceReader",
    "StaticServiceReader",
    "build_registry",
]
