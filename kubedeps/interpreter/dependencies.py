"""Aggregation of scanned names into dependent object references."""

from __future__ import annotations

from collections.abc import Iterable

from kubedeps.interpreter.references import scan_references
from kubedeps.interpreter.services import ServiceReader, dependent_service_names
from kubedeps.models.references import DependencyKind, DependentObjectReference
from kubedeps.models.workloads import PodTemplate

_CORE_API_VERSION = "v1"


def _references(kind: DependencyKind, namespace: str, names: Iterable[str]) -> list[DependentObjectReference]:
    # Sorted for reproducible output; consumers must not rely on the order.
    return [
        DependentObjectReference(api_version=_CORE_API_VERSION, kind=kind.value, namespace=namespace, name=name)
        for name in sorted(names)
    ]


def build_references(
    namespace: str,
    config_maps: Iterable[str],
    secrets: Iterable[str],
    services: Iterable[str],
) -> list[DependentObjectReference]:
    """Group names into references: ConfigMaps, then Secrets, then Services."""
    return (
        _references(DependencyKind.CONFIG_MAP, namespace, set(config_maps))
        + _references(DependencyKind.SECRET, namespace, set(secrets))
        + _references(DependencyKind.SERVICE, namespace, set(services))
    )


async def dependencies_from_pod_template(
    reader: ServiceReader,
    template: PodTemplate,
) -> list[DependentObjectReference]:
    """Scan *template* and match Services in its namespace."""
    config_maps, secrets = scan_references(template)
    services = await dependent_service_names(reader, template.namespace, template.labels)
    return build_references(template.namespace, config_maps, secrets, services)
