"""Click command-line interface for kubedeps.

Commands:
    discover -- report the dependencies of workloads read from manifests.
    kinds    -- list the workload kinds dependency discovery supports.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable, Mapping
from typing import Any

import click
import yaml
from kubernetes_asyncio.config import ConfigException  # type: ignore[import-untyped]

from kubedeps import __version__
from kubedeps.cluster import KubernetesServiceReader, core_v1_api, load_cluster_config, new_api_client
from kubedeps.config import load_config
from kubedeps.errors import ClusterQueryError, MalformedWorkloadError
from kubedeps.interpreter import DependencyInterpreter, Extractor, ServiceReader, StaticServiceReader, build_registry
from kubedeps.interpreter.registry import kind_of
from kubedeps.interpreter.services import service_from_manifest
from kubedeps.models.config import KubeDepsConfig
from kubedeps.models.references import DiscoveryOutcome, ServiceDescriptor
from kubedeps.models.workloads import WorkloadKind
from kubedeps.observability.logging import get_logger, setup_logging

# Outcomes with these errors make `discover` exit non-zero.
_FAILING_ERRORS = (MalformedWorkloadError, ClusterQueryError)


def load_manifests(streams: Iterable[Any]) -> list[Any]:
    """Decode every YAML/JSON document in *streams*, flattening ``List`` kinds."""
    docs: list[Any] = []
    for stream in streams:
        for doc in yaml.safe_load_all(stream):
            if doc is None:
                continue
            if isinstance(doc, Mapping) and doc.get("kind") == "List" and isinstance(doc.get("items"), list):
                docs.extend(doc["items"])
            else:
                docs.append(doc)
    return docs


def _with_default_namespace(doc: Any, namespace: str) -> Any:
    if not isinstance(doc, Mapping):
        return doc
    metadata = doc.get("metadata")
    if not isinstance(metadata, Mapping) or metadata.get("namespace"):
        return doc
    return {**doc, "metadata": {**metadata, "namespace": namespace}}


def split_manifests(
    docs: Iterable[Any],
    registry: Mapping[WorkloadKind, Extractor],
) -> tuple[list[Any], list[Mapping[str, Any]]]:
    """Split *docs* into (workloads to discover, Service manifests).

    Documents of a kind with no extractor are dropped: discovery does not
    apply to them. Documents whose kind cannot even be read are kept so the
    failure is reported.
    """
    log = get_logger("cli")
    workloads: list[Any] = []
    services: list[Mapping[str, Any]] = []
    for doc in docs:
        if isinstance(doc, Mapping) and doc.get("kind") == "Service" and doc.get("apiVersion") == "v1":
            services.append(doc)
            continue
        try:
            kind = kind_of(doc)
        except MalformedWorkloadError:
            workloads.append(doc)
            continue
        if kind in registry:
            workloads.append(doc)
        else:
            log.debug("skipped_unsupported_kind", kind=str(kind))
    return workloads, services


def offline_services(service_docs: Iterable[Mapping[str, Any]]) -> list[ServiceDescriptor]:
    """Decode Service manifests, skipping any that are malformed."""
    log = get_logger("cli")
    services: list[ServiceDescriptor] = []
    for doc in service_docs:
        try:
            services.append(service_from_manifest(doc))
        except MalformedWorkloadError as exc:
            log.warning("skipped_malformed_service", error=exc.reason)
    return services


async def _discover(
    config: KubeDepsConfig,
    workloads: list[Any],
    reader: ServiceReader | None,
) -> list[DiscoveryOutcome]:
    if reader is not None:
        return await DependencyInterpreter(reader).discover_all(workloads)

    try:
        await load_cluster_config(config.cluster)
    except ConfigException as exc:
        raise click.ClickException(f"cannot configure cluster access: {exc}") from exc
    async with new_api_client() as api_client:
        cluster_reader = KubernetesServiceReader(
            core_v1_api(api_client),
            request_timeout=config.cluster.request_timeout_seconds,
        )
        return await DependencyInterpreter(cluster_reader).discover_all(workloads)


@click.group()
@click.version_option(__version__, prog_name="kubedeps")
@click.option(
    "--log-format",
    type=click.Choice(["json", "console"]),
    default="json",
    show_default=True,
    help="Log renderer for stderr.",
)
@click.pass_context
def cli(ctx: click.Context, log_format: str) -> None:
    """Discover the ConfigMaps, Secrets and Services workloads depend on."""
    try:
        config = load_config()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(config.log.level, json_output=log_format == "json")
    ctx.obj = config


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.File("r"))
@click.option("-n", "--namespace", default="default", show_default=True, help="Namespace for objects without one.")
@click.option(
    "--offline",
    is_flag=True,
    help="Match Services from the given manifests instead of the cluster.",
)
@click.pass_obj
def discover(config: KubeDepsConfig, files: tuple[Any, ...], namespace: str, offline: bool) -> None:
    """Print the dependencies of every workload in FILES as JSON.

    FILES are YAML or JSON manifests; ``-`` reads stdin.
    """
    try:
        docs = [_with_default_namespace(doc, namespace) for doc in load_manifests(files)]
    except yaml.YAMLError as exc:
        raise click.ClickException(f"invalid manifest: {exc}") from exc

    workloads, service_docs = split_manifests(docs, build_registry())
    reader: ServiceReader | None = None
    if offline:
        reader = StaticServiceReader(offline_services(service_docs))

    outcomes = asyncio.run(_discover(config, workloads, reader))
    click.echo(json.dumps([outcome.to_dict() for outcome in outcomes], indent=2))

    if any(isinstance(outcome.error, _FAILING_ERRORS) for outcome in outcomes):
        raise SystemExit(1)


@cli.command()
def kinds() -> None:
    """List the workload kinds dependency discovery supports."""
    for kind in build_registry():
        click.echo(f"{kind.api_version}\t{kind.kind}")
