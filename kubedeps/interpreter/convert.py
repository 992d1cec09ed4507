"""Conversion from generic (unstructured) objects to typed workloads.

Only the fields dependency discovery reads are decoded. A field that is
present with the wrong shape, or a missing required field, raises
MalformedWorkloadError; missing optional fields decode to empty values.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from kubedeps.errors import MalformedWorkloadError
from kubedeps.models.workloads import (
    DAEMON_SET,
    DEPLOYMENT,
    JOB,
    POD,
    STATEFUL_SET,
    Container,
    DaemonSet,
    Deployment,
    EnvFromSource,
    EnvVar,
    Job,
    KeySelector,
    ObjectMeta,
    Pod,
    PodSpec,
    PodTemplateSpec,
    StatefulSet,
    Volume,
    VolumeProjection,
    Workload,
    WorkloadKind,
)

# Storage plugins whose credentials live in a Secret: volume key -> field
# holding the reference. azureFile names the Secret directly, the others
# hold a LocalObjectReference.
_PLUGIN_SECRET_FIELDS: dict[str, str] = {
    "azureFile": "secretName",
    "cephfs": "secretRef",
    "cinder": "secretRef",
    "csi": "nodePublishSecretRef",
    "flexVolume": "secretRef",
    "iscsi": "secretRef",
    "rbd": "secretRef",
    "scaleIO": "secretRef",
    "storageos": "secretRef",
}


class _Decoder:
    """Shape-checking accessors that report the failing field path."""

    def __init__(self, kind: str) -> None:
        self.kind = kind

    def fail(self, path: str, problem: str) -> MalformedWorkloadError:
        return MalformedWorkloadError(self.kind, f"{path}: {problem}")

    def mapping(self, parent: Mapping[str, Any], key: str, path: str, required: bool = False) -> Mapping[str, Any]:
        value = parent.get(key)
        if value is None:
            if required:
                raise self.fail(path, "required field is missing")
            return {}
        if not isinstance(value, Mapping):
            raise self.fail(path, f"expected an object, got {type(value).__name__}")
        return value

    def items(self, parent: Mapping[str, Any], key: str, path: str) -> list[Mapping[str, Any]]:
        value = parent.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise self.fail(path, f"expected a list, got {type(value).__name__}")
        for index, item in enumerate(value):
            if not isinstance(item, Mapping):
                raise self.fail(f"{path}[{index}]", f"expected an object, got {type(item).__name__}")
        return value

    def string(self, parent: Mapping[str, Any], key: str, path: str) -> str:
        value = parent.get(key)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise self.fail(path, f"expected a string, got {type(value).__name__}")
        return value

    def boolean(self, parent: Mapping[str, Any], key: str, path: str) -> bool:
        value = parent.get(key)
        if value is None:
            return False
        if not isinstance(value, bool):
            raise self.fail(path, f"expected a boolean, got {type(value).__name__}")
        return value

    def labels(self, parent: Mapping[str, Any], path: str) -> dict[str, str]:
        raw = self.mapping(parent, "labels", path)
        labels: dict[str, str] = {}
        for key, value in raw.items():
            if not isinstance(value, str):
                raise self.fail(f"{path}[{key}]", f"label value must be a string, got {type(value).__name__}")
            labels[str(key)] = value
        return labels

    def ref_name(self, parent: Mapping[str, Any], key: str, path: str) -> str | None:
        """Decode a LocalObjectReference-style ``{name: ...}`` field."""
        if parent.get(key) is None:
            return None
        ref = self.mapping(parent, key, path)
        return self.string(ref, "name", f"{path}.name")

    def key_selector(self, parent: Mapping[str, Any], key: str, path: str) -> KeySelector | None:
        if parent.get(key) is None:
            return None
        ref = self.mapping(parent, key, path)
        return KeySelector(
            name=self.string(ref, "name", f"{path}.name"),
            key=self.string(ref, "key", f"{path}.key"),
            optional=self.boolean(ref, "optional", f"{path}.optional"),
        )


def _decode_metadata(d: _Decoder, obj: Mapping[str, Any]) -> ObjectMeta:
    meta = d.mapping(obj, "metadata", "metadata", required=True)
    name = d.string(meta, "name", "metadata.name")
    if not name:
        raise d.fail("metadata.name", "required field is missing")
    return ObjectMeta(
        name=name,
        namespace=d.string(meta, "namespace", "metadata.namespace") or "default",
        labels=d.labels(meta, "metadata.labels"),
    )


def _decode_container(d: _Decoder, raw: Mapping[str, Any], path: str) -> Container:
    env: list[EnvVar] = []
    for i, item in enumerate(d.items(raw, "env", f"{path}.env")):
        item_path = f"{path}.env[{i}]"
        value_from = d.mapping(item, "valueFrom", f"{item_path}.valueFrom")
        env.append(
            EnvVar(
                name=d.string(item, "name", f"{item_path}.name"),
                config_map_key_ref=d.key_selector(
                    value_from, "configMapKeyRef", f"{item_path}.valueFrom.configMapKeyRef"
                ),
                secret_key_ref=d.key_selector(value_from, "secretKeyRef", f"{item_path}.valueFrom.secretKeyRef"),
            )
        )

    env_from: list[EnvFromSource] = []
    for i, item in enumerate(d.items(raw, "envFrom", f"{path}.envFrom")):
        item_path = f"{path}.envFrom[{i}]"
        env_from.append(
            EnvFromSource(
                config_map_ref=d.ref_name(item, "configMapRef", f"{item_path}.configMapRef"),
                secret_ref=d.ref_name(item, "secretRef", f"{item_path}.secretRef"),
                prefix=d.string(item, "prefix", f"{item_path}.prefix"),
            )
        )

    mounts = tuple(
        d.string(m, "name", f"{path}.volumeMounts[{i}].name")
        for i, m in enumerate(d.items(raw, "volumeMounts", f"{path}.volumeMounts"))
    )
    return Container(
        name=d.string(raw, "name", f"{path}.name"),
        env=tuple(env),
        env_from=tuple(env_from),
        volume_mounts=mounts,
    )


def _decode_volume(d: _Decoder, raw: Mapping[str, Any], path: str) -> Volume:
    config_map = d.ref_name(raw, "configMap", f"{path}.configMap")

    secret: str | None = None
    if raw.get("secret") is not None:
        secret_src = d.mapping(raw, "secret", f"{path}.secret")
        secret = d.string(secret_src, "secretName", f"{path}.secret.secretName")

    projections: list[VolumeProjection] = []
    projected = d.mapping(raw, "projected", f"{path}.projected")
    for i, source in enumerate(d.items(projected, "sources", f"{path}.projected.sources")):
        source_path = f"{path}.projected.sources[{i}]"
        projections.append(
            VolumeProjection(
                config_map=d.ref_name(source, "configMap", f"{source_path}.configMap"),
                secret=d.ref_name(source, "secret", f"{source_path}.secret"),
            )
        )

    plugin_secrets: list[str] = []
    for plugin, ref_field in _PLUGIN_SECRET_FIELDS.items():
        if raw.get(plugin) is None:
            continue
        plugin_src = d.mapping(raw, plugin, f"{path}.{plugin}")
        ref_path = f"{path}.{plugin}.{ref_field}"
        if plugin == "azureFile":
            name = d.string(plugin_src, ref_field, ref_path)
        else:
            name = d.ref_name(plugin_src, ref_field, ref_path)
        if name:
            plugin_secrets.append(name)

    return Volume(
        name=d.string(raw, "name", f"{path}.name"),
        config_map=config_map,
        secret=secret,
        projected=tuple(projections),
        plugin_secrets=tuple(plugin_secrets),
    )


def _decode_pod_spec(d: _Decoder, spec: Mapping[str, Any], path: str) -> PodSpec:
    def containers(key: str) -> tuple[Container, ...]:
        return tuple(
            _decode_container(d, c, f"{path}.{key}[{i}]") for i, c in enumerate(d.items(spec, key, f"{path}.{key}"))
        )

    pull_secrets = tuple(
        d.string(ref, "name", f"{path}.imagePullSecrets[{i}].name")
        for i, ref in enumerate(d.items(spec, "imagePullSecrets", f"{path}.imagePullSecrets"))
    )
    return PodSpec(
        containers=containers("containers"),
        init_containers=containers("initContainers"),
        ephemeral_containers=containers("ephemeralContainers"),
        volumes=tuple(
            _decode_volume(d, v, f"{path}.volumes[{i}]")
            for i, v in enumerate(d.items(spec, "volumes", f"{path}.volumes"))
        ),
        image_pull_secrets=pull_secrets,
    )


def _decode_template(d: _Decoder, obj: Mapping[str, Any]) -> PodTemplateSpec:
    spec = d.mapping(obj, "spec", "spec", required=True)
    template = d.mapping(spec, "template", "spec.template", required=True)
    template_meta = d.mapping(template, "metadata", "spec.template.metadata")
    return PodTemplateSpec(
        labels=d.labels(template_meta, "spec.template.metadata.labels"),
        spec=_decode_pod_spec(d, d.mapping(template, "spec", "spec.template.spec"), "spec.template.spec"),
    )


def _start(kind: WorkloadKind, obj: object) -> tuple[_Decoder, Mapping[str, Any]]:
    d = _Decoder(kind.kind)
    if not isinstance(obj, Mapping):
        raise d.fail("<root>", f"expected an object, got {type(obj).__name__}")
    found = obj.get("kind")
    if found is not None and found != kind.kind:
        raise d.fail("kind", f"expected {kind.kind}, got {found!r}")
    return d, obj


def convert_to_deployment(obj: object) -> Deployment:
    d, raw = _start(DEPLOYMENT, obj)
    return Deployment(metadata=_decode_metadata(d, raw), template=_decode_template(d, raw))


def convert_to_daemon_set(obj: object) -> DaemonSet:
    d, raw = _start(DAEMON_SET, obj)
    return DaemonSet(metadata=_decode_metadata(d, raw), template=_decode_template(d, raw))


def convert_to_stateful_set(obj: object) -> StatefulSet:
    d, raw = _start(STATEFUL_SET, obj)
    return StatefulSet(metadata=_decode_metadata(d, raw), template=_decode_template(d, raw))


def convert_to_job(obj: object) -> Job:
    d, raw = _start(JOB, obj)
    return Job(metadata=_decode_metadata(d, raw), template=_decode_template(d, raw))


def convert_to_pod(obj: object) -> Pod:
    d, raw = _start(POD, obj)
    spec = d.mapping(raw, "spec", "spec", required=True)
    return Pod(metadata=_decode_metadata(d, raw), spec=_decode_pod_spec(d, spec, "spec"))


CONVERTERS: Mapping[WorkloadKind, Callable[[object], Workload]] = {
    DEPLOYMENT: convert_to_deployment,
    DAEMON_SET: convert_to_daemon_set,
    STATEFUL_SET: convert_to_stateful_set,
    JOB: convert_to_job,
    POD: convert_to_pod,
}


def convert_workload(kind: WorkloadKind, obj: object) -> Workload:
    """Convert *obj* to the typed variant registered for *kind*.

    Raises:
        MalformedWorkloadError: if *kind* has no converter or *obj* does not
            decode.
    """
    converter = CONVERTERS.get(kind)
    if converter is None:
        raise MalformedWorkloadError(kind.kind, f"no typed form for {kind}")
    return converter(obj)
