"""Typed workload structures.

Workload objects arrive as generic mappings (decoded YAML/JSON or watch
payloads). ``kubedeps.interpreter.convert`` turns them into the frozen
dataclasses below; everything downstream of conversion works only with
these types.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class WorkloadKind:
    """A (group, version, kind) triple identifying a workload schema."""

    group: str
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        """Return the ``apiVersion`` string, e.g. ``apps/v1`` or ``v1``."""
        return f"{self.group}/{self.version}" if self.group else self.version

    @classmethod
    def from_api_version(cls, api_version: str, kind: str) -> WorkloadKind:
        group, _, version = api_version.rpartition("/")
        return cls(group=group, version=version, kind=kind)

    def __str__(self) -> str:
        return f"{self.api_version}, Kind={self.kind}"


DEPLOYMENT = WorkloadKind("apps", "v1", "Deployment")
DAEMON_SET = WorkloadKind("apps", "v1", "DaemonSet")
STATEFUL_SET = WorkloadKind("apps", "v1", "StatefulSet")
JOB = WorkloadKind("batch", "v1", "Job")
POD = WorkloadKind("", "v1", "Pod")


@dataclass(frozen=True)
class ObjectMeta:
    """The subset of object metadata discovery needs."""

    name: str
    namespace: str = "default"
    labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class KeySelector:
    """A ``configMapKeyRef`` / ``secretKeyRef`` pointing at one key."""

    name: str
    key: str = ""
    optional: bool = False


@dataclass(frozen=True)
class EnvVar:
    """A single container environment variable."""

    name: str
    config_map_key_ref: KeySelector | None = None
    secret_key_ref: KeySelector | None = None


@dataclass(frozen=True)
class EnvFromSource:
    """A bulk environment import from a ConfigMap or a Secret."""

    config_map_ref: str | None = None
    secret_ref: str | None = None
    prefix: str = ""


@dataclass(frozen=True)
class Container:
    name: str
    env: tuple[EnvVar, ...] = ()
    env_from: tuple[EnvFromSource, ...] = ()
    volume_mounts: tuple[str, ...] = ()


@dataclass(frozen=True)
class VolumeProjection:
    """One source of a projected volume."""

    config_map: str | None = None
    secret: str | None = None


@dataclass(frozen=True)
class Volume:
    """A pod volume, reduced to the sources that reference other objects.

    ``plugin_secrets`` holds Secret names referenced as credentials by
    storage plugins (csi, rbd, cephfs, azureFile, ...).
    """

    name: str
    config_map: str | None = None
    secret: str | None = None
    projected: tuple[VolumeProjection, ...] = ()
    plugin_secrets: tuple[str, ...] = ()


@dataclass(frozen=True)
class PodSpec:
    containers: tuple[Container, ...] = ()
    init_containers: tuple[Container, ...] = ()
    ephemeral_containers: tuple[Container, ...] = ()
    volumes: tuple[Volume, ...] = ()
    image_pull_secrets: tuple[str, ...] = ()

    def all_containers(self) -> tuple[Container, ...]:
        """Return regular, init and ephemeral containers in that order."""
        return self.init_containers + self.containers + self.ephemeral_containers


@dataclass(frozen=True)
class PodTemplateSpec:
    """The pod template embedded in a controller's spec."""

    labels: dict[str, str] = field(default_factory=dict)
    spec: PodSpec = field(default_factory=PodSpec)


@dataclass(frozen=True)
class PodTemplate:
    """Canonical pod view every supported kind reduces to.

    A controller's template carries no namespace of its own, so the
    namespace is always the owning object's.
    """

    namespace: str
    labels: dict[str, str]
    spec: PodSpec


# ---------------------------------------------------------------------------
# Typed workload variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Deployment:
    metadata: ObjectMeta
    template: PodTemplateSpec


@dataclass(frozen=True)
class DaemonSet:
    metadata: ObjectMeta
    template: PodTemplateSpec


@dataclass(frozen=True)
class StatefulSet:
    metadata: ObjectMeta
    template: PodTemplateSpec


@dataclass(frozen=True)
class Job:
    metadata: ObjectMeta
    template: PodTemplateSpec


@dataclass(frozen=True)
class Pod:
    """A bare pod: its own spec is the template."""

    metadata: ObjectMeta
    spec: PodSpec


PodController = Deployment | DaemonSet | StatefulSet | Job
Workload = PodController | Pod
