"""ConfigMap and Secret reference scanning.

Walks a pod template the way the kubelet resolves it:

- ``envFrom`` bulk imports (configMapRef / secretRef)
- ``env[].valueFrom`` key references (configMapKeyRef / secretKeyRef)
- volumes: configMap, secret, projected sources, storage-plugin credentials
- pod-level ``imagePullSecrets``

Regular, init and ephemeral containers are all scanned. Results are sets;
a name mentioned at several sites is reported once.
"""

from __future__ import annotations

from kubedeps.models.workloads import PodTemplate


def config_map_names(template: PodTemplate) -> set[str]:
    """Return the names of every ConfigMap *template* references."""
    names: set[str] = set()
    for container in template.spec.all_containers():
        for env_from in container.env_from:
            if env_from.config_map_ref:
                names.add(env_from.config_map_ref)
        for env in container.env:
            if env.config_map_key_ref is not None and env.config_map_key_ref.name:
                names.add(env.config_map_key_ref.name)

    for volume in template.spec.volumes:
        if volume.config_map:
            names.add(volume.config_map)
        for source in volume.projected:
            if source.config_map:
                names.add(source.config_map)
    return names


def secret_names(template: PodTemplate) -> set[str]:
    """Return the names of every Secret *template* references."""
    names = {name for name in template.spec.image_pull_secrets if name}
    for container in template.spec.all_containers():
        for env_from in container.env_from:
            if env_from.secret_ref:
                names.add(env_from.secret_ref)
        for env in container.env:
            if env.secret_key_ref is not None and env.secret_key_ref.name:
                names.add(env.secret_key_ref.name)

    for volume in template.spec.volumes:
        if volume.secret:
            names.add(volume.secret)
        for source in volume.projected:
            if source.secret:
                names.add(source.secret)
        names.update(name for name in volume.plugin_secrets if name)
    return names


def scan_references(template: PodTemplate) -> tuple[set[str], set[str]]:
    """Return ``(config_map_names, secret_names)`` for *template*."""
    return config_map_names(template), secret_names(template)
