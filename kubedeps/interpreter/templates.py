"""Pod template extraction for every supported workload variant."""

from __future__ import annotations

from kubedeps.models.workloads import (
    DaemonSet,
    Deployment,
    Job,
    Pod,
    PodController,
    PodTemplate,
    PodTemplateSpec,
    StatefulSet,
    Workload,
)


def pod_from_template(template: PodTemplateSpec, owner: PodController) -> PodTemplate:
    """Build the pod a controller would create from *template*.

    Labels come from the template; the namespace is the owner's.
    """
    return PodTemplate(
        namespace=owner.metadata.namespace,
        labels=dict(template.labels),
        spec=template.spec,
    )


def extract_pod_template(workload: Workload) -> PodTemplate:
    """Return the single pod template embedded in *workload*."""
    match workload:
        case Deployment() | DaemonSet() | StatefulSet() | Job():
            return pod_from_template(workload.template, workload)
        case Pod():
            return PodTemplate(
                namespace=workload.metadata.namespace,
                labels=dict(workload.metadata.labels),
                spec=workload.spec,
            )
    raise TypeError(f"unsupported workload type: {type(workload).__name__}")
