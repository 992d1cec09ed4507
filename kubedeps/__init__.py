"""kubedeps: dependency discovery for Kubernetes workloads.

Given a workload object (Deployment, DaemonSet, StatefulSet, Job or Pod) and
read access to its namespace, reports the ConfigMaps, Secrets and Services
the workload depends on.
"""

__version__ = "0.1.0"
