"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ClusterConfig:
    """Kubernetes API access configuration."""

    kubeconfig: str = ""
    context: str = ""
    in_cluster: bool = False
    request_timeout_seconds: int = 30


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KubeDepsConfig:
    """Top-level kubedeps configuration."""

    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    log: LogConfig = field(default_factory=LogConfig)
