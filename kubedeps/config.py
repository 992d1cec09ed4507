"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kubedeps.models.config import ClusterConfig, KubeDepsConfig, LogConfig


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEDEPS_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key, str(default))
    try:
        val = int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid integer for KUBEDEPS_{key}: {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> KubeDepsConfig:
    """Load configuration from KUBEDEPS_* environment variables."""
    return KubeDepsConfig(
        cluster=ClusterConfig(
            kubeconfig=_env("KUBECONFIG", ""),
            context=_env("CONTEXT", ""),
            in_cluster=_env_bool("IN_CLUSTER", False),
            request_timeout_seconds=_env_int("REQUEST_TIMEOUT", 30, min_val=1, max_val=300),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
