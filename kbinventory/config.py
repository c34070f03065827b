"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from kbinventory.models.config import (
    DiscoverySettings,
    KBInventoryConfig,
    KubeConfig,
    LogConfig,
    TimeoutConfig,
)

# RFC 1123 label: what Kubernetes accepts as a namespace name.
_RE_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KBINV_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_namespace(value: str) -> str:
    if len(value) > 63 or not _RE_DNS_LABEL.match(value):
        raise ValueError(f"Invalid namespace: {value}")
    return value


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> KBInventoryConfig:
    """Load configuration from KBINV_* environment variables."""
    return KBInventoryConfig(
        discovery=DiscoverySettings(
            namespace=_validate_namespace(_env("NAMESPACE", "kb-system")),
            instance=_env("INSTANCE", "kubeblocks"),
            domain_suffix=_env("DOMAIN_SUFFIX", "kubeblocks.io"),
        ),
        kube=KubeConfig(
            kubeconfig=_env("KUBECONFIG", ""),
            context=_env("CONTEXT", ""),
            request_timeout_seconds=_env_int("REQUEST_TIMEOUT", 30, min_val=1, max_val=300),
        ),
        timeout=TimeoutConfig(
            operation_seconds=_env_int("OPERATION_TIMEOUT", 300, min_val=5, max_val=3600),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
