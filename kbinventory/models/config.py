"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

INSTANCE_LABEL_KEY = "app.kubernetes.io/instance"
RELEASE_LABEL_KEY = "release"


@dataclass(frozen=True)
class DiscoverySettings:
    """Identifies which installation discovery looks for."""

    namespace: str = "kb-system"
    instance: str = "kubeblocks"
    domain_suffix: str = "kubeblocks.io"

    @property
    def instance_selector(self) -> str:
        return f"{INSTANCE_LABEL_KEY}={self.instance}"

    @property
    def release_selector(self) -> str:
        return f"{RELEASE_LABEL_KEY}={self.instance}"


@dataclass
class KubeConfig:
    """Kubernetes client configuration."""

    kubeconfig: str = ""
    context: str = ""
    request_timeout_seconds: int = 30


@dataclass
class TimeoutConfig:
    """Upper bound on a whole discover or teardown run."""

    operation_seconds: int = 300


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KBInventoryConfig:
    """Top-level kbinventory configuration."""

    discovery: DiscoverySettings = field(default_factory=DiscoverySettings)
    kube: KubeConfig = field(default_factory=KubeConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    log: LogConfig = field(default_factory=LogConfig)
