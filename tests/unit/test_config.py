"""Tests for KBINV_* configuration loading."""

from __future__ import annotations

import pytest

from kbinventory.config import load_config
from kbinventory.models.config import DiscoverySettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "NAMESPACE",
        "INSTANCE",
        "DOMAIN_SUFFIX",
        "KUBECONFIG",
        "CONTEXT",
        "REQUEST_TIMEOUT",
        "OPERATION_TIMEOUT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(f"KBINV_{key}", raising=False)


class TestDefaults:
    def test_defaults(self) -> None:
        config = load_config()
        assert config.discovery == DiscoverySettings("kb-system", "kubeblocks", "kubeblocks.io")
        assert config.kube.kubeconfig == ""
        assert config.kube.request_timeout_seconds == 30
        assert config.timeout.operation_seconds == 300
        assert config.log.level == "info"

    def test_selectors(self) -> None:
        settings = DiscoverySettings(instance="kb-dev")
        assert settings.instance_selector == "app.kubernetes.io/instance=kb-dev"
        assert settings.release_selector == "release=kb-dev"


class TestOverrides:
    def test_env_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KBINV_NAMESPACE", "kb")
        monkeypatch.setenv("KBINV_INSTANCE", "kb-dev")
        monkeypatch.setenv("KBINV_KUBECONFIG", "/tmp/kubeconfig")
        monkeypatch.setenv("KBINV_LOG_LEVEL", "DEBUG")
        config = load_config()
        assert config.discovery.namespace == "kb"
        assert config.discovery.instance == "kb-dev"
        assert config.kube.kubeconfig == "/tmp/kubeconfig"
        assert config.log.level == "debug"

    def test_timeouts_are_clamped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KBINV_OPERATION_TIMEOUT", "1")
        monkeypatch.setenv("KBINV_REQUEST_TIMEOUT", "9999")
        config = load_config()
        assert config.timeout.operation_seconds == 5
        assert config.kube.request_timeout_seconds == 300

    @pytest.mark.parametrize("namespace", ["KB-System", "-kb", "kb_system", "x" * 64])
    def test_invalid_namespace(self, monkeypatch: pytest.MonkeyPatch, namespace: str) -> None:
        monkeypatch.setenv("KBINV_NAMESPACE", namespace)
        with pytest.raises(ValueError, match="Invalid namespace"):
            load_config()

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KBINV_LOG_LEVEL", "verbose")
        with pytest.raises(ValueError, match="Invalid log level"):
            load_config()
