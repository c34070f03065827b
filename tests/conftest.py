"""Shared fixtures for the kbinventory test suites."""

from __future__ import annotations

import pytest
from fakes import FakeResourceClient

from kbinventory.models.config import DiscoverySettings


@pytest.fixture
def cluster() -> FakeResourceClient:
    """An empty in-memory cluster."""
    return FakeResourceClient()


@pytest.fixture
def settings() -> DiscoverySettings:
    return DiscoverySettings(namespace="kb-system", instance="kubeblocks", domain_suffix="kubeblocks.io")
