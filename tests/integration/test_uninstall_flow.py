"""End-to-end discover -> teardown -> discover runs against the in-memory cluster.

The cluster is seeded with what a typical installation leaves behind: its
definitions, custom resources (some held by finalizers whose controller is
gone), labelled workloads, an add-on labelled only by release, and a claim
bound to a volume.
"""

from __future__ import annotations

import pytest
from fakes import KB_BACKUP, KB_CLUSTER, FakeResourceClient, make_object

from kbinventory.discovery import discover
from kbinventory.errors import TeardownError
from kbinventory.models.config import DiscoverySettings
from kbinventory.models.resources import CONFIGMAP, CRD, DEPLOYMENT, PV, PVC, ResourceType
from kbinventory.report import remaining
from kbinventory.teardown import teardown

pytestmark = pytest.mark.integration

_TIMEOUT = 5.0
_INSTANCE = {"app.kubernetes.io/instance": "kubeblocks"}
_BOTH = {"app.kubernetes.io/instance": "kubeblocks", "release": "kubeblocks"}


@pytest.fixture
def installed(cluster: FakeResourceClient) -> FakeResourceClient:
    cluster.add_crd(KB_CLUSTER)
    cluster.add_crd(KB_BACKUP)
    cluster.add_crd(ResourceType("cert-manager.io", "v1", "certificates"))

    cluster.add(KB_CLUSTER, make_object("pg", "default", finalizers=["cluster.kubeblocks.io/finalizer"]))
    cluster.add(KB_CLUSTER, make_object("mysql", "default"))
    cluster.add(
        KB_CLUSTER,
        make_object("stuck", "team-a", finalizers=["cluster.kubeblocks.io/finalizer"], deleting=True),
    )
    cluster.add(KB_BACKUP, make_object("nightly", "default", finalizers=["dataprotection.kubeblocks.io/finalizer"]))

    cluster.add(DEPLOYMENT, make_object("kubeblocks", "kb-system", labels=_BOTH))
    cluster.add(DEPLOYMENT, make_object("prometheus-server", "kb-system", labels={"release": "kubeblocks"}))
    cluster.add(CONFIGMAP, make_object("kubeblocks-config", "kb-system", labels=_INSTANCE))
    cluster.add(PVC, make_object("data-mycluster-0", "kb-system", labels=_INSTANCE, spec={"volumeName": "pvc-abc123"}))
    cluster.add(PV, make_object("pvc-abc123"))
    return cluster


async def test_inventory_of_installation(installed: FakeResourceClient, settings: DiscoverySettings) -> None:
    result = await discover(installed, settings, timeout=_TIMEOUT)

    assert result.ok
    inventory = result.inventory
    assert [r.name for r in inventory.get(CRD) or []] == [
        "clusters.kubeblocks.io",
        "backups.dataprotection.kubeblocks.io",
    ]
    assert len(inventory.get(KB_CLUSTER) or []) == 3
    # matched by both selectors, so listed twice
    assert [r.name for r in inventory.get(DEPLOYMENT) or []] == ["kubeblocks", "kubeblocks", "prometheus-server"]
    assert [r.name for r in inventory.get(PV) or []] == ["pvc-abc123"]

    leftovers = remaining(inventory)
    assert leftovers["clusters"] == ["pg", "mysql", "stuck"]
    assert "persistentvolumeclaims" not in leftovers
    assert "persistentvolumes" not in leftovers


async def test_teardown_clears_custom_resources(installed: FakeResourceClient, settings: DiscoverySettings) -> None:
    before = await discover(installed, settings, timeout=_TIMEOUT)

    await teardown(installed, before.inventory, timeout=_TIMEOUT)

    after = await discover(installed, settings, timeout=_TIMEOUT)
    leftovers = remaining(after.inventory)
    assert "clusters" not in leftovers
    assert "backups" not in leftovers
    # definitions and built-in objects are left for the manifest uninstall
    assert leftovers["customresourcedefinitions"] == [
        "clusters.kubeblocks.io",
        "backups.dataprotection.kubeblocks.io",
    ]
    assert leftovers["configmaps"] == ["kubeblocks-config"]
    assert installed.names(PV) == ["pvc-abc123"]

    stripped = sorted(c.name for c in installed.calls_for("remove_finalizers"))
    assert stripped == ["nightly", "pg", "stuck"]


async def test_teardown_is_idempotent(installed: FakeResourceClient, settings: DiscoverySettings) -> None:
    before = await discover(installed, settings, timeout=_TIMEOUT)

    await teardown(installed, before.inventory, timeout=_TIMEOUT)
    await teardown(installed, before.inventory, timeout=_TIMEOUT)


async def test_failure_then_rerun_completes(installed: FakeResourceClient, settings: DiscoverySettings) -> None:
    installed.fail("delete", KB_CLUSTER, "mysql")
    first = await discover(installed, settings, timeout=_TIMEOUT)

    with pytest.raises(TeardownError) as exc_info:
        await teardown(installed, first.inventory, timeout=_TIMEOUT)
    assert exc_info.value.unprocessed == ["backups.dataprotection.kubeblocks.io"]
    assert installed.names(KB_BACKUP) == ["nightly"]

    installed._failures.clear()
    second = await discover(installed, settings, timeout=_TIMEOUT)
    await teardown(installed, second.inventory, timeout=_TIMEOUT)

    assert installed.names(KB_CLUSTER) == []
    assert installed.names(KB_BACKUP) == []
