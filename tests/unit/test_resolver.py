"""Tests for resource_type_for (CRD -> ResourceType)."""

from __future__ import annotations

import copy

import pytest
from fakes import KB_CLUSTER, make_crd, record

from kbinventory.discovery.resolver import resource_type_for
from kbinventory.errors import MalformedDefinitionError, MalformedObjectError
from kbinventory.models.resources import ResourceType


def _crd_with(**spec_overrides: object) -> dict:
    crd = make_crd(KB_CLUSTER)
    crd["spec"].update(spec_overrides)
    return crd


class TestResolve:
    def test_clusters_definition(self) -> None:
        crd = record(make_crd(ResourceType("kubeblocks.io", "v1alpha1", "clusters")))
        assert crd.name == "clusters.kubeblocks.io"
        assert resource_type_for(crd) == ResourceType("kubeblocks.io", "v1alpha1", "clusters")

    def test_first_served_version_wins(self) -> None:
        crd = _crd_with(
            versions=[
                {"name": "v1alpha1", "served": False, "storage": False},
                {"name": "v1beta1", "served": True, "storage": False},
                {"name": "v1", "served": True, "storage": True},
            ]
        )
        assert resource_type_for(record(crd)).version == "v1beta1"

    def test_legacy_single_version_field(self) -> None:
        crd = make_crd(KB_CLUSTER)
        del crd["spec"]["versions"]
        crd["spec"]["version"] = "v1alpha1"
        assert resource_type_for(record(crd)) == KB_CLUSTER

    def test_pure_function(self) -> None:
        crd = make_crd(KB_CLUSTER)
        before = copy.deepcopy(crd)
        rec = record(crd)
        assert resource_type_for(rec) == resource_type_for(rec)
        assert crd == before


class TestMalformed:
    def test_missing_group(self) -> None:
        crd = make_crd(KB_CLUSTER)
        del crd["spec"]["group"]
        with pytest.raises(MalformedDefinitionError, match="spec.group"):
            resource_type_for(record(crd))

    def test_no_served_version(self) -> None:
        crd = make_crd(KB_CLUSTER, served=False)
        with pytest.raises(MalformedDefinitionError, match="spec.versions"):
            resource_type_for(record(crd))

    def test_missing_plural(self) -> None:
        crd = _crd_with(names={"kind": "Cluster"})
        with pytest.raises(MalformedDefinitionError, match="spec.names.plural"):
            resource_type_for(record(crd))

    def test_wrong_type_is_definition_error(self) -> None:
        crd = _crd_with(group=["kubeblocks.io"])
        with pytest.raises(MalformedDefinitionError) as exc_info:
            resource_type_for(record(crd))
        assert isinstance(exc_info.value, MalformedObjectError)
        assert exc_info.value.name == "clusters.kubeblocks.io"

    def test_missing_spec(self) -> None:
        crd = record({"metadata": {"name": "clusters.kubeblocks.io"}})
        with pytest.raises(MalformedDefinitionError):
            resource_type_for(crd)

    def test_unusable_name_does_not_mask_the_definition_error(self) -> None:
        crd = make_crd(KB_CLUSTER)
        crd["metadata"]["name"] = 7
        del crd["spec"]["group"]
        with pytest.raises(MalformedDefinitionError, match="spec.group") as exc_info:
            resource_type_for(record(crd))
        assert exc_info.value.name == "<unnamed>"
