"""Derive the resource type a CustomResourceDefinition introduces."""

from __future__ import annotations

from collections.abc import Mapping

from kbinventory.errors import MalformedDefinitionError, MalformedObjectError
from kbinventory.models.resources import ObjectRecord, ResourceType


def _served_version(crd: ObjectRecord) -> str | None:
    versions = crd.nested("spec", "versions", expected=tuple) or ()
    for entry in versions:
        if isinstance(entry, Mapping) and entry.get("served") and isinstance(entry.get("name"), str):
            return entry["name"]
    # apiextensions.k8s.io/v1beta1 definitions may only carry spec.version
    return crd.nested("spec", "version", expected=str)


def resource_type_for(crd: ObjectRecord) -> ResourceType:
    """Return the ResourceType of the kind declared by *crd*.

    Uses ``spec.group``, the first served entry of ``spec.versions`` and
    ``spec.names.plural``. Raises MalformedDefinitionError if any of them is
    missing, empty or of the wrong type.
    """
    try:
        group = crd.nested("spec", "group", expected=str)
        version = _served_version(crd)
        plural = crd.nested("spec", "names", "plural", expected=str)
    except MalformedObjectError as exc:
        raise MalformedDefinitionError(exc.name, exc.path, exc.expected, exc.actual) from exc

    if not group:
        raise MalformedDefinitionError(crd.label, "spec.group", "non-empty string")
    if not version:
        raise MalformedDefinitionError(crd.label, "spec.versions", "a served version")
    if not plural:
        raise MalformedDefinitionError(crd.label, "spec.names.plural", "non-empty string")
    return ResourceType(group=group, version=version, resource=plural)
