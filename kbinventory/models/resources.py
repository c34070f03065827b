"""Resource type keys and generic object snapshots."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, TypeVar

from kbinventory.errors import MalformedObjectError

_T = TypeVar("_T")


def _freeze(value: Any) -> Any:
    """Copy a decoded JSON value into immutable containers: mappings become read-only views, lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, Sequence) and not isinstance(value, str | bytes):
        return tuple(_freeze(item) for item in value)
    return value


@dataclass(frozen=True, order=True)
class ResourceType:
    """Identifies a kind of object in the cluster API surface.

    An empty ``group`` denotes the core API group (``/api/v1``).
    """

    group: str
    version: str
    resource: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def is_core(self) -> bool:
        return self.group == ""

    def __str__(self) -> str:
        return f"{self.api_version}, Resource={self.resource}"


# Well-known resource types probed during discovery.
CRD = ResourceType("apiextensions.k8s.io", "v1", "customresourcedefinitions")
DEPLOYMENT = ResourceType("apps", "v1", "deployments")
STATEFULSET = ResourceType("apps", "v1", "statefulsets")
SERVICE = ResourceType("", "v1", "services")
CONFIGMAP = ResourceType("", "v1", "configmaps")
PVC = ResourceType("", "v1", "persistentvolumeclaims")
PV = ResourceType("", "v1", "persistentvolumes")
VOLUME_SNAPSHOT_CLASS = ResourceType("snapshot.storage.k8s.io", "v1", "volumesnapshotclasses")


@dataclass(frozen=True)
class ObjectRecord:
    """Read-only snapshot of a single cluster object.

    Wraps the raw JSON document returned by the API server. Fields are read
    through typed accessors that validate at read time; the document itself
    is frozen on construction: every nested mapping is a read-only view and
    every list a tuple, at any depth. A fresher view of the same object
    means fetching a new record, never editing this one.
    """

    document: Mapping[str, Any] = field(repr=False, hash=False)

    @classmethod
    def from_dict(cls, document: Mapping[str, Any]) -> ObjectRecord:
        return cls(document=_freeze(document))

    @property
    def raw(self) -> Mapping[str, Any]:
        return self.document

    @property
    def name(self) -> str:
        return self.nested("metadata", "name", expected=str) or ""

    @property
    def namespace(self) -> str | None:
        return self.nested("metadata", "namespace", expected=str) or None

    @property
    def finalizers(self) -> tuple[str, ...]:
        return tuple(self.nested("metadata", "finalizers", expected=tuple) or ())

    @property
    def deletion_timestamp(self) -> str | None:
        return self.nested("metadata", "deletionTimestamp", expected=str) or None

    @property
    def is_deleting(self) -> bool:
        return self.deletion_timestamp is not None

    @property
    def identity(self) -> tuple[str | None, str]:
        return (self.namespace, self.name)

    def nested(self, *path: str, expected: type[_T]) -> _T | None:
        """Return the value at *path*, or None when any segment is absent.

        Raises MalformedObjectError when an intermediate segment is not a
        mapping or the final value is not an instance of *expected*.
        """
        current: Any = self.document
        walked: list[str] = []
        for segment in path:
            if current is None:
                return None
            if not isinstance(current, Mapping):
                raise MalformedObjectError(self.label, ".".join(walked), "mapping", current)
            current = current.get(segment)
            walked.append(segment)
        if current is None:
            return None
        if not isinstance(current, expected):
            raise MalformedObjectError(self.label, ".".join(walked), expected.__name__, current)
        return current

    @property
    def label(self) -> str:
        """Name for messages; never raises, "<unnamed>" when metadata.name is unusable."""
        metadata = self.document.get("metadata")
        name = metadata.get("name") if isinstance(metadata, Mapping) else None
        return name if isinstance(name, str) else "<unnamed>"

    def __repr__(self) -> str:
        ns = self.namespace
        return f"ObjectRecord({ns + '/' if ns else ''}{self.name})"
