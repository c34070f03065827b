"""Exception hierarchy for kbinventory.

KBInventoryError
 ├── ResourceNotFoundError      -- the object does not exist (never a failure)
 ├── ClientRequestError         -- any other API/transport failure
 ├── UnsupportedResourceError   -- the client cannot address a resource type
 ├── ClusterConfigError         -- no usable cluster credentials
 ├── MalformedObjectError       -- a field has the wrong shape
 │    └── MalformedDefinitionError
 ├── DiscoveryError             -- aggregate of every failure seen by discover()
 └── TeardownError              -- first failure that stopped teardown()
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kbinventory.models.resources import ResourceType


class KBInventoryError(Exception):
    """Base class for all kbinventory errors."""


class ResourceNotFoundError(KBInventoryError):
    """The requested object does not exist on the API server."""

    def __init__(self, resource_type: ResourceType, name: str | None = None, namespace: str | None = None) -> None:
        target = f"{namespace}/{name}" if namespace and name else (name or "<list>")
        super().__init__(f"{resource_type.resource} {target} not found")
        self.resource_type = resource_type
        self.name = name
        self.namespace = namespace


class ClientRequestError(KBInventoryError):
    """An API call failed for any reason other than the object being absent."""

    def __init__(self, message: str, status: int | None = None, reason: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason


class UnsupportedResourceError(KBInventoryError):
    """The resource client has no way to address the given resource type."""

    def __init__(self, resource_type: ResourceType) -> None:
        super().__init__(f"unsupported resource type: {resource_type}")
        self.resource_type = resource_type


class ClusterConfigError(KBInventoryError):
    """Cluster credentials could not be loaded from kubeconfig or the service account."""


class MalformedObjectError(KBInventoryError):
    """A field of an object record is missing where required or has the wrong type."""

    def __init__(self, name: str, path: str, expected: str, actual: object = None) -> None:
        got = type(actual).__name__ if actual is not None else "nothing"
        super().__init__(f"object {name!r}: field {path!r} expected {expected}, got {got}")
        self.name = name
        self.path = path
        self.expected = expected
        self.actual = actual


class MalformedDefinitionError(MalformedObjectError):
    """A custom resource definition does not yield a resource type."""


class DiscoveryError(KBInventoryError):
    """Aggregate of every non-NotFound failure seen during one discovery run."""

    def __init__(self, errors: Sequence[Exception]) -> None:
        self.errors: list[Exception] = list(errors)
        if len(self.errors) == 1:
            message = str(self.errors[0])
        else:
            message = "[" + ", ".join(str(e) for e in self.errors) + "]"
        super().__init__(message)

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[Exception]:
        return iter(self.errors)


class TeardownError(KBInventoryError):
    """Teardown stopped at its first failure.

    ``kind``, ``name`` and ``namespace`` identify the object being processed
    (``name`` is None when the kind itself could not be resolved). ``action``
    is one of ``resolve``, ``delete`` or ``remove-finalizers``. ``unprocessed``
    lists the custom resource definitions that were never reached. The
    underlying failure is chained as ``__cause__``.
    """

    def __init__(
        self,
        action: str,
        kind: str,
        cause: Exception,
        *,
        name: str | None = None,
        namespace: str | None = None,
        unprocessed: Sequence[str] = (),
    ) -> None:
        target = kind
        if name:
            target += f" {namespace}/{name}" if namespace else f" {name}"
        super().__init__(f"{action} {target}: {cause}")
        self.action = action
        self.kind = kind
        self.name = name
        self.namespace = namespace
        self.unprocessed: list[str] = list(unprocessed)
