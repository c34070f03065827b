"""The resource client capability the discovery and teardown code is written against."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from kbinventory.models.resources import ObjectRecord, ResourceType

FINALIZER_REMOVAL_PATCH: list[dict[str, str]] = [{"op": "remove", "path": "/metadata/finalizers"}]


@runtime_checkable
class ResourceClient(Protocol):
    """Uniform list/get/delete/patch over any resource type.

    ``namespace=None`` addresses the cluster scope: for ``list`` that means
    every namespace, for the other calls a cluster-scoped object.

    Every method raises ResourceNotFoundError when the object (or, for
    ``list``, the resource type) does not exist, and ClientRequestError for
    any other failure.
    """

    async def list(
        self,
        rtype: ResourceType,
        namespace: str | None = None,
        label_selector: str | None = None,
    ) -> list[ObjectRecord]: ...

    async def get(self, rtype: ResourceType, name: str, namespace: str | None = None) -> ObjectRecord: ...

    async def delete(
        self,
        rtype: ResourceType,
        name: str,
        namespace: str | None = None,
        grace_period_seconds: int = 0,
    ) -> None: ...

    async def remove_finalizers(self, rtype: ResourceType, name: str, namespace: str | None = None) -> None:
        """Apply FINALIZER_REMOVAL_PATCH as a JSON patch."""
        ...
