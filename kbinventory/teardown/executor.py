"""Removal of an installation's custom resources.

Unlike discovery, teardown stops at the first failure that is not
ResourceNotFoundError and raises TeardownError naming the kind and object it
was working on and the definitions it never reached. Re-running is safe:
objects that are already gone come back as not-found and are skipped.

Only custom resources are touched. The definitions themselves and the
built-in workload, config and storage objects found by discovery are left
for the manifest-based uninstall to remove.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable

from kbinventory.client.base import ResourceClient
from kbinventory.discovery.resolver import resource_type_for
from kbinventory.errors import KBInventoryError, ResourceNotFoundError, TeardownError
from kbinventory.models.inventory import Inventory
from kbinventory.models.resources import CRD, ObjectRecord, ResourceType
from kbinventory.observability.logging import get_logger

_log = get_logger("teardown")


async def teardown(client: ResourceClient, inventory: Inventory, *, timeout: float) -> None:
    """Delete every custom resource in *inventory* and strip its finalizers.

    Kinds are processed in the order their definitions were discovered and,
    within a kind, one object at a time: delete (unless it is already being
    deleted), then remove finalizers if it has any. *inventory* is only read.

    Raises TeardownError on the first failure. *timeout* bounds the whole
    run in seconds; TimeoutError propagates when it elapses.
    """
    async with asyncio.timeout(timeout):
        await _remove_custom_resources(client, inventory)


async def _remove_custom_resources(client: ResourceClient, inventory: Inventory) -> None:
    crds = inventory.get(CRD)
    if not crds:
        _log.info("no custom resource definitions in inventory, nothing to remove")
        return

    for index, crd in enumerate(crds):
        unprocessed = [c.label for c in crds[index + 1 :]]
        try:
            rtype = resource_type_for(crd)
        except KBInventoryError as exc:
            _log.error("cannot resolve custom resource definition", name=crd.label, error=str(exc))
            raise TeardownError("resolve", CRD.resource, exc, name=crd.label, unprocessed=unprocessed) from exc

        records = inventory.get(rtype)
        if records is None:
            continue

        _log.info("removing custom resources", resource=str(rtype), count=len(records))
        for record in records:
            await _remove_object(client, rtype, record, unprocessed)


async def _remove_object(
    client: ResourceClient,
    rtype: ResourceType,
    record: ObjectRecord,
    unprocessed: list[str],
) -> None:
    action = "delete"
    name = record.label
    namespace: str | None = None
    try:
        name, namespace = record.name, record.namespace
        if not record.is_deleting:
            _log.debug("delete", resource=str(rtype), name=name, namespace=namespace)
            await _ignore_not_found(client.delete(rtype, name, namespace, grace_period_seconds=0))

        # An object already being deleted is held only by its finalizers, so
        # the strip runs whether or not we issued the delete above.
        action = "remove-finalizers"
        if not record.finalizers:
            return
        _log.debug("remove finalizers", resource=str(rtype), name=name, namespace=namespace)
        await _ignore_not_found(client.remove_finalizers(rtype, name, namespace))
    except KBInventoryError as exc:
        _log.error(
            "teardown aborted",
            action=action,
            resource=str(rtype),
            name=name,
            namespace=namespace,
            error=str(exc),
            unprocessed=unprocessed,
        )
        raise TeardownError(
            action,
            str(rtype),
            exc,
            name=name,
            namespace=namespace,
            unprocessed=unprocessed,
        ) from exc


async def _ignore_not_found(call: Awaitable[None]) -> None:
    try:
        await call
    except ResourceNotFoundError:
        pass
