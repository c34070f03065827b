"""Discovery of every cluster object that belongs to one installation.

Discovery is tolerant: each failed call is recorded and the run carries on,
so the caller always gets whatever could be found plus one aggregate error.
ResourceNotFoundError is never recorded; it only means there is nothing
there.

Probe order:
    1. custom resource definitions whose name contains the domain suffix
    2. every custom resource of each definition's kind (cluster-wide)
    3. well-known namespaced kinds by instance label, then by release label
    4. volume snapshot classes by instance label
    5. the persistent volume bound to each discovered claim
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from kbinventory.client.base import ResourceClient
from kbinventory.discovery.resolver import resource_type_for
from kbinventory.errors import DiscoveryError, KBInventoryError, MalformedObjectError, ResourceNotFoundError
from kbinventory.models.config import DiscoverySettings
from kbinventory.models.inventory import Inventory
from kbinventory.models.resources import (
    CONFIGMAP,
    CRD,
    DEPLOYMENT,
    PV,
    PVC,
    SERVICE,
    STATEFULSET,
    VOLUME_SNAPSHOT_CLASS,
    ObjectRecord,
    ResourceType,
)
from kbinventory.observability.logging import get_logger

_log = get_logger("discovery")

# Namespaced kinds looked up by both the instance and the legacy release label.
LABELLED_TYPES: tuple[ResourceType, ...] = (DEPLOYMENT, STATEFULSET, SERVICE, CONFIGMAP, PVC)


@dataclass
class DiscoveryResult:
    """Partial-result shape: an inventory that is always usable plus every failure seen."""

    inventory: Inventory
    errors: list[Exception] = field(default_factory=list)

    @property
    def error(self) -> DiscoveryError | None:
        """All recorded failures combined, or None when there were none."""
        return DiscoveryError(self.errors) if self.errors else None

    @property
    def ok(self) -> bool:
        return not self.errors


class _Indexer:
    def __init__(self, client: ResourceClient, settings: DiscoverySettings) -> None:
        self._client = client
        self._settings = settings
        self._inventory = Inventory()
        self._errors: list[Exception] = []

    def _record(self, err: Exception, **context: object) -> None:
        if isinstance(err, ResourceNotFoundError):
            return
        _log.warning("discovery failure recorded", error=str(err), error_type=type(err).__name__, **context)
        self._errors.append(err)

    async def run(self) -> DiscoveryResult:
        await self._discover_custom_resources()

        for selector in (self._settings.instance_selector, self._settings.release_selector):
            for rtype in LABELLED_TYPES:
                await self._probe(rtype, self._settings.namespace, selector)

        # Snapshot classes are cluster-scoped.
        await self._probe(VOLUME_SNAPSHOT_CLASS, None, self._settings.instance_selector)

        await self._discover_bound_volumes()

        _log.info(
            "discovery finished",
            types=len(self._inventory),
            objects=self._inventory.count(),
            errors=len(self._errors),
        )
        return DiscoveryResult(inventory=self._inventory, errors=self._errors)

    async def _discover_custom_resources(self) -> None:
        # CRDs are cluster-scoped and may predate the labelling conventions,
        # so ownership is decided by the name alone.
        owned = self._inventory.ensure(CRD)
        try:
            crds = await self._client.list(CRD)
        except KBInventoryError as exc:
            self._record(exc, resource=CRD.resource)
            return

        suffix = self._settings.domain_suffix
        for crd in crds:
            try:
                if suffix not in crd.name:
                    continue
            except MalformedObjectError as exc:
                self._record(exc, resource=CRD.resource)
                continue
            owned.append(crd)

            try:
                rtype = resource_type_for(crd)
            except MalformedObjectError as exc:
                self._record(exc, resource=CRD.resource, name=crd.name)
                continue

            # Custom resources may be cluster-scoped: no namespace filter.
            await self._probe(rtype, None, None)

        _log.debug("custom resource definitions matched", suffix=suffix, count=len(owned))

    async def _probe(self, rtype: ResourceType, namespace: str | None, selector: str | None) -> None:
        try:
            records = await self._client.list(rtype, namespace=namespace, label_selector=selector)
        except KBInventoryError as exc:
            self._record(exc, resource=str(rtype), namespace=namespace, selector=selector)
            return
        _log.debug("probed", resource=str(rtype), namespace=namespace, selector=selector, count=len(records))
        self._inventory.extend(rtype, records)

    async def _discover_bound_volumes(self) -> None:
        claims = self._inventory.get(PVC) or []
        for claim in claims:
            await self._fetch_bound_volume(claim)

    async def _fetch_bound_volume(self, claim: ObjectRecord) -> None:
        try:
            volume_name = claim.nested("spec", "volumeName", expected=str)
        except MalformedObjectError as exc:
            self._record(exc, resource=PVC.resource, name=claim.name)
            return
        if not volume_name:
            _log.debug("claim not bound, skipping volume lookup", name=claim.name, namespace=claim.namespace)
            return

        try:
            volume = await self._client.get(PV, volume_name)
        except ResourceNotFoundError:
            self._inventory.ensure(PV)
            return
        except KBInventoryError as exc:
            self._record(exc, resource=PV.resource, name=volume_name)
            return
        self._inventory.append(PV, volume)


async def discover(client: ResourceClient, settings: DiscoverySettings, *, timeout: float) -> DiscoveryResult:
    """Build the inventory of every object belonging to the installation in *settings*.

    *timeout* bounds the whole run in seconds; when it elapses the pending
    call is cancelled and TimeoutError propagates. Cancelling the awaiting
    task cancels discovery the same way.
    """
    async with asyncio.timeout(timeout):
        return await _Indexer(client, settings).run()
