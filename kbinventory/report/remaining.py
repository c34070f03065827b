"""Project an inventory into the list of objects still present."""

from __future__ import annotations

from kbinventory.models.inventory import Inventory
from kbinventory.models.resources import PV, PVC, ResourceType

# Storage is not owned by the installation and is never reported as left over.
EXCLUDED_TYPES: frozenset[ResourceType] = frozenset({PVC, PV})


def remaining(inventory: Inventory) -> dict[str, list[str]]:
    """Map each resource plural to the names of its objects, in discovery order.

    Types probed with no matches are omitted, as are claims and volumes.
    """
    result: dict[str, list[str]] = {}
    for rtype, records in inventory.items():
        if rtype in EXCLUDED_TYPES:
            continue
        for record in records:
            result.setdefault(rtype.resource, []).append(record.name)
    return result


def format_remaining(leftovers: dict[str, list[str]]) -> list[str]:
    """Render ``remaining()`` output as one ``kind: a, b`` line per kind, sorted by kind."""
    return [f"{kind}: {', '.join(names)}" for kind, names in sorted(leftovers.items())]
