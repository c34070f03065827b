"""Core data structures for kbinventory."""

from kbinventory.models.config import DiscoverySettings, KBInventoryConfig
from kbinventory.models.inventory import Inventory
from kbinventory.models.resources import ObjectRecord, ResourceType

__all__ = [
    "DiscoverySettings",
    "Inventory",
    "KBInventoryConfig",
    "ObjectRecord",
    "ResourceType",
]
