"""Discovery of an installation's objects, including runtime-defined kinds.

Submodules
----------
resolver -- resource_type_for: CustomResourceDefinition -> ResourceType.
indexer  -- discover(): builds the Inventory and collects every failure.
"""

from kbinventory.discovery.indexer import DiscoveryResult, discover
from kbinventory.discovery.resolver import resource_type_for

__all__ = ["DiscoveryResult", "discover", "resource_type_for"]
