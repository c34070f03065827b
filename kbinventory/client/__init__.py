"""Resource client layer for kbinventory.

Discovery and teardown only ever talk to the cluster through the
``ResourceClient`` protocol, so tests can hand in a fake.

Submodules
----------
base -- ResourceClient protocol and the finalizer-removal JSON patch.
kube -- KubeResourceClient: kubernetes-asyncio implementation.
"""

from kbinventory.client.base import FINALIZER_REMOVAL_PATCH, ResourceClient

__all__ = ["FINALIZER_REMOVAL_PATCH", "ResourceClient"]
