"""kbinventory -- inventory and teardown of a KubeBlocks installation's cluster objects."""

__version__ = "0.1.0"
