"""Teardown of an installation's custom resources (fail-fast)."""

from kbinventory.teardown.executor import teardown

__all__ = ["teardown"]
