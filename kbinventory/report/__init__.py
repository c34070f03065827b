"""Read-only projections of an Inventory."""

from kbinventory.report.remaining import format_remaining, remaining

__all__ = ["format_remaining", "remaining"]
