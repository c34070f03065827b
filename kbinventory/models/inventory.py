"""Inventory of discovered objects keyed by resource type."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from kbinventory.models.resources import ObjectRecord, ResourceType


class Inventory:
    """Mapping of ResourceType -> ordered list of ObjectRecords.

    A key with an empty list was probed and nothing matched; an absent key
    was never probed. Records appended for the same key by separate probes
    are concatenated as-is: when two label selectors match one object it
    appears twice.
    """

    def __init__(self) -> None:
        self._entries: dict[ResourceType, list[ObjectRecord]] = {}

    def ensure(self, rtype: ResourceType) -> list[ObjectRecord]:
        """Mark *rtype* as probed and return its record list."""
        return self._entries.setdefault(rtype, [])

    def extend(self, rtype: ResourceType, records: Iterable[ObjectRecord]) -> None:
        self.ensure(rtype).extend(records)

    def append(self, rtype: ResourceType, record: ObjectRecord) -> None:
        self.ensure(rtype).append(record)

    def get(self, rtype: ResourceType) -> list[ObjectRecord] | None:
        """Return a copy of the records for *rtype*, or None if it was never probed."""
        records = self._entries.get(rtype)
        return list(records) if records is not None else None

    def types(self) -> list[ResourceType]:
        return list(self._entries)

    def items(self) -> Iterator[tuple[ResourceType, list[ObjectRecord]]]:
        for rtype, records in self._entries.items():
            yield rtype, list(records)

    def count(self) -> int:
        """Total number of records across all types."""
        return sum(len(records) for records in self._entries.values())

    def __contains__(self, rtype: object) -> bool:
        return rtype in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Inventory(types={len(self._entries)}, objects={self.count()})"
