"""Short↔full serial mappings and issued batch records.

The store only ever appends.  ``create_mapping`` checks both uniqueness
constraints as one operation: either the pair is inserted or exactly one
of DuplicateFull / DuplicateShort is raised and nothing changes.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from seedtrace.identifiers.errors import (
    DuplicateBatch,
    DuplicateFull,
    DuplicateShort,
    IdentifierNotFound,
)
from seedtrace.identifiers.types import BatchRecord, IdentifierMapping


class MappingStore(Protocol):
    async def record_batch(
        self, batch_number: str, record: BatchRecord, requested_by: str | None = None
    ) -> None: ...

    async def batch_exists(self, batch_number: str) -> bool: ...

    async def create_mapping(
        self, mapping: IdentifierMapping, requested_by: str | None = None
    ) -> None: ...

    async def resolve_short_to_full(self, short_serial: str) -> str: ...

    async def resolve_full_to_short(self, full_serial: str) -> str: ...

    async def list_serials(self, batch_number: str) -> list[IdentifierMapping]: ...


class InMemoryMappingStore:
    """Dict-backed store guarded by a single lock for writes."""

    def __init__(self):
        self._batches: dict[str, BatchRecord] = {}
        self._by_full: dict[str, IdentifierMapping] = {}
        self._by_short: dict[str, IdentifierMapping] = {}
        self._lock = asyncio.Lock()

    async def record_batch(
        self, batch_number: str, record: BatchRecord, requested_by: str | None = None
    ) -> None:
        async with self._lock:
            if batch_number in self._batches:
                raise DuplicateBatch(batch_number)
            self._batches[batch_number] = record

    async def batch_exists(self, batch_number: str) -> bool:
        return batch_number in self._batches

    async def create_mapping(
        self, mapping: IdentifierMapping, requested_by: str | None = None
    ) -> None:
        async with self._lock:
            if mapping.full_serial in self._by_full:
                raise DuplicateFull(mapping.full_serial)
            if mapping.short_serial in self._by_short:
                raise DuplicateShort(mapping.short_serial)
            self._by_full[mapping.full_serial] = mapping
            self._by_short[mapping.short_serial] = mapping

    async def resolve_short_to_full(self, short_serial: str) -> str:
        mapping = self._by_short.get(short_serial)
        if mapping is None:
            raise IdentifierNotFound("Short serial", short_serial)
        return mapping.full_serial

    async def resolve_full_to_short(self, full_serial: str) -> str:
        mapping = self._by_full.get(full_serial)
        if mapping is None:
            raise IdentifierNotFound("Full serial", full_serial)
        return mapping.short_serial

    async def list_serials(self, batch_number: str) -> list[IdentifierMapping]:
        found = [m for m in self._by_full.values() if m.batch_number == batch_number]
        return sorted(found, key=lambda m: m.record.unit_sequence)
