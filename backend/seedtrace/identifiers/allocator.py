"""Sequence allocation: the only stateful part of the engine.

Three scopes, each with its own counter and ceiling:

  batch   (site, batch type, date)   → NNNN  of the batch number    ≤ 9999
  unit    (batch number)             → UUUUU of the full serial     ≤ 99999
  short   (site, YYMMDD)             → NNNNN of the short serial    ≤ 99999

The short scope is keyed on the two-digit year the short serial itself
carries, so dates a century apart share one counter.

Counters live behind the narrow ``CounterStore`` interface: an atomic
increment-and-read per scope key, plus a read-only peek.  A reserved number
is consumed for good, even if the caller never uses it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from seedtrace.identifiers.batch_codec import encode_batch_type
from seedtrace.identifiers.errors import SequenceExhausted
from seedtrace.identifiers.fields import check_date, check_range
from seedtrace.identifiers.types import (
    MAX_BATCH_SEQUENCE,
    MAX_SHORT_SEQUENCE,
    MAX_SITE_ID,
    MAX_UNIT_SEQUENCE,
    BatchType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SequenceScope:
    """Key of one independent counter."""

    kind: str  # "batch" | "unit" | "short"
    key: str

    def __str__(self) -> str:
        return f"{self.kind}:{self.key}"

    @classmethod
    def batch(cls, site_id: int, batch_type: BatchType, batch_date: date) -> "SequenceScope":
        return cls("batch", f"{site_id:02d}:{encode_batch_type(batch_type)}:{batch_date:%Y%m%d}")

    @classmethod
    def unit(cls, batch_number: str) -> "SequenceScope":
        return cls("unit", batch_number)

    @classmethod
    def short(cls, site_id: int, serial_date: date) -> "SequenceScope":
        return cls("short", f"{site_id:02d}:{serial_date:%y%m%d}")


class CounterStore(Protocol):
    async def increment(
        self, scope: SequenceScope, ceiling: int, requested_by: str | None = None
    ) -> int:
        """Atomically bump the counter for ``scope`` and return the new value.

        Raises SequenceExhausted, leaving the counter untouched, when the
        new value would exceed ``ceiling``.
        """
        ...

    async def current(self, scope: SequenceScope) -> int:
        """Last issued value for ``scope``; 0 for a scope never seen."""
        ...


class InMemoryCounterStore:
    """Process-local counters with one asyncio.Lock per scope key.

    Allocations in different scopes never wait on each other.  A scope's lock
    is dropped as soon as no caller holds or awaits it, so only the counter
    values accumulate.  Used by the test-suite and by single-process
    deployments that do not need restarts to preserve counters.
    """

    def __init__(self):
        self._values: dict[SequenceScope, int] = {}
        self._locks: dict[SequenceScope, asyncio.Lock] = {}
        self._users: dict[SequenceScope, int] = {}

    async def increment(
        self, scope: SequenceScope, ceiling: int, requested_by: str | None = None
    ) -> int:
        # No await between these bookkeeping steps, so they run as one unit
        lock = self._locks.setdefault(scope, asyncio.Lock())
        self._users[scope] = self._users.get(scope, 0) + 1
        try:
            async with lock:
                value = self._values.get(scope, 0) + 1
                if value > ceiling:
                    raise SequenceExhausted(str(scope), ceiling)
                self._values[scope] = value
                return value
        finally:
            self._users[scope] -= 1
            if not self._users[scope]:
                del self._users[scope]
                del self._locks[scope]

    async def current(self, scope: SequenceScope) -> int:
        return self._values.get(scope, 0)


class SequenceAllocator:
    """Reserves the next sequence number in a scope."""

    def __init__(self, store: CounterStore):
        self._store = store

    async def _reserve(
        self, scope: SequenceScope, ceiling: int, requested_by: str | None
    ) -> int:
        try:
            value = await self._store.increment(scope, ceiling, requested_by)
        except SequenceExhausted:
            logger.error(
                f"Sequence exhausted for {scope} (ceiling {ceiling})",
                extra={"scope": str(scope), "ceiling": ceiling},
            )
            raise
        logger.debug(f"Reserved {scope} -> {value}")
        return value

    async def allocate_batch_sequence(
        self,
        site_id: int,
        batch_type: BatchType,
        batch_date: date,
        requested_by: str | None = None,
    ) -> int:
        """Next batch sequence (1-9999) for site/type/date."""
        check_range("site_id", site_id, 1, MAX_SITE_ID)
        batch_date = check_date("batch_date", batch_date)
        scope = SequenceScope.batch(site_id, batch_type, batch_date)
        return await self._reserve(scope, MAX_BATCH_SEQUENCE, requested_by)

    async def allocate_unit_sequence(
        self, batch_number: str, requested_by: str | None = None
    ) -> int:
        """Next unit sequence (1-99999) within an issued batch."""
        return await self._reserve(
            SequenceScope.unit(batch_number), MAX_UNIT_SEQUENCE, requested_by
        )

    async def allocate_short_sequence(
        self, site_id: int, serial_date: date, requested_by: str | None = None
    ) -> int:
        """Next short-serial sequence (1-99999) for site/date."""
        check_range("site_id", site_id, 1, MAX_SITE_ID)
        serial_date = check_date("serial_date", serial_date)
        return await self._reserve(
            SequenceScope.short(site_id, serial_date), MAX_SHORT_SEQUENCE, requested_by
        )

    async def current_batch_sequence(
        self, site_id: int, batch_type: BatchType, batch_date: date
    ) -> int:
        """Last batch sequence issued for site/type/date, 0 if none."""
        check_range("site_id", site_id, 1, MAX_SITE_ID)
        batch_date = check_date("batch_date", batch_date)
        return await self._store.current(SequenceScope.batch(site_id, batch_type, batch_date))
