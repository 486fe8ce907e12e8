"""IdentifierService: composition root of the identifier engine.

Workflows (production batching, transfers, stock takes, order fulfilment)
call in here; they never touch the counters directly.

  issue_batch    allocate → encode → record batch
  issue_serial   allocate unit + short → encode both → create mapping
  decode         16 → batch, 30 → full serial, 13 → resolve, then full
  validate       bool, never raises
  resolve_short  short → full

Sequences reserved before a later failure are not handed back: a retry
always gets a fresh number and the gap stays visible.  If a caller abandons
an issue call midway, reconciling the orphaned number is up to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import TYPE_CHECKING, Callable, Union

from seedtrace.identifiers import batch_codec, serial_codec
from seedtrace.identifiers.allocator import SequenceAllocator
from seedtrace.identifiers.batch_codec import encode_batch_type
from seedtrace.identifiers.errors import (
    DecodingError,
    FieldOutOfRange,
    IdentifierNotFound,
    InvalidLength,
    MappingError,
)
from seedtrace.identifiers.fields import check_date, check_range
from seedtrace.identifiers.mapping_store import MappingStore
from seedtrace.identifiers.types import (
    BATCH_NUMBER_LENGTH,
    FULL_SERIAL_LENGTH,
    MAX_SITE_ID,
    SHORT_SERIAL_LENGTH,
    BatchRecord,
    BatchType,
    FullSerialRecord,
    IdentifierMapping,
    IssuedBatch,
    IssuedSerial,
    PackSize,
)

if TYPE_CHECKING:
    from seedtrace.utils.cache import ResolutionCache

logger = logging.getLogger(__name__)

DecodedIdentifier = Union[BatchRecord, FullSerialRecord]

DEFAULT_MAX_BULK_SERIALS = 10_000


class IdentifierService:
    def __init__(
        self,
        allocator: SequenceAllocator,
        store: MappingStore,
        cache: "ResolutionCache | None" = None,
        default_requested_by: str = "SYSTEM",
        max_bulk_serials: int = DEFAULT_MAX_BULK_SERIALS,
        today: Callable[[], date] = date.today,
    ):
        self.allocator = allocator
        self.store = store
        self.cache = cache
        self.default_requested_by = default_requested_by
        self.max_bulk_serials = max_bulk_serials
        self._today = today

    # ── Issue ────────────────────────────────────────────────

    async def issue_batch(
        self,
        site_id: int,
        batch_type: BatchType,
        batch_date: date | None = None,
        requested_by: str | None = None,
    ) -> IssuedBatch:
        """Allocate and record the next batch number for site/type/date."""
        user = requested_by or self.default_requested_by
        batch_date = check_date("batch_date", batch_date or self._today())
        if batch_date > self._today():
            raise FieldOutOfRange("batch_date", batch_date, "today or earlier")
        check_range("site_id", site_id, 1, MAX_SITE_ID)
        encode_batch_type(batch_type)
        batch_type = BatchType(batch_type)

        logger.debug(
            f"Issuing batch number for site {site_id}, type {batch_type.name}, date {batch_date}"
        )

        sequence = await self.allocator.allocate_batch_sequence(
            site_id, batch_type, batch_date, requested_by=user
        )
        record = BatchRecord(
            site_id=site_id,
            batch_type=batch_type,
            batch_date=batch_date,
            sequence=sequence,
        )
        batch_number = batch_codec.encode(record)

        try:
            await self.store.record_batch(batch_number, record, requested_by=user)
        except MappingError:
            logger.error(
                f"Batch number {batch_number} already recorded, allocator invariant broken",
                extra={"batch_number": batch_number},
            )
            raise

        logger.info(
            f"Issued batch number {batch_number} for site {site_id}, "
            f"type {batch_type.name}, date {batch_date}"
        )
        return IssuedBatch(batch_number=batch_number, record=record)

    async def issue_serial(
        self,
        batch_number: str,
        strain_code: int,
        weight_tenths_gram: int,
        pack_size: PackSize,
        requested_by: str | None = None,
    ) -> IssuedSerial:
        """Allocate a unit of ``batch_number`` and persist its short↔full pair.

        Either the mapping is created or nothing is persisted; the consumed
        unit and short sequences are never reused.
        """
        user = requested_by or self.default_requested_by
        batch = batch_codec.decode(batch_number)
        if not await self.store.batch_exists(batch_number):
            raise IdentifierNotFound("Batch number", batch_number)

        # Validate caller fields before any number is consumed
        prototype = FullSerialRecord(
            site_id=batch.site_id,
            strain_code=strain_code,
            batch_type=batch.batch_type,
            batch_date=batch.batch_date,
            batch_sequence=batch.sequence,
            unit_sequence=1,
            weight_tenths_gram=weight_tenths_gram,
            pack_size=pack_size,
        )
        serial_codec.validate_full_fields(prototype)

        unit_sequence = await self.allocator.allocate_unit_sequence(
            batch_number, requested_by=user
        )
        short_sequence = await self.allocator.allocate_short_sequence(
            batch.site_id, batch.batch_date, requested_by=user
        )

        record = replace(
            prototype, unit_sequence=unit_sequence, pack_size=PackSize(pack_size)
        )
        full_serial = serial_codec.encode_full(record)
        short_serial = serial_codec.encode_short(
            batch.site_id, batch.batch_date, short_sequence
        )
        mapping = IdentifierMapping(
            full_serial=full_serial,
            short_serial=short_serial,
            batch_number=batch_number,
            record=record,
        )

        try:
            await self.store.create_mapping(mapping, requested_by=user)
        except MappingError as exc:
            logger.error(
                f"Mapping {short_serial} <-> {full_serial} rejected: {exc.error_code}",
                extra={"short_serial": short_serial, "full_serial": full_serial},
            )
            raise

        logger.info(
            f"Issued serial {short_serial} (full {full_serial}) in batch {batch_number}"
        )
        return IssuedSerial(full_serial=full_serial, short_serial=short_serial, record=record)

    async def issue_serials(
        self,
        count: int,
        batch_number: str,
        strain_code: int,
        weight_tenths_gram: int,
        pack_size: PackSize,
        requested_by: str | None = None,
    ) -> list[IssuedSerial]:
        """Issue ``count`` serials into the same batch, in unit order."""
        check_range("count", count, 1, self.max_bulk_serials)

        logger.info(f"Issuing {count} serials in batch {batch_number}")
        results = []
        for _ in range(count):
            results.append(
                await self.issue_serial(
                    batch_number, strain_code, weight_tenths_gram, pack_size, requested_by
                )
            )
        return results

    # ── Read ─────────────────────────────────────────────────

    async def resolve_short(self, short_serial: str) -> str:
        """Full serial for a short serial, or IdentifierNotFound."""
        serial_codec.parse_short(short_serial)

        if self.cache is not None:
            cached = await self.cache.get(short_serial)
            if cached is not None:
                return cached

        full_serial = await self.store.resolve_short_to_full(short_serial)

        if self.cache is not None:
            await self.cache.set(short_serial, full_serial)
        return full_serial

    async def resolve_full(self, full_serial: str) -> str:
        return await self.store.resolve_full_to_short(full_serial)

    async def list_batch_serials(self, batch_number: str) -> list[IdentifierMapping]:
        batch_codec.decode(batch_number)
        if not await self.store.batch_exists(batch_number):
            raise IdentifierNotFound("Batch number", batch_number)
        return await self.store.list_serials(batch_number)

    async def current_batch_sequence(
        self, site_id: int, batch_type: BatchType, batch_date: date
    ) -> int:
        return await self.allocator.current_batch_sequence(site_id, batch_type, batch_date)

    async def decode(self, identifier: str) -> DecodedIdentifier:
        """Decode a batch number, full serial or (via the store) short serial."""
        length = len(identifier) if isinstance(identifier, str) else -1

        if length == BATCH_NUMBER_LENGTH:
            return batch_codec.decode(identifier)
        if length == FULL_SERIAL_LENGTH:
            return serial_codec.decode_full(identifier)
        if length == SHORT_SERIAL_LENGTH:
            return serial_codec.decode_full(await self.resolve_short(identifier))

        raise InvalidLength(
            f"Identifier must be {BATCH_NUMBER_LENGTH}, {SHORT_SERIAL_LENGTH} "
            f"or {FULL_SERIAL_LENGTH} digits, got {max(length, 0)}",
            identifier if isinstance(identifier, str) else None,
        )

    async def validate(self, identifier: str) -> bool:
        """True when ``identifier`` is well formed and, where it carries no
        check digit, known to this installation."""
        if not isinstance(identifier, str):
            return False

        try:
            if len(identifier) == FULL_SERIAL_LENGTH:
                serial_codec.decode_full(identifier)
                return True
            if len(identifier) == BATCH_NUMBER_LENGTH:
                batch_codec.decode(identifier)
                return await self.store.batch_exists(identifier)
            if len(identifier) == SHORT_SERIAL_LENGTH:
                await self.resolve_short(identifier)
                return True
        except (DecodingError, IdentifierNotFound):
            return False
        return False
