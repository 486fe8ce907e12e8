"""SQL-backed mapping store (serial_mappings + issued_batches).

Uniqueness is enforced by the database: the short/full pair goes in with a
single INSERT against two unique constraints, so concurrent inserts of the
same value have exactly one winner.  The loser's IntegrityError is then
classified into DuplicateFull / DuplicateShort by looking at what the
winner committed.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from seedtrace.identifiers.errors import (
    DuplicateBatch,
    DuplicateFull,
    DuplicateShort,
    IdentifierNotFound,
)
from seedtrace.identifiers.types import (
    BatchRecord,
    BatchType,
    FullSerialRecord,
    IdentifierMapping,
    PackSize,
)
from seedtrace.models.issued_batch import IssuedBatchNumber
from seedtrace.models.serial_mapping import SerialMapping

logger = logging.getLogger(__name__)


def _to_mapping(row: SerialMapping) -> IdentifierMapping:
    return IdentifierMapping(
        full_serial=row.full_serial,
        short_serial=row.short_serial,
        batch_number=row.batch_number,
        record=FullSerialRecord(
            site_id=row.site_id,
            strain_code=row.strain_code,
            batch_type=BatchType(row.batch_type),
            batch_date=row.batch_date,
            batch_sequence=row.batch_sequence,
            unit_sequence=row.unit_sequence,
            weight_tenths_gram=row.weight_tenths_gram,
            pack_size=PackSize(row.pack_size),
        ),
    )


class SqlMappingStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def _exists(self, session: AsyncSession, column, value: str) -> bool:
        result = await session.execute(select(column).where(column == value).limit(1))
        return result.first() is not None

    # ── Batches ──────────────────────────────────────────────

    async def record_batch(
        self, batch_number: str, record: BatchRecord, requested_by: str | None = None
    ) -> None:
        async with self._session_factory() as session:
            session.add(IssuedBatchNumber(
                batch_number=batch_number,
                site_id=record.site_id,
                batch_type=int(record.batch_type),
                batch_date=record.batch_date,
                sequence=record.sequence,
                requested_by=requested_by,
            ))
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateBatch(batch_number) from exc

    async def batch_exists(self, batch_number: str) -> bool:
        async with self._session_factory() as session:
            return await self._exists(session, IssuedBatchNumber.batch_number, batch_number)

    # ── Serial mappings ──────────────────────────────────────

    async def create_mapping(
        self, mapping: IdentifierMapping, requested_by: str | None = None
    ) -> None:
        record = mapping.record
        async with self._session_factory() as session:
            session.add(SerialMapping(
                full_serial=mapping.full_serial,
                short_serial=mapping.short_serial,
                batch_number=mapping.batch_number,
                site_id=record.site_id,
                strain_code=record.strain_code,
                batch_type=int(record.batch_type),
                batch_date=record.batch_date,
                batch_sequence=record.batch_sequence,
                unit_sequence=record.unit_sequence,
                weight_tenths_gram=record.weight_tenths_gram,
                pack_size=int(record.pack_size),
                requested_by=requested_by,
            ))
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                if await self._exists(session, SerialMapping.full_serial, mapping.full_serial):
                    raise DuplicateFull(mapping.full_serial) from exc
                if await self._exists(session, SerialMapping.short_serial, mapping.short_serial):
                    raise DuplicateShort(mapping.short_serial) from exc
                raise

    async def resolve_short_to_full(self, short_serial: str) -> str:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SerialMapping.full_serial).where(
                    SerialMapping.short_serial == short_serial
                )
            )
            full_serial = result.scalar_one_or_none()
        if full_serial is None:
            raise IdentifierNotFound("Short serial", short_serial)
        return full_serial

    async def resolve_full_to_short(self, full_serial: str) -> str:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SerialMapping.short_serial).where(
                    SerialMapping.full_serial == full_serial
                )
            )
            short_serial = result.scalar_one_or_none()
        if short_serial is None:
            raise IdentifierNotFound("Full serial", full_serial)
        return short_serial

    async def list_serials(self, batch_number: str) -> list[IdentifierMapping]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SerialMapping)
                .where(SerialMapping.batch_number == batch_number)
                .order_by(SerialMapping.unit_sequence)
            )
            return [_to_mapping(row) for row in result.scalars().all()]
