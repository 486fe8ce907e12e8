"""SQL-backed sequence counters.

Each allocation is a single statement, committed on its own:

    INSERT INTO sequence_counters (scope_kind, scope_key, last_value, ...)
    VALUES (:kind, :key, 1, ...)
    ON CONFLICT (scope_kind, scope_key) DO UPDATE
        SET last_value = sequence_counters.last_value + 1
        WHERE sequence_counters.last_value < sequence_counters.ceiling
    RETURNING last_value

The database row lock is the per-scope mutex: two writers on the same scope
serialise on that row, writers on different scopes never meet.  No row
comes back when the guard fails, which is how exhaustion is detected
without touching the counter.

Works on PostgreSQL and on SQLite >= 3.35 (both support upsert RETURNING).
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from seedtrace.identifiers.allocator import SequenceScope
from seedtrace.identifiers.errors import SequenceExhausted
from seedtrace.models.sequence_counter import SequenceCounter

logger = logging.getLogger(__name__)

_UPSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlCounterStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def increment(
        self, scope: SequenceScope, ceiling: int, requested_by: str | None = None
    ) -> int:
        now = datetime.utcnow()

        async with self._session_factory() as session:
            dialect = session.bind.dialect.name
            try:
                insert = _UPSERT_BY_DIALECT[dialect]
            except KeyError:
                raise NotImplementedError(
                    f"Atomic counters are not supported on {dialect}"
                ) from None

            stmt = (
                insert(SequenceCounter)
                .values(
                    id=str(uuid.uuid4()),
                    scope_kind=scope.kind,
                    scope_key=scope.key,
                    last_value=1,
                    ceiling=ceiling,
                    created_at=now,
                    last_issued_at=now,
                    last_issued_by=requested_by,
                )
                .on_conflict_do_update(
                    index_elements=["scope_kind", "scope_key"],
                    set_={
                        "last_value": SequenceCounter.last_value + 1,
                        "last_issued_at": now,
                        "last_issued_by": requested_by,
                    },
                    where=SequenceCounter.last_value < SequenceCounter.ceiling,
                )
                .returning(SequenceCounter.last_value)
            )

            try:
                value = (await session.execute(stmt)).scalar_one_or_none()
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        if value is None:
            raise SequenceExhausted(str(scope), ceiling)
        return value

    async def current(self, scope: SequenceScope) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SequenceCounter.last_value).where(
                    SequenceCounter.scope_kind == scope.kind,
                    SequenceCounter.scope_key == scope.key,
                )
            )
            return result.scalar_one_or_none() or 0
