"""Tests for sequence allocation over the in-memory counter store."""

import asyncio
from datetime import date

import pytest

from seedtrace.identifiers.allocator import InMemoryCounterStore, SequenceAllocator, SequenceScope
from seedtrace.identifiers.errors import FieldOutOfRange, SequenceExhausted
from seedtrace.identifiers.types import BatchType

DAY = date(2025, 12, 6)


@pytest.mark.unit
class TestSequenceScope:
    def test_batch_scope_key(self):
        scope = SequenceScope.batch(1, BatchType.PRODUCTION, DAY)
        assert scope == SequenceScope("batch", "01:10:20251206")
        assert str(scope) == "batch:01:10:20251206"

    def test_unit_and_short_scopes(self):
        assert SequenceScope.unit("0110202512060001").key == "0110202512060001"
        assert SequenceScope.short(7, DAY).key == "07:251206"

    def test_short_scope_follows_the_encoded_year(self):
        # The short serial carries YYMMDD, so 1925 and 2025 share a prefix
        assert SequenceScope.short(1, date(1925, 12, 6)) == SequenceScope.short(1, DAY)


@pytest.mark.unit
@pytest.mark.asyncio
class TestSequenceAllocator:
    async def test_first_allocation_is_one(self, allocator):
        assert await allocator.allocate_batch_sequence(1, BatchType.PRODUCTION, DAY) == 1
        assert await allocator.allocate_batch_sequence(1, BatchType.PRODUCTION, DAY) == 2

    async def test_concurrent_allocations_are_dense_and_unique(self, allocator):
        await allocator.allocate_batch_sequence(1, BatchType.PRODUCTION, DAY)

        values = await asyncio.gather(*(
            allocator.allocate_batch_sequence(1, BatchType.PRODUCTION, DAY)
            for _ in range(200)
        ))

        assert sorted(values) == list(range(2, 202))

    async def test_scopes_are_independent(self, allocator):
        for _ in range(3):
            await allocator.allocate_batch_sequence(1, BatchType.PRODUCTION, DAY)

        assert await allocator.allocate_batch_sequence(2, BatchType.PRODUCTION, DAY) == 1
        assert await allocator.allocate_batch_sequence(1, BatchType.TRANSFER, DAY) == 1
        assert await allocator.allocate_batch_sequence(
            1, BatchType.PRODUCTION, date(2025, 12, 7)
        ) == 1
        assert await allocator.allocate_batch_sequence(1, BatchType.PRODUCTION, DAY) == 4

    async def test_unit_and_short_counters_do_not_share_state(self, allocator):
        assert await allocator.allocate_unit_sequence("0110202512060001") == 1
        assert await allocator.allocate_unit_sequence("0110202512060001") == 2
        assert await allocator.allocate_unit_sequence("0110202512060002") == 1
        assert await allocator.allocate_short_sequence(1, DAY) == 1

    async def test_batch_ceiling(self, counter_store, allocator):
        scope = SequenceScope.batch(1, BatchType.PRODUCTION, DAY)
        counter_store._values[scope] = 9998

        assert await allocator.allocate_batch_sequence(1, BatchType.PRODUCTION, DAY) == 9999
        with pytest.raises(SequenceExhausted) as exc_info:
            await allocator.allocate_batch_sequence(1, BatchType.PRODUCTION, DAY)

        assert exc_info.value.ceiling == 9999
        assert exc_info.value.status_code == 409
        # Exhaustion leaves the counter untouched
        assert await allocator.current_batch_sequence(1, BatchType.PRODUCTION, DAY) == 9999

    async def test_unit_ceiling(self, counter_store, allocator):
        counter_store._values[SequenceScope.unit("0110202512060001")] = 99998

        assert await allocator.allocate_unit_sequence("0110202512060001") == 99999
        with pytest.raises(SequenceExhausted):
            await allocator.allocate_unit_sequence("0110202512060001")

    async def test_short_ceiling(self, counter_store, allocator):
        counter_store._values[SequenceScope.short(1, DAY)] = 99999

        with pytest.raises(SequenceExhausted):
            await allocator.allocate_short_sequence(1, DAY)

    async def test_current_is_zero_for_unseen_scope(self, allocator):
        assert await allocator.current_batch_sequence(5, BatchType.ADJUSTMENT, DAY) == 0

    @pytest.mark.parametrize("site_id", [0, 100])
    async def test_site_out_of_range(self, allocator, site_id):
        with pytest.raises(FieldOutOfRange):
            await allocator.allocate_batch_sequence(site_id, BatchType.PRODUCTION, DAY)

    async def test_invalid_batch_type(self, allocator):
        with pytest.raises(FieldOutOfRange):
            await allocator.allocate_batch_sequence(1, 11, DAY)


@pytest.mark.unit
@pytest.mark.asyncio
class TestInMemoryCounterStore:
    async def test_increment_respects_ceiling(self):
        store = InMemoryCounterStore()
        scope = SequenceScope("batch", "test")

        assert [await store.increment(scope, 2) for _ in range(2)] == [1, 2]
        with pytest.raises(SequenceExhausted):
            await store.increment(scope, 2)
        assert await store.current(scope) == 2

    async def test_idle_locks_are_released(self):
        store = InMemoryCounterStore()
        scopes = [SequenceScope("unit", f"{n:016d}") for n in range(50)]

        for scope in scopes:
            await store.increment(scope, 99999)
        values = await asyncio.gather(*(store.increment(scopes[0], 99999) for _ in range(20)))

        assert sorted(values) == list(range(2, 22))
        assert store._locks == {}
        assert store._users == {}
        assert await store.current(scopes[1]) == 1

    async def test_lock_is_released_after_exhaustion(self):
        store = InMemoryCounterStore()
        scope = SequenceScope("short", "01:251206")

        await store.increment(scope, 1)
        with pytest.raises(SequenceExhausted):
            await store.increment(scope, 1)

        assert store._locks == {}
