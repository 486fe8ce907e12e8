"""Tests for 16-digit batch numbers."""

from datetime import date

import pytest

from seedtrace.identifiers import batch_codec
from seedtrace.identifiers.errors import (
    FieldOutOfRange,
    InvalidBatchType,
    InvalidCharacters,
    InvalidDate,
    InvalidField,
    InvalidLength,
)
from seedtrace.identifiers.types import BatchRecord, BatchType


@pytest.mark.unit
class TestEncode:
    def test_reference_batch_number(self):
        record = BatchRecord(1, BatchType.PRODUCTION, date(2025, 12, 6), 1)
        assert batch_codec.encode(record) == "0110202512060001"

    def test_upper_bounds(self):
        record = BatchRecord(99, BatchType.QUARANTINE, date(2099, 1, 31), 9999)
        assert batch_codec.encode(record) == "9980209901319999"

    def test_every_batch_type_round_trips(self):
        for batch_type in BatchType:
            record = BatchRecord(7, batch_type, date(2025, 3, 1), 42)
            assert batch_codec.decode(batch_codec.encode(record)) == record

    def test_int_batch_type_is_accepted(self):
        record = BatchRecord(1, 20, date(2025, 12, 6), 1)
        assert batch_codec.encode(record) == "0120202512060001"

    @pytest.mark.parametrize("record,field", [
        (BatchRecord(0, BatchType.PRODUCTION, date(2025, 12, 6), 1), "site_id"),
        (BatchRecord(100, BatchType.PRODUCTION, date(2025, 12, 6), 1), "site_id"),
        (BatchRecord(1, BatchType.PRODUCTION, date(2025, 12, 6), 0), "sequence"),
        (BatchRecord(1, BatchType.PRODUCTION, date(2025, 12, 6), 10000), "sequence"),
        (BatchRecord(1, 15, date(2025, 12, 6), 1), "batch_type"),
        (BatchRecord(1, BatchType.PRODUCTION, date(999, 1, 1), 1), "batch_date"),
        (BatchRecord(True, BatchType.PRODUCTION, date(2025, 12, 6), 1), "site_id"),
    ])
    def test_out_of_range_fields(self, record, field):
        with pytest.raises(FieldOutOfRange) as exc_info:
            batch_codec.encode(record)
        assert exc_info.value.field == field
        assert exc_info.value.status_code == 422


@pytest.mark.unit
class TestDecode:
    def test_reference_batch_number(self):
        record = batch_codec.decode("0110202512060001")

        assert record.site_id == 1
        assert record.batch_type is BatchType.PRODUCTION
        assert record.batch_date == date(2025, 12, 6)
        assert record.sequence == 1

    @pytest.mark.parametrize("value,error", [
        ("011020251206001", InvalidLength),
        ("01102025120600011", InvalidLength),
        ("011020251206000A", InvalidCharacters),
        ("0115202512060001", InvalidBatchType),
        ("0100202512060001", InvalidBatchType),
        ("0110202513060001", InvalidDate),
        ("0110202502300001", InvalidDate),
        ("0010202512060001", InvalidField),
        ("0110202512060000", InvalidField),
    ])
    def test_malformed_batch_numbers(self, value, error):
        with pytest.raises(error) as exc_info:
            batch_codec.decode(value)
        assert exc_info.value.identifier == value

    def test_non_string_is_rejected(self):
        with pytest.raises(InvalidCharacters):
            batch_codec.decode(110202512060001)
