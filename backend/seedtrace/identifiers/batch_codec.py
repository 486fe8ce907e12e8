"""Batch number codec, 16 digits, SSTTYYYYMMDDNNNN.

  SS        site id (01-99)
  TT        batch type code (10, 20, ... 90)
  YYYYMMDD  batch date
  NNNN      daily sequence per site/type (0001-9999)

Example: 0110202512060001 = site 01, Production, 2025-12-06, batch #1
"""

from seedtrace.identifiers.errors import FieldOutOfRange, InvalidBatchType
from seedtrace.identifiers.fields import (
    check_date,
    check_range,
    parse_date,
    parse_positive,
    require_digits,
)
from seedtrace.identifiers.types import (
    BATCH_NUMBER_LENGTH,
    MAX_BATCH_SEQUENCE,
    MAX_SITE_ID,
    BatchRecord,
    BatchType,
)


def encode_batch_type(batch_type: BatchType) -> str:
    try:
        return f"{BatchType(batch_type).value:02d}"
    except ValueError:
        allowed = ",".join(str(t.value) for t in BatchType)
        raise FieldOutOfRange("batch_type", batch_type, f"one of {allowed}") from None


def decode_batch_type(code: str, identifier: str) -> BatchType:
    try:
        return BatchType(int(code))
    except ValueError:
        raise InvalidBatchType(f"Unknown batch type code {code!r}", identifier) from None


def encode(record: BatchRecord) -> str:
    """Encode a batch record as its 16-digit batch number."""
    site_id = check_range("site_id", record.site_id, 1, MAX_SITE_ID)
    type_code = encode_batch_type(record.batch_type)
    batch_date = check_date("batch_date", record.batch_date)
    sequence = check_range("sequence", record.sequence, 1, MAX_BATCH_SEQUENCE)

    return (
        f"{site_id:02d}"
        f"{type_code}"
        f"{batch_date:%Y%m%d}"
        f"{sequence:04d}"
    )


def decode(batch_number: str) -> BatchRecord:
    """Decode a 16-digit batch number.

    Raises:
        InvalidLength, InvalidCharacters, InvalidBatchType, InvalidDate,
        InvalidField (site 00 or sequence 0000).
    """
    require_digits(batch_number, BATCH_NUMBER_LENGTH, "Batch number")

    return BatchRecord(
        site_id=parse_positive("site_id", batch_number[0:2], batch_number),
        batch_type=decode_batch_type(batch_number[2:4], batch_number),
        batch_date=parse_date(batch_number[4:12], "%Y%m%d", batch_number),
        sequence=parse_positive("sequence", batch_number[12:16], batch_number),
    )
