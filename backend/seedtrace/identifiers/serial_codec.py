"""Serial number codec.

Full serial (30 digits, QR codes):

  SS SSS TT YYYYMMDD BBBB UUUUU WWWW Q C
  |  |   |  |        |    |     |    | └ check digit over the first 29
  |  |   |  |        |    |     |    └── pack size (0 = bulk)
  |  |   |  |        |    |     └─────── weight in tenths of a gram
  |  |   |  |        |    └───────────── unit sequence within the batch
  |  |   |  |        └────────────────── batch sequence
  |  |   |  └─────────────────────────── batch date
  |  |   └────────────────────────────── batch type
  |  └────────────────────────────────── strain code (1xx sativa, 2xx indica, ...)
  └───────────────────────────────────── site id

Short serial (13 digits, barcodes): SS YYMMDD NNNNN.  The short form has
no check digit; it is only trustworthy once resolved through the mapping
store.
"""

from datetime import date

from seedtrace.identifiers import checksum
from seedtrace.identifiers.batch_codec import decode_batch_type, encode_batch_type
from seedtrace.identifiers.errors import (
    ChecksumMismatch,
    FieldOutOfRange,
    InvalidStrainFamily,
)
from seedtrace.identifiers.fields import (
    check_date,
    check_range,
    parse_date,
    parse_positive,
    require_digits,
)
from seedtrace.identifiers.types import (
    FULL_SERIAL_LENGTH,
    MAX_BATCH_SEQUENCE,
    MAX_SHORT_SEQUENCE,
    MAX_SITE_ID,
    MAX_STRAIN_CODE,
    MAX_UNIT_SEQUENCE,
    MAX_WEIGHT_TENTHS,
    MIN_STRAIN_CODE,
    SHORT_SERIAL_LENGTH,
    FullSerialRecord,
    PackSize,
    ShortSerialRecord,
)


def encode_pack_size(pack_size: PackSize) -> str:
    try:
        return str(PackSize(pack_size).value)
    except ValueError:
        raise FieldOutOfRange("pack_size", pack_size, "0-9") from None


def validate_full_fields(record: FullSerialRecord) -> None:
    """Raise FieldOutOfRange for the first field that cannot be encoded."""
    check_range("site_id", record.site_id, 1, MAX_SITE_ID)
    check_range("strain_code", record.strain_code, MIN_STRAIN_CODE, MAX_STRAIN_CODE)
    encode_batch_type(record.batch_type)
    check_date("batch_date", record.batch_date)
    check_range("batch_sequence", record.batch_sequence, 1, MAX_BATCH_SEQUENCE)
    check_range("unit_sequence", record.unit_sequence, 1, MAX_UNIT_SEQUENCE)
    check_range("weight_tenths_gram", record.weight_tenths_gram, 0, MAX_WEIGHT_TENTHS)
    encode_pack_size(record.pack_size)


def encode_full(record: FullSerialRecord) -> str:
    """Encode every field of ``record`` and append the check digit."""
    validate_full_fields(record)

    payload = (
        f"{record.site_id:02d}"
        f"{record.strain_code:03d}"
        f"{encode_batch_type(record.batch_type)}"
        f"{check_date('batch_date', record.batch_date):%Y%m%d}"
        f"{record.batch_sequence:04d}"
        f"{record.unit_sequence:05d}"
        f"{record.weight_tenths_gram:04d}"
        f"{encode_pack_size(record.pack_size)}"
    )
    return checksum.append(payload)


def encode_short(site_id: int, serial_date: date, sequence: int) -> str:
    """Encode the 13-digit short serial SS + YYMMDD + NNNNN."""
    check_range("site_id", site_id, 1, MAX_SITE_ID)
    serial_date = check_date("serial_date", serial_date)
    check_range("sequence", sequence, 1, MAX_SHORT_SEQUENCE)

    return f"{site_id:02d}{serial_date:%y%m%d}{sequence:05d}"


def decode_full(serial: str) -> FullSerialRecord:
    """Decode a 30-digit full serial.

    Order of checks: length, characters, check digit, then fields.  A
    corrupted scan therefore reports ChecksumMismatch before any field error.
    """
    require_digits(serial, FULL_SERIAL_LENGTH, "Full serial")
    if not checksum.verify(serial, FULL_SERIAL_LENGTH):
        raise ChecksumMismatch("Check digit does not match", serial)

    strain_code = int(serial[2:5])
    if strain_code < MIN_STRAIN_CODE:
        raise InvalidStrainFamily(f"Strain code {serial[2:5]!r} has no family digit", serial)

    return FullSerialRecord(
        site_id=parse_positive("site_id", serial[0:2], serial),
        strain_code=strain_code,
        batch_type=decode_batch_type(serial[5:7], serial),
        batch_date=parse_date(serial[7:15], "%Y%m%d", serial),
        batch_sequence=parse_positive("batch_sequence", serial[15:19], serial),
        unit_sequence=parse_positive("unit_sequence", serial[19:24], serial),
        weight_tenths_gram=int(serial[24:28]),
        pack_size=PackSize(int(serial[28])),
    )


def parse_short(serial: str) -> ShortSerialRecord:
    """Structurally parse a short serial.

    This proves nothing about whether the serial was ever issued.
    """
    require_digits(serial, SHORT_SERIAL_LENGTH, "Short serial")

    return ShortSerialRecord(
        site_id=parse_positive("site_id", serial[0:2], serial),
        serial_date=parse_date(serial[2:8], "%y%m%d", serial),
        sequence=parse_positive("sequence", serial[8:13], serial),
    )
