"""Typed records and enumerations for batch and serial identifiers.

Enumerations are mapped to their digit codes only at the codec boundary;
everything inside the engine passes these types around, never raw strings.

Formats:
  batch number   SS TT YYYYMMDD NNNN                              16 digits
  full serial    SS SSS TT YYYYMMDD BBBB UUUUU WWWW Q C           30 digits
  short serial   SS YYMMDD NNNNN                                  13 digits
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum, IntEnum


BATCH_NUMBER_LENGTH = 16
FULL_SERIAL_LENGTH = 30
SHORT_SERIAL_LENGTH = 13

MAX_SITE_ID = 99
MAX_BATCH_SEQUENCE = 9999
MAX_UNIT_SEQUENCE = 99999
MAX_SHORT_SEQUENCE = 99999
MIN_STRAIN_CODE = 100
MAX_STRAIN_CODE = 999
MAX_WEIGHT_TENTHS = 9999


class BatchType(IntEnum):
    """Record type of a batch (the TT component)."""

    PRODUCTION = 10
    TRANSFER = 20
    STOCK_TAKE = 30
    ADJUSTMENT = 40
    RETURN_TO_SUPPLIER = 50
    DESTRUCTION = 60
    CUSTOMER_RETURN = 70
    QUARANTINE = 80
    RESERVED = 90

    @property
    def label(self) -> str:
        return _BATCH_TYPE_LABELS[self]


_BATCH_TYPE_LABELS = {
    BatchType.PRODUCTION: "Production",
    BatchType.TRANSFER: "Transfer",
    BatchType.STOCK_TAKE: "Stock Take",
    BatchType.ADJUSTMENT: "Adjustment",
    BatchType.RETURN_TO_SUPPLIER: "Return to Supplier",
    BatchType.DESTRUCTION: "Destruction/Waste",
    BatchType.CUSTOMER_RETURN: "Customer Return",
    BatchType.QUARANTINE: "Quarantine",
    BatchType.RESERVED: "Reserved",
}


class StrainFamily(str, Enum):
    """Strain family, taken from the leading digit of the strain code."""

    SATIVA = "sativa"
    INDICA = "indica"
    HYBRID = "hybrid"
    CBD = "cbd"
    RESERVED = "reserved"  # leading digits 5-9


_FAMILY_BY_DIGIT = {
    1: StrainFamily.SATIVA,
    2: StrainFamily.INDICA,
    3: StrainFamily.HYBRID,
    4: StrainFamily.CBD,
}


def strain_family(strain_code: int) -> StrainFamily:
    """Return the family of a 100-999 strain code."""
    return _FAMILY_BY_DIGIT.get(strain_code // 100, StrainFamily.RESERVED)


class PackSize(IntEnum):
    """Units per pack (the Q component). 0 means bulk."""

    BULK = 0
    SINGLE = 1
    PAIR = 2
    TRIPLE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9


# ── Records ──────────────────────────────────────────────────


@dataclass(frozen=True)
class BatchRecord:
    site_id: int
    batch_type: BatchType
    batch_date: date
    sequence: int

    @property
    def scope(self) -> tuple[int, BatchType, date]:
        return (self.site_id, self.batch_type, self.batch_date)


@dataclass(frozen=True)
class FullSerialRecord:
    """Every field embedded in a full serial (check digit excluded)."""

    site_id: int
    strain_code: int
    batch_type: BatchType
    batch_date: date
    batch_sequence: int
    unit_sequence: int
    weight_tenths_gram: int
    pack_size: PackSize

    @property
    def strain_family(self) -> StrainFamily:
        return strain_family(self.strain_code)

    @property
    def weight_grams(self) -> Decimal:
        return Decimal(self.weight_tenths_gram) / 10

    @property
    def batch(self) -> BatchRecord:
        """The owning batch this unit was serialised under."""
        return BatchRecord(
            site_id=self.site_id,
            batch_type=self.batch_type,
            batch_date=self.batch_date,
            sequence=self.batch_sequence,
        )


@dataclass(frozen=True)
class ShortSerialRecord:
    site_id: int
    serial_date: date
    sequence: int


@dataclass(frozen=True)
class IdentifierMapping:
    """A short↔full pair plus the decoded fields kept for querying."""

    full_serial: str
    short_serial: str
    batch_number: str
    record: FullSerialRecord


@dataclass(frozen=True)
class IssuedBatch:
    batch_number: str
    record: BatchRecord


@dataclass(frozen=True)
class IssuedSerial:
    full_serial: str
    short_serial: str
    record: FullSerialRecord
