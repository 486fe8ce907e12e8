"""Pydantic schemas for the identifier endpoints."""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from seedtrace.identifiers.types import (
    BatchRecord,
    BatchType,
    FullSerialRecord,
    IdentifierMapping,
    IssuedSerial,
    PackSize,
    StrainFamily,
)


# ── Batch numbers ────────────────────────────────────────────

class BatchIssueRequest(BaseModel):
    """Payload for POST /api/identifiers/batches.

    ``batch_date`` defaults to today; future dates are rejected.
    """
    site_id: int = Field(..., ge=1, le=99)
    batch_type: BatchType
    batch_date: date | None = None
    requested_by: str | None = Field(None, max_length=100)


class BatchOut(BaseModel):
    kind: Literal["batch"] = "batch"
    batch_number: str | None = None
    site_id: int
    batch_type: BatchType
    batch_type_label: str
    batch_date: date
    sequence: int

    @classmethod
    def from_record(cls, record: BatchRecord, batch_number: str | None = None) -> "BatchOut":
        return cls(
            batch_number=batch_number,
            site_id=record.site_id,
            batch_type=record.batch_type,
            batch_type_label=record.batch_type.label,
            batch_date=record.batch_date,
            sequence=record.sequence,
        )


# ── Serial numbers ───────────────────────────────────────────

class SerialIssueRequest(BaseModel):
    """Payload for POST /api/identifiers/serials.

    Give the weight either in tenths of a gram or in grams (at most one
    decimal place).  ``count`` > 1 issues a run of serials in one call.
    """
    batch_number: str = Field(..., min_length=16, max_length=16)
    strain_code: int = Field(..., ge=100, le=999)
    weight_tenths_gram: int | None = Field(None, ge=0, le=9999)
    weight_grams: Decimal | None = Field(None, ge=0, le=Decimal("999.9"))
    pack_size: PackSize = PackSize.SINGLE
    count: int = Field(1, ge=1)
    requested_by: str | None = Field(None, max_length=100)

    @model_validator(mode="after")
    def one_weight_required(self):
        if (self.weight_tenths_gram is None) == (self.weight_grams is None):
            raise ValueError("Provide exactly one of weight_tenths_gram or weight_grams")
        if self.weight_grams is not None:
            tenths = self.weight_grams * 10
            if tenths != tenths.to_integral_value():
                raise ValueError("weight_grams supports at most one decimal place")
            self.weight_tenths_gram = int(tenths)
        return self


class SerialRecordOut(BaseModel):
    kind: Literal["full_serial"] = "full_serial"
    site_id: int
    strain_code: int
    strain_family: StrainFamily
    batch_type: BatchType
    batch_date: date
    batch_sequence: int
    unit_sequence: int
    weight_tenths_gram: int
    weight_grams: Decimal
    pack_size: PackSize

    @classmethod
    def from_record(cls, record: FullSerialRecord) -> "SerialRecordOut":
        return cls(
            site_id=record.site_id,
            strain_code=record.strain_code,
            strain_family=record.strain_family,
            batch_type=record.batch_type,
            batch_date=record.batch_date,
            batch_sequence=record.batch_sequence,
            unit_sequence=record.unit_sequence,
            weight_tenths_gram=record.weight_tenths_gram,
            weight_grams=record.weight_grams,
            pack_size=record.pack_size,
        )


class SerialOut(BaseModel):
    full_serial: str
    short_serial: str
    batch_number: str | None = None
    record: SerialRecordOut

    @classmethod
    def from_issued(cls, issued: IssuedSerial, batch_number: str) -> "SerialOut":
        return cls(
            full_serial=issued.full_serial,
            short_serial=issued.short_serial,
            batch_number=batch_number,
            record=SerialRecordOut.from_record(issued.record),
        )

    @classmethod
    def from_mapping(cls, mapping: IdentifierMapping) -> "SerialOut":
        return cls(
            full_serial=mapping.full_serial,
            short_serial=mapping.short_serial,
            batch_number=mapping.batch_number,
            record=SerialRecordOut.from_record(mapping.record),
        )


# ── Lookups ──────────────────────────────────────────────────

class ValidationOut(BaseModel):
    identifier: str
    valid: bool


class ResolutionOut(BaseModel):
    short_serial: str
    full_serial: str
