"""Identifier router: batch numbers, serials, decode and resolve.

Endpoints:
    POST   /api/identifiers/batches                          Issue a batch number
    POST   /api/identifiers/serials                          Issue one or more serials
    GET    /api/identifiers/batches/{batch_number}/serials   Serials issued in a batch
    GET    /api/identifiers/decode/{identifier}              Decode batch / full / short
    GET    /api/identifiers/validate/{identifier}            Structural + registry check
    GET    /api/identifiers/resolve/{short_serial}           Short → full serial

Engine errors are raised through to the handlers in
``seedtrace.middleware.exceptions``, which render the JSON error envelope.
"""

from fastapi import APIRouter, Depends, status

from seedtrace.identifiers.service import IdentifierService
from seedtrace.identifiers.types import BatchRecord
from seedtrace.schemas.identifier import (
    BatchIssueRequest,
    BatchOut,
    ResolutionOut,
    SerialIssueRequest,
    SerialOut,
    SerialRecordOut,
    ValidationOut,
)
from seedtrace.services.engine import get_identifier_service

router = APIRouter()


# ── Issue ────────────────────────────────────────────────────

@router.post("/batches", response_model=BatchOut, status_code=status.HTTP_201_CREATED)
async def issue_batch(
    body: BatchIssueRequest,
    service: IdentifierService = Depends(get_identifier_service),
):
    issued = await service.issue_batch(
        body.site_id,
        body.batch_type,
        batch_date=body.batch_date,
        requested_by=body.requested_by,
    )
    return BatchOut.from_record(issued.record, batch_number=issued.batch_number)


@router.post(
    "/serials", response_model=list[SerialOut], status_code=status.HTTP_201_CREATED
)
async def issue_serials(
    body: SerialIssueRequest,
    service: IdentifierService = Depends(get_identifier_service),
):
    """Issue ``count`` serials into an existing batch, in unit order."""
    issued = await service.issue_serials(
        body.count,
        body.batch_number,
        body.strain_code,
        body.weight_tenths_gram,
        body.pack_size,
        requested_by=body.requested_by,
    )
    return [SerialOut.from_issued(serial, body.batch_number) for serial in issued]


# ── Read ─────────────────────────────────────────────────────

@router.get("/batches/{batch_number}/serials", response_model=list[SerialOut])
async def list_batch_serials(
    batch_number: str,
    service: IdentifierService = Depends(get_identifier_service),
):
    mappings = await service.list_batch_serials(batch_number)
    return [SerialOut.from_mapping(mapping) for mapping in mappings]


@router.get("/decode/{identifier}", response_model=BatchOut | SerialRecordOut)
async def decode_identifier(
    identifier: str,
    service: IdentifierService = Depends(get_identifier_service),
):
    """Decode a 16-digit batch number, 30-digit full serial or 13-digit
    short serial.  Short serials must have been issued to decode."""
    record = await service.decode(identifier)
    if isinstance(record, BatchRecord):
        return BatchOut.from_record(record, batch_number=identifier)
    return SerialRecordOut.from_record(record)


@router.get("/validate/{identifier}", response_model=ValidationOut)
async def validate_identifier(
    identifier: str,
    service: IdentifierService = Depends(get_identifier_service),
):
    return ValidationOut(identifier=identifier, valid=await service.validate(identifier))


@router.get("/resolve/{short_serial}", response_model=ResolutionOut)
async def resolve_short_serial(
    short_serial: str,
    service: IdentifierService = Depends(get_identifier_service),
):
    full_serial = await service.resolve_short(short_serial)
    return ResolutionOut(short_serial=short_serial, full_serial=full_serial)
