"""Identifier error taxonomy.

  EncodingError      caller supplied a value that cannot be encoded
  DecodingError      malformed / corrupted input (mis-scan)
  AllocationError    a sequence scope reached its ceiling
  MappingError       uniqueness violation, indicates an allocator bug
  IdentifierNotFound identifier never issued by this installation

Allocation and mapping errors carry ``alert=True``: they are invariant
violations and must never be retried blindly.
"""

from fastapi import status

from seedtrace.middleware.exceptions import SeedTraceException


class IdentifierError(SeedTraceException):
    """Base for every error raised by the identifier engine."""


# ── Encoding ─────────────────────────────────────────────────


class EncodingError(IdentifierError):
    def __init__(self, message: str, error_code: str = "ENCODING_ERROR", details: dict | None = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code=error_code,
            details=details,
        )


class FieldOutOfRange(EncodingError):
    def __init__(self, field: str, value, expected: str):
        self.field = field
        self.value = value
        super().__init__(
            f"{field}={value!r} is out of range ({expected})",
            error_code="FIELD_OUT_OF_RANGE",
            details={"field": field, "value": str(value), "expected": expected},
        )


# ── Decoding ─────────────────────────────────────────────────


class DecodingError(IdentifierError):
    error_code = "DECODING_ERROR"

    def __init__(self, message: str, identifier: str | None = None):
        self.identifier = identifier
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code=type(self).error_code,
            details={"identifier": identifier} if identifier is not None else None,
        )


class InvalidLength(DecodingError):
    error_code = "INVALID_LENGTH"


class InvalidCharacters(DecodingError):
    error_code = "INVALID_CHARACTERS"


class InvalidDate(DecodingError):
    error_code = "INVALID_DATE"


class InvalidBatchType(DecodingError):
    error_code = "INVALID_BATCH_TYPE"


class InvalidStrainFamily(DecodingError):
    error_code = "INVALID_STRAIN_FAMILY"


class InvalidField(DecodingError):
    error_code = "INVALID_FIELD"


class ChecksumMismatch(DecodingError):
    error_code = "CHECKSUM_MISMATCH"


# ── Allocation ───────────────────────────────────────────────


class AllocationError(IdentifierError):
    pass


class SequenceExhausted(AllocationError):
    def __init__(self, scope: str, ceiling: int):
        self.scope = scope
        self.ceiling = ceiling
        super().__init__(
            message=f"Sequence exhausted for scope {scope} (max {ceiling})",
            status_code=status.HTTP_409_CONFLICT,
            error_code="SEQUENCE_EXHAUSTED",
            details={"scope": scope, "ceiling": ceiling},
            alert=True,
        )


# ── Mapping ──────────────────────────────────────────────────


class MappingError(IdentifierError):
    error_code = "MAPPING_ERROR"

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            message=f"{type(self).__name__}: {identifier} is already mapped",
            status_code=status.HTTP_409_CONFLICT,
            error_code=type(self).error_code,
            details={"identifier": identifier},
            alert=True,
        )


class DuplicateFull(MappingError):
    error_code = "DUPLICATE_FULL_SERIAL"


class DuplicateShort(MappingError):
    error_code = "DUPLICATE_SHORT_SERIAL"


class DuplicateBatch(MappingError):
    error_code = "DUPLICATE_BATCH_NUMBER"


# ── Lookup ───────────────────────────────────────────────────


class IdentifierNotFound(IdentifierError):
    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(
            message=f"{kind} not found: {identifier}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="IDENTIFIER_NOT_FOUND",
            details={"kind": kind, "identifier": identifier},
        )
