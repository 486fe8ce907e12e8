"""Aggregate model imports for Alembic auto-detection."""

from seedtrace.models.sequence_counter import SequenceCounter  # noqa: F401
from seedtrace.models.issued_batch import IssuedBatchNumber  # noqa: F401
from seedtrace.models.serial_mapping import SerialMapping  # noqa: F401
