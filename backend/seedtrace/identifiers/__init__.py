"""Identifier encoding & sequence allocation engine."""

from seedtrace.identifiers.allocator import (  # noqa: F401
    CounterStore,
    InMemoryCounterStore,
    SequenceAllocator,
    SequenceScope,
)
from seedtrace.identifiers.mapping_store import InMemoryMappingStore, MappingStore  # noqa: F401
from seedtrace.identifiers.service import IdentifierService  # noqa: F401
from seedtrace.identifiers.types import (  # noqa: F401
    BatchRecord,
    BatchType,
    FullSerialRecord,
    IdentifierMapping,
    IssuedBatch,
    IssuedSerial,
    PackSize,
    ShortSerialRecord,
    StrainFamily,
)
