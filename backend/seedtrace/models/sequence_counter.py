"""SequenceCounter: last issued number per allocation scope.

One row per scope:
  kind="batch"  key="SS:TT:YYYYMMDD"   ceiling 9999
  kind="unit"   key=<batch number>     ceiling 99999
  kind="short"  key="SS:YYMMDD"        ceiling 99999

Rows are created on first use and only ever incremented.  They are kept
for audit retention; the engine never deletes them.
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from seedtrace.database import Base


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"
    __table_args__ = (
        UniqueConstraint("scope_kind", "scope_key", name="uq_sequence_counters_scope"),
        CheckConstraint("last_value >= 0", name="ck_sequence_counters_non_negative"),
        CheckConstraint("last_value <= ceiling", name="ck_sequence_counters_ceiling"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    scope_kind: Mapped[str] = mapped_column(String(10), nullable=False)
    scope_key: Mapped[str] = mapped_column(String(32), nullable=False)

    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ceiling: Mapped[int] = mapped_column(Integer, nullable=False)

    # ── Audit ────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    last_issued_at: Mapped[datetime | None] = mapped_column(DateTime)
    last_issued_by: Mapped[str | None] = mapped_column(String(100))
