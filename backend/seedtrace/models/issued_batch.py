"""IssuedBatchNumber: every batch number this installation has handed out."""

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from seedtrace.database import Base


class IssuedBatchNumber(Base):
    __tablename__ = "issued_batches"
    __table_args__ = (
        UniqueConstraint(
            "site_id", "batch_type", "batch_date", "sequence",
            name="uq_issued_batches_scope_sequence",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    batch_number: Mapped[str] = mapped_column(
        String(16), unique=True, nullable=False, index=True
    )

    # ── Decoded fields (denormalized for querying) ───────────
    site_id: Mapped[int] = mapped_column(Integer, nullable=False)
    batch_type: Mapped[int] = mapped_column(Integer, nullable=False)
    batch_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    requested_by: Mapped[str | None] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
