"""SerialMapping: short serial (barcode) ↔ full serial (QR code).

Both columns are unique; the pair is written in a single INSERT so the
database enforces the two constraints together.  Decoded fields are
denormalized for traceability queries (by batch, strain, date).
"""

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from seedtrace.database import Base


class SerialMapping(Base):
    __tablename__ = "serial_mappings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    full_serial: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    short_serial: Mapped[str] = mapped_column(String(13), unique=True, nullable=False)
    batch_number: Mapped[str] = mapped_column(String(16), nullable=False, index=True)

    # ── Decoded fields ───────────────────────────────────────
    site_id: Mapped[int] = mapped_column(Integer, nullable=False)
    strain_code: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    batch_type: Mapped[int] = mapped_column(Integer, nullable=False)
    batch_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    batch_sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    weight_tenths_gram: Mapped[int] = mapped_column(Integer, nullable=False)
    pack_size: Mapped[int] = mapped_column(Integer, nullable=False)

    requested_by: Mapped[str | None] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
