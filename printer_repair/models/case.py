from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from printer_repair.core.database import Base


def utcnow() -> datetime:
    """UTC naive: SQLite no conserva tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PrinterCase(Base):
    """
    Caso de servicio técnico: una impresora recibida para reparación.
    Vive desde el ingreso hasta la entrega.
    """

    __tablename__ = "printer_cases"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'resolved')",
            name="ck_printer_cases_status",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    case_number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True, index=True)

    reference: Mapped[str] = mapped_column(String(255), nullable=False)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    client_tax_id: Mapped[str] = mapped_column(String(64), nullable=False)
    phone: Mapped[str] = mapped_column(String(64), nullable=False)

    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    intake_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, index=True
    )
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="pending", index=True
    )
    status_changed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    resolution_note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    process_note: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<PrinterCase #{self.case_number} {self.reference!r} status={self.status}>"
