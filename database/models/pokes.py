"""
Poke Models

Record of interest signals between vendors and candidates. A sender may
send one quick poke and one email-style message per target.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Boolean,
    DateTime,
    func,
    Enum as SQLEnum,
    Index,
    UniqueConstraint,
)
from database.engine import Base
from database.models.jobs import IdType
from datetime import datetime
from enum import Enum as PyEnum


# ==================== Poke Enums ===================== #
class SenderType(str, PyEnum):
    """Who sent the poke."""

    VENDOR = "vendor"
    CANDIDATE = "candidate"


# ==================== Poke Record ===================== #
class PokeRecord(Base):
    """
    A poke from a vendor to a candidate profile, or from a candidate to a job.

    target_id is a candidate profile id for vendor pokes and a job id for
    candidate pokes; target_vendor_id is set for the latter so vendors can
    list what they received.
    """

    __tablename__ = "poke_records"

    id: Mapped[int] = mapped_column(
        IdType, primary_key=True, nullable=False, autoincrement=True
    )

    # Sender
    sender_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    sender_name: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    sender_email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    sender_type: Mapped[SenderType] = mapped_column(
        SQLEnum(
            SenderType,
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )

    # Target
    target_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    target_vendor_id: Mapped[str | None] = mapped_column(String(100), index=True)
    target_candidate_id: Mapped[str | None] = mapped_column(String(100), index=True)
    target_email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    target_name: Mapped[str] = mapped_column(String(200), default="", nullable=False)

    # Message
    subject: Mapped[str] = mapped_column(String(300), default="", nullable=False)
    is_email: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    job_id: Mapped[str | None] = mapped_column(String(100))
    job_title: Mapped[str | None] = mapped_column(String(255))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("sender_id", "target_id", "is_email", name="uq_poke_sender_target_kind"),
        Index("idx_poke_sender_created", "sender_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<PokeRecord(id={self.id}, sender_id='{self.sender_id}', target_id='{self.target_id}')>"
