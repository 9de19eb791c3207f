"""
Application Models

A candidate's application to a job. The (job_id, candidate_id) unique
constraint is the only guard against duplicate applications; inserts rely
on it rather than on a pre-check.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    ForeignKey,
    DateTime,
    func,
    Text,
    Enum as SQLEnum,
    Index,
    UniqueConstraint,
)
from database.engine import Base
from database.models.jobs import IdType
from datetime import datetime
from enum import Enum as PyEnum


# ==================== Application Enums ===================== #
class ApplicationStatus(str, PyEnum):
    """Application review status."""

    PENDING = "pending"
    REVIEWING = "reviewing"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    HIRED = "hired"


# ==================== Application Model ===================== #
class Application(Base):
    """Job application submitted by a candidate."""

    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(
        IdType, primary_key=True, nullable=False, autoincrement=True
    )
    job_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    job_title: Mapped[str] = mapped_column(String(255), nullable=False)  # Snapshot at apply time

    candidate_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    candidate_email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    cover_letter: Mapped[str] = mapped_column(Text, default="", nullable=False)

    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(
            ApplicationStatus,
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("job_id", "candidate_id", name="uq_application_job_candidate"),
        Index("idx_application_candidate_created", "candidate_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, job_id={self.job_id}, candidate_id='{self.candidate_id}')>"
