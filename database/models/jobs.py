"""
Jobs Module

Job postings owned by vendors. Closing a job flips is_active; jobs are
never hard-deleted.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Boolean,
    BigInteger,
    Integer,
    DateTime,
    func,
    Text,
    JSON,
    Float,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base
from core.matching.types import JobType, WorkMode
from datetime import datetime

# BIGINT ids on PostgreSQL, INTEGER on SQLite so rowid autoincrement works
IdType = BigInteger().with_variant(Integer, "sqlite")


# ==================== Job Model ===================== #
class Job(Base):
    """
    Job posting.
    Skills and experience feed the match scorer; type and subtype drive
    candidate visibility and facet counts.
    """

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(
        IdType, primary_key=True, nullable=False, autoincrement=True
    )

    # Basic info
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Owner & contact
    vendor_id: Mapped[str] = mapped_column(String(100), nullable=False)
    vendor_email: Mapped[str] = mapped_column(String(255), nullable=False)
    recruiter_name: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    recruiter_phone: Mapped[str] = mapped_column(String(50), default="", nullable=False)

    # Location
    location: Mapped[str] = mapped_column(String(255), default="", nullable=False)  # Display text
    job_country: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    job_state: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    job_city: Mapped[str] = mapped_column(String(100), default="", nullable=False)

    # Classification
    job_type: Mapped[JobType] = mapped_column(
        SQLEnum(JobType, native_enum=False, length=50, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=JobType.FULL_TIME,
    )
    job_sub_type: Mapped[str] = mapped_column(String(50), default="", nullable=False)  # w2, c2c, 1099...
    work_mode: Mapped[str] = mapped_column(
        String(20), default=WorkMode.UNSPECIFIED.value, nullable=False
    )

    # Compensation
    salary_min: Mapped[float | None] = mapped_column(Float)
    salary_max: Mapped[float | None] = mapped_column(Float)
    pay_per_hour: Mapped[float | None] = mapped_column(Float)

    # Requirements
    skills_required: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    experience_required: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # Years

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

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
        Index("idx_job_active_created", "is_active", "created_at"),
        Index("idx_job_vendor_created", "vendor_id", "created_at"),
        Index("idx_job_active_type_created", "is_active", "job_type", "created_at"),
        Index("idx_job_active_country_created", "is_active", "job_country", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, title='{self.title}', active={self.is_active})>"
