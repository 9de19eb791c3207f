"""
Candidates Module

One profile per candidate. Profiles lock on their first full save and are
append-only afterwards (see core.matching.profile_protocol); the version
column guards every write with a compare-and-swap.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Integer,
    DateTime,
    func,
    Text,
    JSON,
    Float,
    Enum as SQLEnum,
)
from database.engine import Base
from database.models.jobs import IdType
from core.matching.types import LockState
from datetime import datetime


# ==================== Candidate Profile ===================== #
class CandidateProfile(Base):
    """Candidate profile used for matching and public resumes."""

    __tablename__ = "candidate_profiles"

    id: Mapped[int] = mapped_column(
        IdType, primary_key=True, nullable=False, autoincrement=True
    )
    candidate_id: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True
    )

    # Contact & professional
    name: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    phone: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    username: Mapped[str | None] = mapped_column(String(100), unique=True)  # Public resume handle
    current_company: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    current_role: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    location: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    profile_country: Mapped[str | None] = mapped_column(String(100), index=True)

    # Preferences
    preferred_job_type: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    expected_hourly_rate: Mapped[float | None] = mapped_column(Float)
    visibility_config: Mapped[dict[str, list[str]]] = mapped_column(
        JSON, default=dict, nullable=False
    )  # {job_type: [sub_type, ...]}

    # Experience & skills
    experience_years: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    skills: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Resume text (append-only once locked)
    bio: Mapped[str] = mapped_column(Text, default="", nullable=False)
    resume_summary: Mapped[str] = mapped_column(Text, default="", nullable=False)
    resume_experience: Mapped[str] = mapped_column(Text, default="", nullable=False)
    resume_education: Mapped[str] = mapped_column(Text, default="", nullable=False)
    resume_achievements: Mapped[str] = mapped_column(Text, default="", nullable=False)

    # Lifecycle
    lock_state: Mapped[LockState] = mapped_column(
        SQLEnum(LockState, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=LockState.UNLOCKED,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

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

    __mapper_args__ = {"version_id_col": version}

    @property
    def profile_locked(self) -> bool:
        return self.lock_state == LockState.LOCKED

    def __repr__(self) -> str:
        return f"<CandidateProfile(id={self.id}, candidate_id='{self.candidate_id}', state={self.lock_state})>"
