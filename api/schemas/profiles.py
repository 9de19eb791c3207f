"""Candidate profile Pydantic schemas."""

from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from api.schemas.common import TimestampMixin
from api.schemas.jobs import MatchBreakdownSchema
from core.matching.types import JobType, LockState


class ProfileFields(BaseModel):
    """
    Fields a candidate may submit. Omitted fields are left unchanged.

    Once a profile is locked, resume_* fields must extend the saved text,
    experience_years may not decrease and visibility_config grants are
    merged rather than replaced. Skills are computed from the resume text.
    """

    name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    username: Optional[str] = Field(None, min_length=3, max_length=100, pattern=r"^[A-Za-z0-9_.-]+$")
    current_company: Optional[str] = Field(None, max_length=200)
    current_role: Optional[str] = Field(None, max_length=200)
    location: Optional[str] = Field(None, max_length=255)
    profile_country: Optional[str] = Field(None, max_length=100)
    preferred_job_type: Optional[JobType] = None
    expected_hourly_rate: Optional[float] = Field(None, ge=0)
    experience_years: Optional[int] = Field(None, ge=0, le=80)
    skills: Optional[list[str]] = Field(None, description="Only honoured before the profile locks")
    bio: Optional[str] = None
    resume_summary: Optional[str] = None
    resume_experience: Optional[str] = None
    resume_education: Optional[str] = None
    resume_achievements: Optional[str] = None
    visibility_config: Optional[dict[JobType, list[str]]] = Field(
        None, description="Job type -> allowed sub types (empty list = all sub types)"
    )

    @field_validator("name", "profile_country", "username", mode="before")
    @classmethod
    def strip_text(cls, v):
        """Strip whitespace from short text fields."""
        if isinstance(v, str):
            return v.strip()
        return v

    def to_changes(self) -> dict[str, Any]:
        """Supplied fields only, with enums flattened to their values."""
        return self.model_dump(mode="json", exclude_none=True)


class ProfileResponse(TimestampMixin):
    """Full profile as seen by its owner."""

    id: int
    candidate_id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    username: Optional[str] = None
    current_company: str = ""
    current_role: str = ""
    location: str = ""
    profile_country: Optional[str] = None
    preferred_job_type: str = ""
    expected_hourly_rate: Optional[float] = None
    experience_years: int = 0
    skills: list[str] = Field(default_factory=list)
    bio: str = ""
    resume_summary: str = ""
    resume_experience: str = ""
    resume_education: str = ""
    resume_achievements: str = ""
    visibility_config: dict[str, list[str]] = Field(default_factory=dict)
    lock_state: LockState
    profile_locked: bool = False

    class Config:
        from_attributes = True


class PublicProfileResponse(BaseModel):
    """Limited profile fields safe for anonymous listing."""

    id: int
    name: str = ""
    current_role: str = ""
    current_company: str = ""
    preferred_job_type: str = ""
    experience_years: int = 0
    skills: list[str] = Field(default_factory=list)
    location: str = ""

    class Config:
        from_attributes = True


class ResumeResponse(PublicProfileResponse):
    """Public resume looked up by username."""

    username: str
    bio: str = ""
    resume_summary: str = ""
    resume_experience: str = ""
    resume_education: str = ""
    resume_achievements: str = ""


class CandidateMatchResponse(PublicProfileResponse):
    """Candidate annotated with the vendor job they match best."""

    candidate_id: str
    email: str = ""
    profile_country: Optional[str] = None
    match_percentage: int = Field(ge=0, le=100)
    matched_job_id: int
    matched_job_title: str
    match_breakdown: MatchBreakdownSchema
