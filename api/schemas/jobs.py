"""Job and application Pydantic schemas."""

from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from api.schemas.common import PaginatedResponse, TimestampMixin
from core.matching.types import JobType
from database.models.applications import ApplicationStatus

WorkModeValue = Literal["remote", "onsite", "hybrid", ""]


def _strip(v):
    if isinstance(v, str):
        return v.strip()
    return v


class JobCreate(BaseModel):
    """Schema for a vendor creating a job posting."""

    title: str = Field(..., min_length=2, max_length=255, description="Job title")
    description: str = Field(..., min_length=10, description="Full job description")
    location: str = Field(default="", max_length=255, description="Display location")
    job_country: str = Field(default="", max_length=100)
    job_state: str = Field(default="", max_length=100)
    job_city: str = Field(default="", max_length=100)
    job_type: JobType = Field(default=JobType.FULL_TIME, description="Employment type")
    job_sub_type: str = Field(default="", max_length=50, description="e.g. w2, c2c, 1099")
    work_mode: WorkModeValue = ""
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    pay_per_hour: Optional[float] = Field(None, ge=0)
    skills_required: list[str] = Field(default_factory=list, description="Required skills")
    experience_required: int = Field(default=0, ge=0, description="Required years of experience")
    recruiter_name: str = Field(default="", max_length=200)
    recruiter_phone: str = Field(default="", max_length=50)

    @field_validator("title", "job_country", "job_sub_type", mode="before")
    @classmethod
    def strip_text(cls, v):
        """Strip whitespace from identifying fields."""
        return _strip(v)

    @field_validator("skills_required")
    @classmethod
    def clean_skills(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s and s.strip()]


class JobResponse(TimestampMixin):
    """Schema for job response."""

    id: int
    title: str
    description: str
    vendor_id: str
    vendor_email: str
    recruiter_name: str = ""
    recruiter_phone: str = ""
    location: str = ""
    job_country: str = ""
    job_state: str = ""
    job_city: str = ""
    job_type: JobType
    job_sub_type: str = ""
    work_mode: str = ""
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    pay_per_hour: Optional[float] = None
    skills_required: list[str] = Field(default_factory=list)
    experience_required: int = 0
    is_active: bool

    class Config:
        from_attributes = True


class JobDetailResponse(JobResponse):
    """Job with its application count."""

    application_count: int = 0


class MatchBreakdownSchema(BaseModel):
    skills: int = Field(ge=0, le=100)
    type: int = Field(ge=0, le=100)
    experience: int = Field(ge=0, le=100)


class JobMatchResponse(JobResponse):
    """Job annotated with its match score for the requesting candidate."""

    match_percentage: int = Field(ge=0, le=100)
    match_breakdown: MatchBreakdownSchema


class JobMatchPage(PaginatedResponse[JobMatchResponse]):
    """Paginated job matches with facet counts over the whole filtered set."""

    type_counts: dict[str, int] = Field(default_factory=dict)
    subtype_counts: dict[str, dict[str, int]] = Field(default_factory=dict)


class ApplicationCreate(BaseModel):
    cover_letter: str = Field(default="", max_length=10000)


class ApplicationResponse(TimestampMixin):
    """Schema for application response."""

    id: int
    job_id: int
    job_title: str
    candidate_id: str
    candidate_email: str
    cover_letter: str = ""
    status: ApplicationStatus

    class Config:
        from_attributes = True
