"""Poke Pydantic schemas."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, model_validator

from database.models.pokes import SenderType


class PokeCreate(BaseModel):
    """
    Schema for sending a poke.

    Vendors poke a candidate profile (target_profile_id); candidates poke a
    job (target_job_id). Exactly one target must be given.
    """

    target_profile_id: Optional[int] = Field(None, ge=1)
    target_job_id: Optional[int] = Field(None, ge=1)
    subject: str = Field(default="", max_length=300)
    is_email: bool = Field(default=False, description="Email-style message instead of a quick poke")
    job_id: Optional[int] = Field(None, ge=1, description="Job the vendor is poking about")
    sender_name: str = Field(default="", max_length=200)
    target_email: Optional[EmailStr] = Field(None, description="Override the stored contact email")

    @model_validator(mode="after")
    def check_single_target(self) -> "PokeCreate":
        if (self.target_profile_id is None) == (self.target_job_id is None):
            raise ValueError("Provide exactly one of target_profile_id or target_job_id")
        return self


class PokeResponse(BaseModel):
    """Schema for poke response."""

    id: int
    sender_id: str
    sender_name: str = ""
    sender_email: str = ""
    sender_type: SenderType
    target_id: str
    target_vendor_id: Optional[str] = None
    target_candidate_id: Optional[str] = None
    target_email: str = ""
    target_name: str = ""
    subject: str = ""
    is_email: bool
    job_id: Optional[str] = None
    job_title: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PokeSendResponse(BaseModel):
    poke: PokeResponse
    used: int
    limit: Optional[int] = None
    remaining: Optional[int] = None
