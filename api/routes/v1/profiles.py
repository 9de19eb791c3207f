"""
Candidate profile endpoints.

Profiles lock on their first full save; later updates may only extend
resume text, raise experience and add visibility grants.
"""

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user, get_pagination_params, require_candidate
from api.schemas.common import PaginatedResponse, PaginationParams
from api.schemas.profiles import (
    ProfileFields,
    ProfileResponse,
    PublicProfileResponse,
    ResumeResponse,
)
from api.services import profiles as profile_service
from core.security import AuthenticatedUser
from database.engine import get_db

router = APIRouter()


@router.get(
    "/public",
    response_model=PaginatedResponse[PublicProfileResponse],
    summary="Public Profiles",
    description="Browse candidate profiles with contact details omitted. Public.",
)
async def list_public_profiles(
    pagination: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db),
):
    result = await profile_service.list_public_profiles(
        db, limit=pagination.page_size, offset=pagination.offset
    )
    return PaginatedResponse.create(
        items=[PublicProfileResponse.model_validate(p) for p in result["profiles"]],
        total=result["total"],
        pagination=pagination,
    )


@router.get(
    "/resume/{username}",
    response_model=ResumeResponse,
    summary="Public Resume",
)
async def get_resume(
    username: str = Path(..., description="Public resume handle"),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.get_resume(db, username)
    return ResumeResponse.model_validate(profile)


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get My Profile",
)
async def get_my_profile(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.get_profile(db, current_user.user_id)
    return ProfileResponse.model_validate(profile)


@router.post(
    "",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Profile",
    description="Create the caller's profile. Requires profile_country; the profile is locked once saved.",
)
async def create_profile(
    body: ProfileFields,
    candidate: AuthenticatedUser = Depends(require_candidate),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.create_profile(db, candidate, body.to_changes())
    return ProfileResponse.model_validate(profile)


@router.post(
    "/draft",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Draft Profile",
    description="Create a minimal unlocked profile. The next update locks it.",
)
async def create_draft_profile(
    body: ProfileFields,
    candidate: AuthenticatedUser = Depends(require_candidate),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.create_draft_profile(db, candidate, body.to_changes())
    return ProfileResponse.model_validate(profile)


@router.put(
    "/me",
    response_model=ProfileResponse,
    summary="Update My Profile",
    description=(
        "Create or update the caller's profile. Once locked, resume fields must extend the "
        "saved text and experience cannot decrease (400). Concurrent edits return 409."
    ),
)
async def update_my_profile(
    body: ProfileFields,
    candidate: AuthenticatedUser = Depends(require_candidate),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.update_profile(db, candidate, body.to_changes())
    return ProfileResponse.model_validate(profile)


@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete My Profile",
)
async def delete_my_profile(
    candidate: AuthenticatedUser = Depends(require_candidate),
    db: AsyncSession = Depends(get_db),
):
    await profile_service.delete_profile(db, candidate.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
