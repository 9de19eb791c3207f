"""
Job posting, application and matching endpoints.

Public listing and detail views, vendor posting management, candidate
applications, and ranked matches in both directions.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_pagination_params,
    get_quota_counter,
    require_candidate,
    require_vendor,
)
from api.schemas.common import PaginatedResponse, PaginationParams
from api.schemas.jobs import (
    ApplicationCreate,
    ApplicationResponse,
    JobCreate,
    JobDetailResponse,
    JobMatchPage,
    JobResponse,
)
from api.schemas.profiles import CandidateMatchResponse
from api.services import jobs as job_service
from core.matching import JobType
from core.quotas import MonthlyQuotaCounter
from core.security import AuthenticatedUser
from database.engine import get_db

router = APIRouter()


@router.get(
    "",
    response_model=PaginatedResponse[JobResponse],
    summary="List Jobs",
    description="List active job postings, newest first. Public.",
)
async def list_jobs(
    job_type: Optional[JobType] = Query(None, description="Filter by job type"),
    job_sub_type: Optional[str] = Query(None, description="Filter by job sub type"),
    country: Optional[str] = Query(None, description="Filter by job country"),
    pagination: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db),
):
    result = await job_service.list_jobs(
        db,
        job_type=job_type,
        job_sub_type=job_sub_type,
        country=country,
        limit=pagination.page_size,
        offset=pagination.offset,
    )
    return PaginatedResponse.create(
        items=[JobResponse.model_validate(job) for job in result["jobs"]],
        total=result["total"],
        pagination=pagination,
    )


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Job",
    description="Post a new job. Counts against the vendor's monthly posting limit (429 when reached).",
)
async def create_job(
    body: JobCreate,
    vendor: AuthenticatedUser = Depends(require_vendor),
    quotas: MonthlyQuotaCounter = Depends(get_quota_counter),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.create_job(db, quotas, vendor, body)
    return JobResponse.model_validate(job)


@router.get(
    "/vendor",
    response_model=list[JobResponse],
    summary="Vendor Jobs",
    description="All jobs posted by the calling vendor, including closed ones.",
)
async def vendor_jobs(
    vendor: AuthenticatedUser = Depends(require_vendor),
    db: AsyncSession = Depends(get_db),
):
    jobs = await job_service.list_vendor_jobs(db, vendor.user_id)
    return [JobResponse.model_validate(job) for job in jobs]


@router.get(
    "/matches",
    response_model=JobMatchPage,
    summary="Job Matches",
    description=(
        "Active jobs ranked by match score for the calling candidate. Filtered by the "
        "candidate's visibility settings, country and plan. Facet counts cover all matches."
    ),
)
async def job_matches(
    candidate: AuthenticatedUser = Depends(require_candidate),
    pagination: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db),
):
    ranking = await job_service.match_jobs_for_candidate(
        db, candidate, page=pagination.page, page_size=pagination.page_size
    )
    return JobMatchPage.create(
        items=[job_service.serialize_job_match(m) for m in ranking.matches],
        total=ranking.total,
        pagination=pagination,
        type_counts=ranking.type_counts,
        subtype_counts=ranking.subtype_counts,
    )


@router.get(
    "/candidate-matches",
    response_model=list[CandidateMatchResponse],
    summary="Candidate Matches",
    description="Candidates ranked by their best match against the vendor's active jobs.",
)
async def candidate_matches(
    job_id: Optional[int] = Query(None, description="Restrict to one of your jobs"),
    same_country: bool = Query(False, description="Only candidates located in a job's country"),
    vendor: AuthenticatedUser = Depends(require_vendor),
    db: AsyncSession = Depends(get_db),
):
    matches = await job_service.match_candidates_for_vendor(
        db, vendor, job_id=job_id, same_country=same_country
    )
    return [job_service.serialize_candidate_match(m) for m in matches]


@router.get(
    "/applications/mine",
    response_model=list[ApplicationResponse],
    summary="My Applications",
)
async def my_applications(
    candidate: AuthenticatedUser = Depends(require_candidate),
    db: AsyncSession = Depends(get_db),
):
    applications = await job_service.list_candidate_applications(db, candidate.user_id)
    return [ApplicationResponse.model_validate(a) for a in applications]


@router.get(
    "/{job_id}",
    response_model=JobDetailResponse,
    summary="Get Job Details",
    description="Job posting with its application count. Public.",
)
async def get_job(
    job_id: int = Path(..., description="Job ID"),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.get_job(db, job_id)


@router.post(
    "/{job_id}/apply",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to Job",
    description="Apply to an active job. 404 if missing or closed, 409 if already applied.",
)
async def apply_to_job(
    job_id: int = Path(..., description="Job ID"),
    body: Optional[ApplicationCreate] = None,
    candidate: AuthenticatedUser = Depends(require_candidate),
    db: AsyncSession = Depends(get_db),
):
    cover_letter = body.cover_letter if body else ""
    application = await job_service.apply_to_job(db, candidate, job_id, cover_letter)
    return ApplicationResponse.model_validate(application)


@router.patch(
    "/{job_id}/close",
    response_model=JobResponse,
    summary="Close Job",
)
async def close_job(
    job_id: int = Path(..., description="Job ID"),
    vendor: AuthenticatedUser = Depends(require_vendor),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.set_job_active(db, vendor, job_id, active=False)
    return JobResponse.model_validate(job)


@router.patch(
    "/{job_id}/reopen",
    response_model=JobResponse,
    summary="Reopen Job",
)
async def reopen_job(
    job_id: int = Path(..., description="Job ID"),
    vendor: AuthenticatedUser = Depends(require_vendor),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.set_job_active(db, vendor, job_id, active=True)
    return JobResponse.model_validate(job)
