"""Job, application and match service functions."""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.jobs import JobCreate, JobResponse
from api.schemas.profiles import PublicProfileResponse
from core.config import settings
from core.errors import AuthorizationError, ConflictError, NotFoundError
from core.matching import (
    CandidateMatch,
    JobMatch,
    JobRanking,
    JobType,
    rank_candidates_for_jobs,
    rank_jobs_for_candidate,
)
from core.quotas import MonthlyQuotaCounter, QuotaKind
from core.security import AuditAction, AuthenticatedUser, ResourceType, log_audit_event
from database.models.applications import Application
from database.models.candidates import CandidateProfile
from database.models.jobs import Job

logger = logging.getLogger(__name__)


async def create_job(
    session: AsyncSession,
    quotas: MonthlyQuotaCounter,
    vendor: AuthenticatedUser,
    data: JobCreate,
) -> Job:
    """Create a job posting, consuming one unit of the vendor's monthly posting quota."""
    grant = await quotas.acquire(
        QuotaKind.JOB_POSTING,
        vendor.user_id,
        settings.job_posting_limit_for(vendor.plan),
    )

    job = Job(
        **data.model_dump(),
        vendor_id=vendor.user_id,
        vendor_email=vendor.email,
        is_active=True,
    )
    session.add(job)
    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        await quotas.release(grant)
        raise
    await session.refresh(job)

    logger.info(
        "Job created",
        extra={"job_id": job.id, "vendor_id": vendor.user_id, "postings_used": grant.used},
    )
    log_audit_event(AuditAction.CREATE, ResourceType.JOB, job.id, user_id=vendor.user_id)
    return job


async def list_jobs(
    session: AsyncSession,
    job_type: Optional[JobType] = None,
    job_sub_type: Optional[str] = None,
    country: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> Dict[str, Any]:
    """List active jobs, newest first."""
    query = select(Job).where(Job.is_active.is_(True))
    if job_type:
        query = query.where(Job.job_type == job_type)
    if job_sub_type:
        query = query.where(Job.job_sub_type == job_sub_type)
    if country:
        query = query.where(Job.job_country == country)

    total = (await session.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0

    query = query.order_by(Job.created_at.desc(), Job.id.desc()).limit(limit).offset(offset)
    jobs = (await session.execute(query)).scalars().all()

    return {"jobs": list(jobs), "total": total, "limit": limit, "offset": offset}


async def _load_job(session: AsyncSession, job_id: int) -> Job:
    job = await session.get(Job, job_id)
    if not job:
        raise NotFoundError(f"Job {job_id} not found")
    return job


async def get_job(session: AsyncSession, job_id: int) -> Dict[str, Any]:
    """Get job details with its application count."""
    job = await _load_job(session, job_id)
    count_result = await session.execute(
        select(func.count()).select_from(Application).where(Application.job_id == job_id)
    )
    result = JobResponse.model_validate(job).model_dump()
    result["application_count"] = count_result.scalar() or 0
    return result


async def list_vendor_jobs(session: AsyncSession, vendor_id: str) -> List[Job]:
    """All jobs owned by a vendor, active and closed."""
    result = await session.execute(
        select(Job)
        .where(Job.vendor_id == vendor_id)
        .order_by(Job.created_at.desc(), Job.id.desc())
    )
    return list(result.scalars().all())


async def set_job_active(
    session: AsyncSession,
    vendor: AuthenticatedUser,
    job_id: int,
    active: bool,
) -> Job:
    """Close or reopen a job. Only the owning vendor may do this."""
    job = await _load_job(session, job_id)
    if job.vendor_id != vendor.user_id:
        raise AuthorizationError("Only the vendor who posted this job can change it")

    if job.is_active != active:
        job.is_active = active
        await session.commit()
        await session.refresh(job)
        logger.info(
            "Job reopened" if active else "Job closed",
            extra={"job_id": job.id, "vendor_id": vendor.user_id},
        )
        log_audit_event(
            AuditAction.REOPEN if active else AuditAction.CLOSE,
            ResourceType.JOB,
            job.id,
            user_id=vendor.user_id,
        )
    return job


async def apply_to_job(
    session: AsyncSession,
    candidate: AuthenticatedUser,
    job_id: int,
    cover_letter: str = "",
) -> Application:
    """
    Apply to an active job.

    The unique (job_id, candidate_id) constraint decides duplicates, so two
    concurrent applies cannot both succeed.
    """
    job = await session.get(Job, job_id)
    if not job or not job.is_active:
        raise NotFoundError("Job not found or inactive")

    application = Application(
        job_id=job.id,
        job_title=job.title,
        candidate_id=candidate.user_id,
        candidate_email=candidate.email,
        cover_letter=cover_letter or "",
    )
    session.add(application)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning(
            "Duplicate application rejected",
            extra={"job_id": job_id, "candidate_id": candidate.user_id},
        )
        raise ConflictError("Already applied to this job") from e
    await session.refresh(application)

    logger.info(
        "Application created",
        extra={"application_id": application.id, "job_id": job_id},
    )
    log_audit_event(
        AuditAction.APPLY, ResourceType.APPLICATION, application.id, user_id=candidate.user_id
    )
    return application


async def list_candidate_applications(session: AsyncSession, candidate_id: str) -> List[Application]:
    """A candidate's applications, newest first."""
    result = await session.execute(
        select(Application)
        .where(Application.candidate_id == candidate_id)
        .order_by(Application.created_at.desc(), Application.id.desc())
    )
    return list(result.scalars().all())


def serialize_job_match(match: JobMatch) -> Dict[str, Any]:
    data = JobResponse.model_validate(match.job).model_dump()
    data["match_percentage"] = match.score.overall
    data["match_breakdown"] = match.score.as_dict()
    return data


def serialize_candidate_match(match: CandidateMatch) -> Dict[str, Any]:
    candidate = match.candidate
    data = PublicProfileResponse.model_validate(candidate).model_dump()
    data.update(
        candidate_id=candidate.candidate_id,
        email=candidate.email,
        profile_country=candidate.profile_country,
        match_percentage=match.score.overall,
        matched_job_id=match.matched_job_id,
        matched_job_title=match.matched_job_title,
        match_breakdown=match.score.as_dict(),
    )
    return data


async def match_jobs_for_candidate(
    session: AsyncSession,
    candidate: AuthenticatedUser,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> JobRanking:
    """
    Rank active jobs for the candidate's profile.

    Job types are restricted by the candidate's plan. A candidate without a
    profile gets an empty ranking.
    """
    profile = (
        await session.execute(
            select(CandidateProfile).where(CandidateProfile.candidate_id == candidate.user_id)
        )
    ).scalar_one_or_none()
    if profile is None:
        return JobRanking(matches=[], total=0, page=page, page_size=page_size)

    jobs = (
        await session.execute(
            select(Job).where(Job.is_active.is_(True)).order_by(Job.created_at.desc(), Job.id.desc())
        )
    ).scalars().all()

    ranking = rank_jobs_for_candidate(
        profile,
        jobs,
        allowed_types=settings.allowed_job_types_for(candidate.plan),
        page=page,
        page_size=page_size,
    )
    logger.info(
        "Computed job matches",
        extra={"candidate_id": candidate.user_id, "jobs": len(jobs), "matches": ranking.total},
    )
    return ranking


async def match_candidates_for_vendor(
    session: AsyncSession,
    vendor: AuthenticatedUser,
    job_id: Optional[int] = None,
    same_country: bool = False,
) -> List[CandidateMatch]:
    """
    Rank all candidate profiles against the vendor's active jobs.

    Args:
        job_id: Restrict to one of the vendor's jobs
        same_country: Only consider candidates located in a job country
    """
    query = select(Job).where(Job.vendor_id == vendor.user_id, Job.is_active.is_(True))
    if job_id is not None:
        query = query.where(Job.id == job_id)
    jobs = list((await session.execute(query.order_by(Job.created_at.desc(), Job.id.desc()))).scalars().all())
    if not jobs:
        return []

    profiles = (
        await session.execute(select(CandidateProfile).order_by(CandidateProfile.id))
    ).scalars().all()

    matches = rank_candidates_for_jobs(jobs, profiles, filter_by_country=same_country)
    logger.info(
        "Computed candidate matches",
        extra={"vendor_id": vendor.user_id, "jobs": len(jobs), "matches": len(matches)},
    )
    return matches
