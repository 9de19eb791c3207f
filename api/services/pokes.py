"""Poke service functions."""

from typing import List
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.pokes import PokeCreate
from core.config import settings
from core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from core.quotas import MonthlyQuotaCounter, QuotaKind, QuotaResult
from core.security import AuditAction, AuthenticatedUser, ResourceType, log_audit_event
from database.models.candidates import CandidateProfile
from database.models.jobs import Job
from database.models.pokes import PokeRecord, SenderType

logger = logging.getLogger(__name__)


async def _build_vendor_poke(
    session: AsyncSession, vendor: AuthenticatedUser, data: PokeCreate
) -> PokeRecord:
    if data.target_profile_id is None:
        raise ValidationError("Vendors poke candidate profiles", field="target_profile_id")

    profile = await session.get(CandidateProfile, data.target_profile_id)
    if profile is None:
        raise NotFoundError(f"Profile {data.target_profile_id} not found")

    job_title = None
    if data.job_id is not None:
        job = await session.get(Job, data.job_id)
        if job is None:
            raise NotFoundError(f"Job {data.job_id} not found")
        if job.vendor_id != vendor.user_id:
            raise AuthorizationError("You can only poke about your own jobs")
        job_title = job.title

    return PokeRecord(
        sender_id=vendor.user_id,
        sender_name=data.sender_name,
        sender_email=vendor.email,
        sender_type=SenderType.VENDOR,
        target_id=str(profile.id),
        target_candidate_id=profile.candidate_id,
        target_email=data.target_email or profile.email,
        target_name=profile.name,
        subject=data.subject,
        is_email=data.is_email,
        job_id=str(data.job_id) if data.job_id is not None else None,
        job_title=job_title,
    )


async def _build_candidate_poke(
    session: AsyncSession, candidate: AuthenticatedUser, data: PokeCreate
) -> PokeRecord:
    if data.target_job_id is None:
        raise ValidationError("Candidates poke job postings", field="target_job_id")

    job = await session.get(Job, data.target_job_id)
    if job is None or not job.is_active:
        raise NotFoundError("Job not found or inactive")

    return PokeRecord(
        sender_id=candidate.user_id,
        sender_name=data.sender_name,
        sender_email=candidate.email,
        sender_type=SenderType.CANDIDATE,
        target_id=str(job.id),
        target_vendor_id=job.vendor_id,
        target_email=data.target_email or job.vendor_email,
        target_name=job.recruiter_name,
        subject=data.subject or job.title,
        is_email=data.is_email,
        job_id=str(job.id),
        job_title=job.title,
    )


async def send_poke(
    session: AsyncSession,
    quotas: MonthlyQuotaCounter,
    sender: AuthenticatedUser,
    data: PokeCreate,
) -> tuple[PokeRecord, QuotaResult]:
    """
    Record a poke, consuming one unit of the sender's monthly poke quota.

    A duplicate (same sender, target and kind) is a conflict and does not
    consume quota. Nothing is emailed; the record is the notification.
    """
    if sender.is_vendor:
        poke = await _build_vendor_poke(session, sender, data)
    elif sender.is_candidate:
        poke = await _build_candidate_poke(session, sender, data)
    else:
        raise AuthorizationError("Only vendors and candidates can send pokes")

    existing = await session.execute(
        select(PokeRecord.id).where(
            PokeRecord.sender_id == poke.sender_id,
            PokeRecord.target_id == poke.target_id,
            PokeRecord.is_email == poke.is_email,
        )
    )
    if existing.first() is not None:
        raise ConflictError("You have already poked this target")

    grant = await quotas.acquire(
        QuotaKind.POKE, sender.user_id, settings.poke_limit_for(sender.plan)
    )

    session.add(poke)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        await quotas.release(grant)
        raise ConflictError("You have already poked this target") from e
    except SQLAlchemyError:
        await session.rollback()
        await quotas.release(grant)
        raise
    await session.refresh(poke)

    logger.info(
        "Poke recorded",
        extra={
            "poke_id": poke.id,
            "sender_type": poke.sender_type.value,
            "is_email": poke.is_email,
            "pokes_used": grant.used,
        },
    )
    log_audit_event(
        AuditAction.POKE,
        ResourceType.POKE,
        poke.id,
        user_id=sender.user_id,
        details={"target_email": poke.target_email, "target_id": poke.target_id},
        contains_pii=True,
    )
    return poke, grant


async def list_sent_pokes(session: AsyncSession, sender_id: str) -> List[PokeRecord]:
    result = await session.execute(
        select(PokeRecord)
        .where(PokeRecord.sender_id == sender_id)
        .order_by(PokeRecord.created_at.desc(), PokeRecord.id.desc())
    )
    return list(result.scalars().all())


async def list_received_pokes(session: AsyncSession, user: AuthenticatedUser) -> List[PokeRecord]:
    """Pokes addressed to the user: by candidate id for candidates, by vendor id for vendors."""
    if user.is_vendor:
        condition = PokeRecord.target_vendor_id == user.user_id
    else:
        condition = PokeRecord.target_candidate_id == user.user_id
    result = await session.execute(
        select(PokeRecord)
        .where(condition)
        .order_by(PokeRecord.created_at.desc(), PokeRecord.id.desc())
    )
    return list(result.scalars().all())
