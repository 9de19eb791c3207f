"""Candidate profile service functions."""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from core.errors import ConflictError, NotFoundError
from core.matching import (
    ProfileChanges,
    ProfileDocument,
    apply_profile_update,
    create_draft,
)
from core.security import AuditAction, AuthenticatedUser, ResourceType, log_audit_event
from database.models.candidates import CandidateProfile

logger = logging.getLogger(__name__)


async def find_profile(session: AsyncSession, candidate_id: str) -> Optional[CandidateProfile]:
    result = await session.execute(
        select(CandidateProfile).where(CandidateProfile.candidate_id == candidate_id)
    )
    return result.scalar_one_or_none()


async def get_profile(session: AsyncSession, candidate_id: str) -> CandidateProfile:
    """Get a candidate's own profile."""
    profile = await find_profile(session, candidate_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


def _write_document(profile: CandidateProfile, document: ProfileDocument) -> None:
    data = document.as_dict()
    data["lock_state"] = document.lock_state
    for key, value in data.items():
        setattr(profile, key, value)


async def _insert(
    session: AsyncSession,
    candidate: AuthenticatedUser,
    document: ProfileDocument,
) -> CandidateProfile:
    profile = CandidateProfile(candidate_id=candidate.user_id, email=candidate.email)
    _write_document(profile, document)
    session.add(profile)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise ConflictError("Profile already exists or username is taken") from e
    await session.refresh(profile)
    return profile


async def create_profile(
    session: AsyncSession,
    candidate: AuthenticatedUser,
    fields: Dict[str, Any],
) -> CandidateProfile:
    """
    Create and lock a profile.

    Raises:
        ConflictError: if the candidate already has a profile
        ValidationError: if profile_country is missing
    """
    if await find_profile(session, candidate.user_id) is not None:
        raise ConflictError("Profile already exists. Use PUT to update.")

    document = apply_profile_update(None, ProfileChanges.from_mapping(fields))
    profile = await _insert(session, candidate, document)

    logger.info(
        "Profile created",
        extra={"candidate_id": candidate.user_id, "skills": len(profile.skills)},
    )
    log_audit_event(
        AuditAction.CREATE, ResourceType.CANDIDATE_PROFILE, profile.id, user_id=candidate.user_id
    )
    return profile


async def create_draft_profile(
    session: AsyncSession,
    candidate: AuthenticatedUser,
    fields: Dict[str, Any],
) -> CandidateProfile:
    """Create a minimal unlocked profile; the first full save locks it."""
    if await find_profile(session, candidate.user_id) is not None:
        raise ConflictError("Profile already exists. Use PUT to update.")

    profile = await _insert(session, candidate, create_draft(ProfileChanges.from_mapping(fields)))
    logger.info("Draft profile created", extra={"candidate_id": candidate.user_id})
    return profile


async def update_profile(
    session: AsyncSession,
    candidate: AuthenticatedUser,
    fields: Dict[str, Any],
) -> CandidateProfile:
    """
    Apply an update under the append-only protocol, creating the profile if needed.

    The write is conditional on the version read here; a concurrent update
    in between makes this one fail with ConflictError instead of
    overwriting it.
    """
    changes = ProfileChanges.from_mapping(fields)
    profile = await find_profile(session, candidate.user_id)
    if profile is None:
        document = apply_profile_update(None, changes)
        profile = await _insert(session, candidate, document)
        log_audit_event(
            AuditAction.CREATE, ResourceType.CANDIDATE_PROFILE, profile.id, user_id=candidate.user_id
        )
        return profile

    was_locked = profile.profile_locked
    document = apply_profile_update(ProfileDocument.from_object(profile), changes)
    _write_document(profile, document)
    try:
        await session.commit()
    except StaleDataError as e:
        await session.rollback()
        logger.warning(
            "Concurrent profile update rejected",
            extra={"candidate_id": candidate.user_id},
        )
        raise ConflictError("Profile was modified concurrently; reload and retry") from e
    except IntegrityError as e:
        await session.rollback()
        raise ConflictError("Username is already taken") from e
    await session.refresh(profile)

    logger.info(
        "Profile updated",
        extra={
            "candidate_id": candidate.user_id,
            "version": profile.version,
            "skills": len(profile.skills),
        },
    )
    log_audit_event(
        AuditAction.UPDATE if was_locked else AuditAction.LOCK,
        ResourceType.CANDIDATE_PROFILE,
        profile.id,
        user_id=candidate.user_id,
    )
    return profile


async def delete_profile(session: AsyncSession, candidate_id: str) -> None:
    """Delete a profile outright. Not subject to the append-only rules."""
    profile = await get_profile(session, candidate_id)
    await session.delete(profile)
    await session.commit()
    logger.info("Profile deleted", extra={"candidate_id": candidate_id})
    log_audit_event(
        AuditAction.DELETE, ResourceType.CANDIDATE_PROFILE, profile.id, user_id=candidate_id
    )


async def list_public_profiles(
    session: AsyncSession,
    limit: int = 20,
    offset: int = 0,
) -> Dict[str, Any]:
    """Profiles for anonymous browsing, newest first."""
    total = (await session.execute(select(func.count()).select_from(CandidateProfile))).scalar() or 0
    result = await session.execute(
        select(CandidateProfile)
        .order_by(CandidateProfile.created_at.desc(), CandidateProfile.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return {"profiles": list(result.scalars().all()), "total": total, "limit": limit, "offset": offset}


async def get_resume(session: AsyncSession, username: str) -> CandidateProfile:
    """Public resume by username."""
    result = await session.execute(
        select(CandidateProfile).where(CandidateProfile.username == username)
    )
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFoundError(f"No resume for '{username}'")
    return profile

