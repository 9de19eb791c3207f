"""Candidate visibility gating between profiles and job postings."""

from typing import Iterable, Optional, TypeVar

from core.matching.types import (
    CandidateLike,
    JobLike,
    VisibilityConfig,
    normalize_visibility,
    type_value,
)

J = TypeVar("J", bound=JobLike)
C = TypeVar("C", bound=CandidateLike)


def is_visible(
    candidate: CandidateLike,
    job: JobLike,
    config: Optional[VisibilityConfig] = None,
) -> bool:
    """
    Decide whether a candidate and a job may be matched.

    - empty visibility config: visible everywhere
    - job without a type: visible
    - job type not granted: hidden
    - granted with a non-empty subtype list: the job's subtype (when set)
      must be in it

    Pass ``config`` when checking one candidate against many jobs so the
    stored mapping is normalized once.
    """
    if config is None:
        config = normalize_visibility(candidate.visibility_config)
    if not config:
        return True

    job_type = type_value(job.job_type)
    if not job_type:
        return True
    if job_type not in config:
        return False

    subtypes = config[job_type]
    job_sub_type = job.job_sub_type or ""
    if subtypes and job_sub_type and job_sub_type not in subtypes:
        return False
    return True


def filter_visible_jobs(candidate: CandidateLike, jobs: Iterable[J]) -> list[J]:
    """Jobs the candidate may be shown, in input order."""
    config = normalize_visibility(candidate.visibility_config)
    return [job for job in jobs if is_visible(candidate, job, config)]


def filter_visible_candidates(job: JobLike, candidates: Iterable[C]) -> list[C]:
    """Candidates a recruiter may see for this job, in input order."""
    return [candidate for candidate in candidates if is_visible(candidate, job)]
