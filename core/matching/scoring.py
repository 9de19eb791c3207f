"""
Match scoring between a candidate and a job.

overall = 0.60 * skills + 0.15 * type + 0.25 * experience, each component
an integer percentage.
"""

import math
from typing import Iterable, Optional

from core.matching.types import CandidateLike, JobLike, MatchBreakdown, type_value

SKILLS_WEIGHT = 0.60
TYPE_WEIGHT = 0.15
EXPERIENCE_WEIGHT = 0.25


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative scores (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def _normalized(skills: Optional[Iterable[str]]) -> set[str]:
    return {s.strip().lower() for s in skills or [] if s is not None}


def skills_score(candidate_skills: Optional[Iterable[str]], job_skills: Optional[Iterable[str]]) -> int:
    required = _normalized(job_skills)
    if not required:
        return 100
    have = _normalized(candidate_skills)
    if not have:
        return 0
    return round_half_up(100 * len(required & have) / len(required))


def type_score(preferred_job_type, job_type) -> int:
    return 100 if type_value(preferred_job_type).lower() == type_value(job_type).lower() else 0


def experience_score(candidate_years: Optional[int], required_years: Optional[int]) -> int:
    if not required_years:
        return 100
    return min(100, round_half_up(100 * (candidate_years or 0) / required_years))


def score_match(candidate: CandidateLike, job: JobLike) -> MatchBreakdown:
    """Score one candidate against one job. Pure and deterministic."""
    skills = skills_score(candidate.skills, job.skills_required)
    job_type = type_score(candidate.preferred_job_type, job.job_type)
    experience = experience_score(candidate.experience_years, job.experience_required)
    overall = round_half_up(
        SKILLS_WEIGHT * skills + TYPE_WEIGHT * job_type + EXPERIENCE_WEIGHT * experience
    )
    return MatchBreakdown(skills=skills, type=job_type, experience=experience, overall=overall)
