"""
Rankers built on the visibility filter and the match scorer.

Both rankers are pure: callers load snapshots of jobs and candidates and
pass them in. Sorting is stable, so equal scores keep input order.
"""

import logging
from collections import Counter, defaultdict
from typing import Iterable, Optional, Sequence

from core.errors import ValidationError
from core.matching.scoring import score_match
from core.matching.types import (
    CandidateLike,
    CandidateMatch,
    JobLike,
    JobMatch,
    JobRanking,
    normalize_visibility,
    type_value,
)
from core.matching.visibility import filter_visible_jobs, is_visible

logger = logging.getLogger(__name__)


def filter_jobs_by_country(candidate: CandidateLike, jobs: Iterable[JobLike]) -> list:
    """Keep jobs whose country equals the candidate's exactly. No-op without a candidate country."""
    country = candidate.profile_country
    if not country:
        return list(jobs)
    return [job for job in jobs if job.job_country == country]


def filter_candidates_by_job_countries(
    jobs: Sequence[JobLike], candidates: Iterable[CandidateLike]
) -> list:
    """Keep candidates located in one of the job countries. No-op when no job has a country."""
    countries = {job.job_country for job in jobs if job.job_country}
    if not countries:
        return list(candidates)
    return [c for c in candidates if c.profile_country in countries]


def rank_jobs_for_candidate(
    candidate: CandidateLike,
    jobs: Iterable[JobLike],
    allowed_types: Optional[Iterable[str]] = None,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> JobRanking:
    """
    Rank jobs for a candidate.

    Pipeline: visibility, country, allowed job types, score, stable sort by
    overall score descending, then optional pagination. When paginating, job
    type and (type, subtype) counts are computed over the whole filtered set.

    Args:
        candidate: Candidate profile snapshot
        jobs: Active jobs to consider
        allowed_types: Job types the candidate's plan permits (None = all)
        page: 1-indexed page number; paginates only together with page_size
        page_size: Items per page

    Returns:
        JobRanking with matches and, when paginated, facet counts
    """
    filtered = filter_visible_jobs(candidate, jobs)
    filtered = filter_jobs_by_country(candidate, filtered)
    if allowed_types is not None:
        allowed = {type_value(t) for t in allowed_types}
        filtered = [job for job in filtered if type_value(job.job_type) in allowed]

    scored = [JobMatch(job=job, score=score_match(candidate, job)) for job in filtered]
    scored.sort(key=lambda m: m.score.overall, reverse=True)

    if page is None or page_size is None:
        return JobRanking(matches=scored, total=len(scored))

    if page < 1 or page_size < 1:
        raise ValidationError("page and page_size must be >= 1", field="page")

    type_counts: Counter = Counter()
    subtype_counts: dict[str, Counter] = defaultdict(Counter)
    for job in filtered:
        job_type = type_value(job.job_type)
        type_counts[job_type] += 1
        if job.job_sub_type:
            subtype_counts[job_type][job.job_sub_type] += 1

    offset = (page - 1) * page_size
    return JobRanking(
        matches=scored[offset : offset + page_size],
        total=len(scored),
        page=page,
        page_size=page_size,
        type_counts=dict(type_counts),
        subtype_counts={k: dict(v) for k, v in subtype_counts.items()},
    )


def rank_candidates_for_jobs(
    jobs: Sequence[JobLike],
    candidates: Iterable[CandidateLike],
    filter_by_country: bool = False,
) -> list[CandidateMatch]:
    """
    Rank candidates by their best-matching job.

    For each candidate the best visible job wins; on a tie the job seen first
    is kept. Candidates whose best score is 0 (or with no visible job) are
    dropped.
    """
    if filter_by_country:
        candidates = filter_candidates_by_job_countries(jobs, candidates)

    results: list[CandidateMatch] = []
    for candidate in candidates:
        config = normalize_visibility(candidate.visibility_config)
        best = None
        best_job = None
        for job in jobs:
            if not is_visible(candidate, job, config):
                continue
            score = score_match(candidate, job)
            if best is None or score.overall > best.overall:
                best = score
                best_job = job

        if best is None or best.overall <= 0:
            continue
        results.append(
            CandidateMatch(
                candidate=candidate,
                score=best,
                matched_job_id=best_job.id,
                matched_job_title=best_job.title,
            )
        )

    results.sort(key=lambda m: m.score.overall, reverse=True)
    logger.debug(
        "Ranked candidates for jobs",
        extra={"jobs": len(jobs), "matches": len(results)},
    )
    return results
