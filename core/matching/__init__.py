"""
Matching engine: visibility gating, match scoring, ranking and the
append-only profile protocol. Pure functions with no storage access.
"""

from core.matching.profile_protocol import (
    ProfileChanges,
    ProfileDocument,
    apply_profile_update,
    create_draft,
    merge_visibility,
)
from core.matching.ranking import (
    filter_candidates_by_job_countries,
    filter_jobs_by_country,
    rank_candidates_for_jobs,
    rank_jobs_for_candidate,
)
from core.matching.scoring import score_match
from core.matching.skills import extract_skills, merge_skills
from core.matching.types import (
    CandidateMatch,
    JobMatch,
    JobRanking,
    JobType,
    LockState,
    MatchBreakdown,
    WorkMode,
    normalize_visibility,
)
from core.matching.visibility import (
    filter_visible_candidates,
    filter_visible_jobs,
    is_visible,
)

__all__ = [
    # Types
    "JobType",
    "WorkMode",
    "LockState",
    "MatchBreakdown",
    "JobMatch",
    "CandidateMatch",
    "JobRanking",
    "normalize_visibility",
    # Visibility
    "is_visible",
    "filter_visible_jobs",
    "filter_visible_candidates",
    # Scoring & ranking
    "score_match",
    "rank_jobs_for_candidate",
    "rank_candidates_for_jobs",
    "filter_jobs_by_country",
    "filter_candidates_by_job_countries",
    # Skills
    "extract_skills",
    "merge_skills",
    # Profile protocol
    "ProfileDocument",
    "ProfileChanges",
    "apply_profile_update",
    "create_draft",
    "merge_visibility",
]
