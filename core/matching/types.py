"""
Shared types for the matching engine.

The engine works on plain attribute access, so ORM rows, dataclasses and
test doubles can all be passed in as long as they expose the attributes
listed on the protocols below.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum as PyEnum
from typing import Any, Mapping, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


# ==================== Enums ===================== #
class JobType(str, PyEnum):
    """Job employment type. Also the key domain of visibility configs."""

    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"


class WorkMode(str, PyEnum):
    """Where the work happens."""

    REMOTE = "remote"
    ONSITE = "onsite"
    HYBRID = "hybrid"
    UNSPECIFIED = ""


class LockState(str, PyEnum):
    """Profile lifecycle. Unlocked -> Locked is one-way."""

    UNLOCKED = "unlocked"
    LOCKED = "locked"


JOB_TYPE_VALUES: frozenset[str] = frozenset(t.value for t in JobType)

# job type value -> ordered subtypes; an empty list admits every subtype
VisibilityConfig = dict[str, list[str]]


def type_value(value: Any) -> str:
    """Plain string form of a job type (enum member, str or None)."""
    if value is None:
        return ""
    if isinstance(value, PyEnum):
        return str(value.value)
    return str(value)


def normalize_visibility(raw: Optional[Mapping[Any, Any]]) -> VisibilityConfig:
    """
    Coerce a stored or submitted visibility mapping into a VisibilityConfig.

    Keys outside JobType are dropped; subtype lists keep their order and
    lose duplicates.
    """
    if not raw:
        return {}

    config: VisibilityConfig = {}
    for key, subtypes in raw.items():
        key_value = type_value(key)
        if key_value not in JOB_TYPE_VALUES:
            logger.warning(
                "Dropping unknown visibility key",
                extra={"visibility_key": key_value},
            )
            continue
        ordered: list[str] = []
        for subtype in subtypes or []:
            if subtype and subtype not in ordered:
                ordered.append(str(subtype))
        config[key_value] = ordered
    return config


# ==================== Protocols ===================== #
class JobLike(Protocol):
    id: Any
    title: str
    job_type: Any
    job_sub_type: Optional[str]
    job_country: Optional[str]
    skills_required: Optional[Sequence[str]]
    experience_required: Optional[int]


class CandidateLike(Protocol):
    id: Any
    skills: Optional[Sequence[str]]
    preferred_job_type: Any
    experience_years: Optional[int]
    visibility_config: Optional[Mapping[Any, Any]]
    profile_country: Optional[str]


# ==================== Results ===================== #
@dataclass(frozen=True)
class MatchBreakdown:
    """Per-component scores and the weighted overall score, all in [0, 100]."""

    skills: int
    type: int
    experience: int
    overall: int

    def as_dict(self) -> dict[str, int]:
        return {"skills": self.skills, "type": self.type, "experience": self.experience}


@dataclass(frozen=True)
class JobMatch:
    job: Any
    score: MatchBreakdown


@dataclass(frozen=True)
class CandidateMatch:
    candidate: Any
    score: MatchBreakdown
    matched_job_id: Any
    matched_job_title: str


@dataclass
class JobRanking:
    """Ranked jobs for one candidate. Facets are only set when paginating."""

    matches: list[JobMatch]
    total: int
    page: Optional[int] = None
    page_size: Optional[int] = None
    type_counts: dict[str, int] = field(default_factory=dict)
    subtype_counts: dict[str, dict[str, int]] = field(default_factory=dict)
