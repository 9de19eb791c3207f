"""
Append-only profile mutation protocol.

A profile moves from UNLOCKED to LOCKED on its first full save and never
back. Once locked, resume text may only grow by suffix, experience may
only increase, visibility grants only accumulate and skills are only ever
added. Every rule is checked before the new document is built, so a
failed update leaves nothing half-applied.
"""

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Optional

from core.errors import ValidationError
from core.matching.skills import extract_skills, merge_skills
from core.matching.types import LockState, VisibilityConfig, normalize_visibility

logger = logging.getLogger(__name__)

RESUME_FIELDS: tuple[str, ...] = (
    "resume_summary",
    "resume_experience",
    "resume_education",
    "resume_achievements",
)

# Text scanned for skills, in concatenation order
SKILL_TEXT_FIELDS: tuple[str, ...] = RESUME_FIELDS + ("bio", "current_role")

SCALAR_FIELDS: tuple[str, ...] = (
    "name",
    "phone",
    "current_company",
    "current_role",
    "username",
    "location",
    "bio",
    "preferred_job_type",
    "expected_hourly_rate",
    "profile_country",
)


@dataclass(frozen=True)
class ProfileDocument:
    """The mutable content of a candidate profile."""

    name: str = ""
    phone: str = ""
    current_company: str = ""
    current_role: str = ""
    username: Optional[str] = None
    location: str = ""
    bio: str = ""
    preferred_job_type: str = ""
    expected_hourly_rate: Optional[float] = None
    experience_years: int = 0
    skills: tuple[str, ...] = ()
    resume_summary: str = ""
    resume_experience: str = ""
    resume_education: str = ""
    resume_achievements: str = ""
    visibility_config: VisibilityConfig = field(default_factory=dict)
    profile_country: Optional[str] = None
    lock_state: LockState = LockState.UNLOCKED

    @property
    def is_locked(self) -> bool:
        return self.lock_state == LockState.LOCKED

    def as_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["skills"] = list(self.skills)
        data["visibility_config"] = {k: list(v) for k, v in self.visibility_config.items()}
        data["lock_state"] = self.lock_state.value
        return data

    @classmethod
    def from_object(cls, obj: Any) -> "ProfileDocument":
        """Build from any object exposing the document attributes (e.g. an ORM row)."""
        values: dict[str, Any] = {}
        for f in fields(cls):
            value = getattr(obj, f.name, None)
            if value is None:
                continue
            values[f.name] = value
        values["skills"] = tuple(values.get("skills") or ())
        values["visibility_config"] = normalize_visibility(values.get("visibility_config"))
        values["lock_state"] = LockState(values.get("lock_state", LockState.UNLOCKED))
        return cls(**values)


@dataclass(frozen=True)
class ProfileChanges:
    """Incoming fields. None means the field was not supplied."""

    name: Optional[str] = None
    phone: Optional[str] = None
    current_company: Optional[str] = None
    current_role: Optional[str] = None
    username: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    preferred_job_type: Optional[str] = None
    expected_hourly_rate: Optional[float] = None
    experience_years: Optional[int] = None
    skills: Optional[list[str]] = None
    resume_summary: Optional[str] = None
    resume_experience: Optional[str] = None
    resume_education: Optional[str] = None
    resume_achievements: Optional[str] = None
    visibility_config: Optional[dict[str, list[str]]] = None
    profile_country: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "ProfileChanges":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def merge_visibility(existing: VisibilityConfig, incoming: VisibilityConfig) -> VisibilityConfig:
    """
    Per-key ordered union of two visibility configs.

    Existing keys and subtypes keep their order; new ones are appended.
    Nothing is ever removed.
    """
    merged: VisibilityConfig = {key: list(subtypes) for key, subtypes in existing.items()}
    for key, subtypes in incoming.items():
        current = merged.setdefault(key, [])
        for subtype in subtypes:
            if subtype not in current:
                current.append(subtype)
    return merged


def _skill_text(doc: ProfileDocument) -> str:
    return "\n".join(getattr(doc, name) or "" for name in SKILL_TEXT_FIELDS)


def _check_experience(value: Optional[int]) -> None:
    if value is not None and value < 0:
        raise ValidationError("experience_years must be >= 0", field="experience_years")


def _require_country(doc: ProfileDocument) -> None:
    if not doc.profile_country or not doc.profile_country.strip():
        raise ValidationError("profile_country is required", field="profile_country")


def _overwrite(base: ProfileDocument, changes: ProfileChanges) -> ProfileDocument:
    """Unconstrained overwrite of every supplied field."""
    updates: dict[str, Any] = {}
    for f in fields(changes):
        value = getattr(changes, f.name)
        if value is None:
            continue
        if f.name == "skills":
            value = tuple(merge_skills(value))
        elif f.name == "visibility_config":
            value = normalize_visibility(value)
        updates[f.name] = value
    return replace(base, **updates)


def create_draft(changes: ProfileChanges) -> ProfileDocument:
    """Minimal unlocked profile. No country required, nothing extracted."""
    _check_experience(changes.experience_years)
    return _overwrite(ProfileDocument(), changes)


def _create(changes: ProfileChanges) -> ProfileDocument:
    _check_experience(changes.experience_years)
    doc = _overwrite(ProfileDocument(), replace(changes, skills=None))
    _require_country(doc)
    return replace(
        doc,
        skills=tuple(extract_skills(_skill_text(doc))),
        lock_state=LockState.LOCKED,
    )


def _update_unlocked(existing: ProfileDocument, changes: ProfileChanges) -> ProfileDocument:
    _check_experience(changes.experience_years)
    doc = _overwrite(existing, changes)
    _require_country(doc)
    return replace(
        doc,
        skills=tuple(merge_skills(doc.skills, extract_skills(_skill_text(doc)))),
        lock_state=LockState.LOCKED,
    )


def _update_locked(existing: ProfileDocument, changes: ProfileChanges) -> ProfileDocument:
    # Validate everything first
    for name in RESUME_FIELDS:
        old = getattr(existing, name) or ""
        new = getattr(changes, name) or ""
        if old and new and not new.startswith(old):
            raise ValidationError(
                f"{name} is append-only: new text must start with the saved text",
                field=name,
            )

    _check_experience(changes.experience_years)
    if (
        changes.experience_years is not None
        and changes.experience_years < existing.experience_years
    ):
        raise ValidationError(
            "experience_years cannot decrease "
            f"(saved {existing.experience_years}, got {changes.experience_years})",
            field="experience_years",
        )

    if changes.profile_country is not None and not changes.profile_country.strip():
        raise ValidationError("profile_country cannot be cleared", field="profile_country")

    updates: dict[str, Any] = {}
    for name in RESUME_FIELDS:
        new = getattr(changes, name)
        if new:
            updates[name] = new
    if changes.experience_years is not None:
        updates["experience_years"] = changes.experience_years
    for name in SCALAR_FIELDS:
        value = getattr(changes, name)
        if value is not None:
            updates[name] = value
    if changes.visibility_config is not None:
        updates["visibility_config"] = merge_visibility(
            existing.visibility_config, normalize_visibility(changes.visibility_config)
        )

    doc = replace(existing, **updates)
    return replace(doc, skills=tuple(merge_skills(existing.skills, extract_skills(_skill_text(doc)))))


def apply_profile_update(
    existing: Optional[ProfileDocument], changes: ProfileChanges
) -> ProfileDocument:
    """
    Compute the next version of a profile.

    Args:
        existing: Current document, or None when creating
        changes: Supplied fields

    Returns:
        The new, always LOCKED, document

    Raises:
        ValidationError: naming the first offending field; nothing is applied
    """
    if existing is None:
        result = _create(changes)
    elif existing.is_locked:
        result = _update_locked(existing, changes)
    else:
        result = _update_unlocked(existing, changes)

    logger.debug(
        "Profile update computed",
        extra={
            "path": "create" if existing is None else existing.lock_state.value,
            "skills": len(result.skills),
        },
    )
    return result
