"""
API Services Layer.

Database-backed operations for the API endpoints. Each function takes the
request's AsyncSession; matching logic itself lives in core.matching.
"""

from api.services.jobs import (
    create_job,
    list_jobs,
    get_job,
    list_vendor_jobs,
    set_job_active,
    apply_to_job,
    list_candidate_applications,
    match_jobs_for_candidate,
    match_candidates_for_vendor,
)

from api.services.profiles import (
    get_profile,
    create_profile,
    create_draft_profile,
    update_profile,
    delete_profile,
    list_public_profiles,
    get_resume,
)

from api.services.pokes import (
    send_poke,
    list_sent_pokes,
    list_received_pokes,
)

__all__ = [
    # Jobs
    "create_job",
    "list_jobs",
    "get_job",
    "list_vendor_jobs",
    "set_job_active",
    # Applications
    "apply_to_job",
    "list_candidate_applications",
    # Matching
    "match_jobs_for_candidate",
    "match_candidates_for_vendor",
    # Profiles
    "get_profile",
    "create_profile",
    "create_draft_profile",
    "update_profile",
    "delete_profile",
    "list_public_profiles",
    "get_resume",
    # Pokes
    "send_poke",
    "list_sent_pokes",
    "list_received_pokes",
]
