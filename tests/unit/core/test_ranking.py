"""
Tests for job and candidate ranking.

Tests:
- Country filters
- Job ranking order, plan type filter, pagination and facets
- Candidate ranking by best job
- Repeated calls on the same snapshot give the same order
"""

import logging
from types import SimpleNamespace

import pytest

from core.errors import ValidationError
from core.matching.ranking import (
    filter_candidates_by_job_countries,
    filter_jobs_by_country,
    rank_candidates_for_jobs,
    rank_jobs_for_candidate,
)


def make_candidate(cid=1, **overrides):
    data = dict(
        id=cid,
        skills=["Python", "React"],
        preferred_job_type="full_time",
        experience_years=5,
        visibility_config={},
        profile_country="US",
    )
    data.update(overrides)
    return SimpleNamespace(**data)


def make_job(jid, **overrides):
    data = dict(
        id=jid,
        title=f"Job {jid}",
        job_type="full_time",
        job_sub_type="",
        job_country="US",
        skills_required=["Python"],
        experience_required=0,
    )
    data.update(overrides)
    return SimpleNamespace(**data)


class TestCountryFilters:
    """Test exact-match country filters."""

    def test_jobs_filtered_to_candidate_country(self):
        jobs = [make_job(1), make_job(2, job_country="IN"), make_job(3, job_country="")]

        assert [j.id for j in filter_jobs_by_country(make_candidate(), jobs)] == [1]

    def test_candidate_without_country_sees_all(self):
        jobs = [make_job(1), make_job(2, job_country="IN")]

        assert len(filter_jobs_by_country(make_candidate(profile_country=None), jobs)) == 2

    def test_candidates_filtered_to_job_countries(self):
        jobs = [make_job(1, job_country="US"), make_job(2, job_country="IN")]
        candidates = [
            make_candidate(1, profile_country="US"),
            make_candidate(2, profile_country="DE"),
            make_candidate(3, profile_country="IN"),
        ]

        kept = filter_candidates_by_job_countries(jobs, candidates)

        assert [c.id for c in kept] == [1, 3]

    def test_jobs_without_country_keep_all_candidates(self):
        candidates = [make_candidate(1), make_candidate(2, profile_country=None)]

        assert len(filter_candidates_by_job_countries([make_job(1, job_country="")], candidates)) == 2


class TestRankJobsForCandidate:
    """Test job ranking for one candidate."""

    def test_sorted_by_score_descending(self):
        jobs = [
            make_job(1, skills_required=["Go"]),
            make_job(2, skills_required=["Python"]),
            make_job(3, skills_required=["Python", "Go"]),
        ]

        ranking = rank_jobs_for_candidate(make_candidate(), jobs)

        assert [m.job.id for m in ranking.matches] == [2, 3, 1]
        assert ranking.total == 3
        assert ranking.page is None
        assert ranking.type_counts == {}

    def test_ties_keep_input_order(self):
        jobs = [make_job(5), make_job(3), make_job(4)]

        ranking = rank_jobs_for_candidate(make_candidate(), jobs)

        assert [m.job.id for m in ranking.matches] == [5, 3, 4]

    def test_visibility_and_country_applied(self):
        jobs = [
            make_job(1),
            make_job(2, job_type="contract"),
            make_job(3, job_country="IN"),
        ]
        candidate = make_candidate(visibility_config={"full_time": []})

        ranking = rank_jobs_for_candidate(candidate, jobs)

        assert [m.job.id for m in ranking.matches] == [1]

    def test_allowed_types_restrict_results(self):
        jobs = [make_job(1), make_job(2, job_type="contract"), make_job(3, job_type="internship")]

        ranking = rank_jobs_for_candidate(make_candidate(), jobs, allowed_types=["full_time", "internship"])

        assert sorted(m.job.id for m in ranking.matches) == [1, 3]

    def test_empty_allowed_types_returns_nothing(self):
        ranking = rank_jobs_for_candidate(make_candidate(), [make_job(1)], allowed_types=[])

        assert ranking.matches == []
        assert ranking.total == 0

    def test_pagination_and_facets_over_full_set(self):
        jobs = [
            make_job(1, job_type="full_time"),
            make_job(2, job_type="contract", job_sub_type="w2"),
            make_job(3, job_type="contract", job_sub_type="c2c"),
            make_job(4, job_type="contract", job_sub_type="w2"),
            make_job(5, job_type="internship"),
        ]

        ranking = rank_jobs_for_candidate(make_candidate(), jobs, page=2, page_size=2)

        assert ranking.total == 5
        assert ranking.page == 2
        assert ranking.page_size == 2
        assert len(ranking.matches) == 2
        assert ranking.type_counts == {"full_time": 1, "contract": 3, "internship": 1}
        assert ranking.subtype_counts == {"contract": {"w2": 2, "c2c": 1}}

    def test_page_past_end_is_empty(self):
        ranking = rank_jobs_for_candidate(make_candidate(), [make_job(1)], page=3, page_size=10)

        assert ranking.matches == []
        assert ranking.total == 1

    def test_pagination_requires_both_values(self):
        ranking = rank_jobs_for_candidate(make_candidate(), [make_job(1), make_job(2)], page=1)

        assert len(ranking.matches) == 2
        assert ranking.page is None

    @pytest.mark.parametrize("page,page_size", [(0, 10), (1, 0)])
    def test_invalid_pagination(self, page, page_size):
        with pytest.raises(ValidationError):
            rank_jobs_for_candidate(make_candidate(), [make_job(1)], page=page, page_size=page_size)


class TestRankCandidatesForJobs:
    """Test candidate ranking across a vendor's jobs."""

    def test_best_job_wins(self):
        jobs = [
            make_job(1, title="Go Dev", skills_required=["Go"]),
            make_job(2, title="Python Dev", skills_required=["Python"]),
        ]

        matches = rank_candidates_for_jobs(jobs, [make_candidate()])

        assert len(matches) == 1
        assert matches[0].matched_job_id == 2
        assert matches[0].matched_job_title == "Python Dev"
        assert matches[0].score.overall == 100

    def test_tie_keeps_first_job(self):
        jobs = [make_job(7), make_job(8)]

        matches = rank_candidates_for_jobs(jobs, [make_candidate()])

        assert matches[0].matched_job_id == 7

    def test_sorted_by_best_score(self):
        weak = make_candidate(1, skills=["Go"], preferred_job_type="contract")
        strong = make_candidate(2)

        matches = rank_candidates_for_jobs([make_job(1)], [weak, strong])

        assert [m.candidate.id for m in matches] == [2, 1]

    def test_candidates_without_visible_job_dropped(self):
        hidden = make_candidate(1, visibility_config={"contract": []})

        assert rank_candidates_for_jobs([make_job(1)], [hidden]) == []

    def test_zero_score_dropped(self):
        nobody = make_candidate(1, skills=[], preferred_job_type="contract", experience_years=0)
        job = make_job(1, skills_required=["Python"], experience_required=5)

        assert rank_candidates_for_jobs([job], [nobody]) == []

    def test_country_filter_opt_in(self):
        abroad = make_candidate(1, profile_country="DE")

        assert len(rank_candidates_for_jobs([make_job(1)], [abroad])) == 1
        assert rank_candidates_for_jobs([make_job(1)], [abroad], filter_by_country=True) == []

    def test_no_jobs(self):
        assert rank_candidates_for_jobs([], [make_candidate()]) == []

    def test_legacy_visibility_normalized_once_per_candidate(self, caplog):
        legacy = make_candidate(1, visibility_config={"full_time": [], "freelance": []})
        jobs = [make_job(1), make_job(2), make_job(3)]

        with caplog.at_level(logging.WARNING, logger="core.matching.types"):
            matches = rank_candidates_for_jobs(jobs, [legacy])

        assert matches[0].matched_job_id == 1
        dropped = [r for r in caplog.records if r.getMessage() == "Dropping unknown visibility key"]
        assert len(dropped) == 1


class TestRankingDeterminism:
    """Test that rankers return the same order for the same snapshot."""

    @pytest.fixture
    def jobs(self):
        return [
            make_job(1, skills_required=["Python"]),
            make_job(2, skills_required=["Python"]),
            make_job(3, skills_required=["Go", "Rust"], job_type="contract"),
            make_job(4, skills_required=["Python", "React"]),
            make_job(5, skills_required=["Python"]),
        ]

    @pytest.fixture
    def candidates(self):
        return [
            make_candidate(1),
            make_candidate(2),
            make_candidate(3, skills=["Go"], preferred_job_type="contract"),
            make_candidate(4, skills=["Python"], preferred_job_type="part_time"),
            make_candidate(5),
        ]

    def test_jobs_for_candidate(self, jobs):
        candidate = make_candidate()

        first = rank_jobs_for_candidate(candidate, jobs)
        second = rank_jobs_for_candidate(candidate, jobs)

        first_order = [(m.job.id, m.score) for m in first.matches]
        assert first_order == [(m.job.id, m.score) for m in second.matches]
        # jobs 1, 2, 4 and 5 tie at 100 and keep input order
        assert [job_id for job_id, _ in first_order] == [1, 2, 4, 5, 3]

    def test_candidates_for_jobs(self, jobs, candidates):
        first = rank_candidates_for_jobs(jobs, candidates)
        second = rank_candidates_for_jobs(jobs, candidates)

        first_order = [(m.candidate.id, m.matched_job_id, m.score) for m in first]
        assert first_order == [(m.candidate.id, m.matched_job_id, m.score) for m in second]
        # candidates 1, 2 and 5 tie at 100 and keep input order
        assert [(cid, job_id) for cid, job_id, _ in first_order] == [(1, 1), (2, 1), (5, 1), (4, 1), (3, 3)]
        assert [score.overall for _, _, score in first_order] == [100, 100, 100, 85, 70]
