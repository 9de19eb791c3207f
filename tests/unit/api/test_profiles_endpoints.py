"""
Tests for candidate profile endpoints and the profile service.

Tests:
- Create (locks), draft (unlocked), upsert via PUT
- Append-only enforcement once locked
- Username uniqueness, public listing and resumes
- Concurrent updates rejected by the version check
"""

import pytest

from api.services import profiles as profile_service
from core.errors import ConflictError
from core.security import AuthenticatedUser

PROFILES = "/api/v1/profiles"


def profile_body(**overrides):
    data = {
        "name": "Ada",
        "username": "ada",
        "profile_country": "US",
        "preferred_job_type": "full_time",
        "experience_years": 3,
        "resume_summary": "Python developer",
        "visibility_config": {"contract": ["w2"]},
    }
    data.update(overrides)
    return data


@pytest.fixture
def created_profile(client, candidate_headers):
    response = client.post(PROFILES, json=profile_body(), headers=candidate_headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateProfile:
    """Test POST /profiles."""

    def test_create_locks_and_extracts_skills(self, created_profile):
        assert created_profile["candidate_id"] == "cand-1"
        assert created_profile["email"] == "cand-1@acme.io"
        assert created_profile["lock_state"] == "locked"
        assert created_profile["profile_locked"] is True
        assert created_profile["skills"] == ["Python"]
        assert created_profile["visibility_config"] == {"contract": ["w2"]}

    def test_supplied_skills_ignored(self, client, candidate_headers):
        response = client.post(PROFILES, json=profile_body(skills=["COBOL"]), headers=candidate_headers)

        assert response.json()["skills"] == ["Python"]

    def test_country_required(self, client, candidate_headers):
        body = profile_body()
        del body["profile_country"]

        response = client.post(PROFILES, json=body, headers=candidate_headers)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"] == {"field": "profile_country"}

    def test_duplicate(self, client, candidate_headers, created_profile):
        response = client.post(PROFILES, json=profile_body(), headers=candidate_headers)

        assert response.status_code == 409

    def test_username_taken(self, client, make_auth_headers, created_profile):
        response = client.post(
            PROFILES, json=profile_body(), headers=make_auth_headers("cand-2", "candidate")
        )

        assert response.status_code == 409

    def test_unknown_visibility_key(self, client, candidate_headers):
        response = client.post(
            PROFILES, json=profile_body(visibility_config={"freelance": []}), headers=candidate_headers
        )

        assert response.status_code == 422

    def test_vendor_forbidden(self, client, vendor_headers):
        assert client.post(PROFILES, json=profile_body(), headers=vendor_headers).status_code == 403


class TestDraftProfile:
    """Test POST /profiles/draft and the first full save."""

    def test_draft_then_lock(self, client, candidate_headers):
        draft = client.post(f"{PROFILES}/draft", json={"name": "Ada", "skills": ["Go"]}, headers=candidate_headers)

        assert draft.status_code == 201
        assert draft.json()["lock_state"] == "unlocked"
        assert draft.json()["profile_country"] is None

        locked = client.put(
            f"{PROFILES}/me",
            json={"profile_country": "US", "resume_summary": "Python developer"},
            headers=candidate_headers,
        )

        assert locked.status_code == 200
        assert locked.json()["lock_state"] == "locked"
        assert locked.json()["skills"] == ["Go", "Python"]

    def test_draft_lock_requires_country(self, client, candidate_headers):
        client.post(f"{PROFILES}/draft", json={"name": "Ada"}, headers=candidate_headers)

        response = client.put(f"{PROFILES}/me", json={"name": "Ada L."}, headers=candidate_headers)

        assert response.status_code == 400

    def test_second_draft_conflicts(self, client, candidate_headers):
        client.post(f"{PROFILES}/draft", json={}, headers=candidate_headers)

        assert client.post(f"{PROFILES}/draft", json={}, headers=candidate_headers).status_code == 409


class TestUpdateProfile:
    """Test PUT /profiles/me on a locked profile."""

    def test_upsert_creates(self, client, candidate_headers):
        response = client.put(f"{PROFILES}/me", json=profile_body(), headers=candidate_headers)

        assert response.status_code == 200
        assert response.json()["lock_state"] == "locked"

    def test_append_resume(self, client, candidate_headers, created_profile):
        response = client.put(
            f"{PROFILES}/me",
            json={"resume_summary": "Python developer, now also Go"},
            headers=candidate_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["resume_summary"] == "Python developer, now also Go"
        assert data["skills"] == ["Python", "Go"]

    def test_rewrite_rejected(self, client, candidate_headers, created_profile):
        response = client.put(
            f"{PROFILES}/me", json={"resume_summary": "Go developer"}, headers=candidate_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"field": "resume_summary"}
        current = client.get(f"{PROFILES}/me", headers=candidate_headers).json()
        assert current["resume_summary"] == "Python developer"

    def test_experience_cannot_decrease(self, client, candidate_headers, created_profile):
        response = client.put(f"{PROFILES}/me", json={"experience_years": 1}, headers=candidate_headers)

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"field": "experience_years"}

    def test_visibility_merged(self, client, candidate_headers, created_profile):
        response = client.put(
            f"{PROFILES}/me",
            json={"visibility_config": {"contract": ["c2c"], "full_time": []}},
            headers=candidate_headers,
        )

        assert response.json()["visibility_config"] == {"contract": ["w2", "c2c"], "full_time": []}

    def test_skills_not_replaced(self, client, candidate_headers, created_profile):
        response = client.put(f"{PROFILES}/me", json={"skills": ["Rust"]}, headers=candidate_headers)

        assert response.json()["skills"] == ["Python"]

    def test_scalar_fields_override(self, client, candidate_headers, created_profile):
        response = client.put(
            f"{PROFILES}/me", json={"name": "Ada Lovelace", "profile_country": "CA"}, headers=candidate_headers
        )

        assert response.json()["name"] == "Ada Lovelace"
        assert response.json()["profile_country"] == "CA"


class TestReadAndDelete:
    """Test reading, public views and deletion."""

    def test_get_missing(self, client, candidate_headers):
        assert client.get(f"{PROFILES}/me", headers=candidate_headers).status_code == 404

    def test_get_me(self, client, candidate_headers, created_profile):
        response = client.get(f"{PROFILES}/me", headers=candidate_headers)

        assert response.status_code == 200
        assert response.json()["id"] == created_profile["id"]

    def test_public_listing_omits_contact(self, client, created_profile):
        data = client.get(f"{PROFILES}/public").json()

        assert data["total"] == 1
        item = data["items"][0]
        assert item["name"] == "Ada"
        assert "email" not in item
        assert "phone" not in item

    def test_resume_by_username(self, client, created_profile):
        response = client.get(f"{PROFILES}/resume/ada")

        assert response.status_code == 200
        assert response.json()["resume_summary"] == "Python developer"
        assert "email" not in response.json()

    def test_resume_missing(self, client):
        assert client.get(f"{PROFILES}/resume/nobody").status_code == 404

    def test_delete(self, client, candidate_headers, created_profile):
        response = client.delete(f"{PROFILES}/me", headers=candidate_headers)

        assert response.status_code == 204
        assert client.get(f"{PROFILES}/me", headers=candidate_headers).status_code == 404

    def test_delete_missing(self, client, candidate_headers):
        assert client.delete(f"{PROFILES}/me", headers=candidate_headers).status_code == 404


class TestConcurrentUpdates:
    """Test the version check on profile writes."""

    async def test_stale_write_conflicts(self, session_factory):
        candidate = AuthenticatedUser("cand-9", "c9@acme.io", "candidate")
        async with session_factory() as setup:
            created = await profile_service.create_profile(
                setup, candidate, {"profile_country": "US", "resume_summary": "Python"}
            )
        assert created.version == 1

        async with session_factory() as first, session_factory() as second:
            stale = await profile_service.find_profile(second, candidate.user_id)
            assert stale.version == 1

            updated = await profile_service.update_profile(
                first, candidate, {"resume_summary": "Python and Go"}
            )
            assert updated.version == 2

            with pytest.raises(ConflictError):
                await profile_service.update_profile(second, candidate, {"experience_years": 2})

        async with session_factory() as check:
            profile = await profile_service.get_profile(check, candidate.user_id)
            assert profile.resume_summary == "Python and Go"
            assert profile.experience_years == 0
