"""API tests for deletion requests, badges, reviews, users and jobs."""

from httpx import AsyncClient
from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavote.config import get_settings
from mediavote.main import app, build_scheduler

MOVIE = {
    "media_id": 101,
    "media_type": "movie",
    "tmdb_id": 27205,
    "title": "Inception",
    "reason": "Nobody has watched it in a year",
}


class TestAuthAPI:
    """Tests for session resolution."""

    async def test_me_with_session(self, client: AsyncClient, user_headers):
        response = await client.get("/api/auth/me", headers=user_headers["alice"])
        assert response.status_code == 200
        assert response.json()["user_id"] == "alice"

    async def test_bearer_token(self, client: AsyncClient, user_headers):
        token = user_headers["bob"]["X-Session-Token"]
        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.json()["user_id"] == "bob"

    async def test_missing_session(self, client: AsyncClient):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401

    async def test_logout_invalidates_session(self, client: AsyncClient, user_headers):
        await client.post("/api/auth/logout", headers=user_headers["alice"])
        response = await client.get("/api/auth/me", headers=user_headers["alice"])
        assert response.status_code == 401


class TestDeletionAPI:
    """Tests for the deletion request endpoints."""

    async def test_create_and_get(self, client: AsyncClient, user_headers):
        response = await client.post("/api/deletion-requests", json=MOVIE, headers=user_headers["alice"])

        assert response.status_code == 201
        created = response.json()
        assert created["status"] == "voting"
        assert created["requested_by"] == "alice"
        assert created["is_voting_active"] is True
        assert created["total_votes"] == 0

        response = await client.get(
            f"/api/deletion-requests/{created['_id']}", headers=user_headers["bob"]
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Inception"

    async def test_create_without_title_snapshots_unknown(self, client: AsyncClient, user_headers):
        """Without a TMDB key the snapshot falls back to an unknown title."""
        payload = {k: v for k, v in MOVIE.items() if k != "title"}
        response = await client.post("/api/deletion-requests", json=payload, headers=user_headers["alice"])

        assert response.status_code == 201
        assert response.json()["title"] == "Unknown"

    async def test_duplicate_returns_conflict(self, client: AsyncClient, user_headers):
        first = await client.post("/api/deletion-requests", json=MOVIE, headers=user_headers["alice"])
        response = await client.post("/api/deletion-requests", json=MOVIE, headers=user_headers["bob"])

        assert response.status_code == 409
        assert response.json()["detail"]["existing_request_id"] == first.json()["_id"]

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.post("/api/deletion-requests", json=MOVIE)
        assert response.status_code == 401

    async def test_unknown_request(self, client: AsyncClient, user_headers):
        response = await client.get(
            "/api/deletion-requests/000000000000000000000000", headers=user_headers["alice"]
        )
        assert response.status_code == 404

    async def test_vote_flow(self, client: AsyncClient, user_headers):
        created = (await client.post(
            "/api/deletion-requests", json=MOVIE, headers=user_headers["alice"]
        )).json()
        base = f"/api/deletion-requests/{created['_id']}"

        response = await client.get(f"{base}/vote", headers=user_headers["bob"])
        assert response.status_code == 200
        assert response.json() is None

        response = await client.post(f"{base}/vote", json={"vote": True}, headers=user_headers["bob"])
        assert response.status_code == 200
        assert response.json()["vote"] is True
        await client.post(f"{base}/vote", json={"vote": False}, headers=user_headers["charlie"])

        request = (await client.get(base, headers=user_headers["bob"])).json()
        assert request["votes_for"] == 1
        assert request["votes_against"] == 1
        assert request["vote_percentage"] == 50.0

        votes = (await client.get(f"{base}/votes", headers=user_headers["bob"])).json()
        assert {v["user_id"] for v in votes} == {"bob", "charlie"}

        response = await client.delete(f"{base}/vote", headers=user_headers["bob"])
        assert response.status_code == 204
        response = await client.delete(f"{base}/vote", headers=user_headers["bob"])
        assert response.status_code == 404

    async def test_cancel_permissions(self, client: AsyncClient, user_headers):
        created = (await client.post(
            "/api/deletion-requests", json=MOVIE, headers=user_headers["alice"]
        )).json()
        base = f"/api/deletion-requests/{created['_id']}"

        response = await client.post(f"{base}/cancel", headers=user_headers["bob"])
        assert response.status_code == 403

        response = await client.post(f"{base}/cancel", headers=user_headers["alice"])
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        response = await client.post(f"{base}/vote", json={"vote": True}, headers=user_headers["bob"])
        assert response.status_code == 400

        response = await client.post(f"{base}/cancel", headers=user_headers["alice"])
        assert response.status_code == 400

    async def test_execute_requires_admin_and_approval(self, client: AsyncClient, user_headers):
        created = (await client.post(
            "/api/deletion-requests", json=MOVIE, headers=user_headers["alice"]
        )).json()
        base = f"/api/deletion-requests/{created['_id']}"

        response = await client.post(f"{base}/execute", headers=user_headers["alice"])
        assert response.status_code == 403

        response = await client.post(f"{base}/execute", headers=user_headers["admin"])
        assert response.status_code == 400

    async def test_list_filters_by_status(self, client: AsyncClient, user_headers):
        first = (await client.post(
            "/api/deletion-requests", json=MOVIE, headers=user_headers["alice"]
        )).json()
        await client.post(
            "/api/deletion-requests", json={**MOVIE, "media_id": 202}, headers=user_headers["alice"]
        )
        await client.post(f"/api/deletion-requests/{first['_id']}/cancel", headers=user_headers["alice"])

        response = await client.get(
            "/api/deletion-requests", params={"status": "voting"}, headers=user_headers["bob"]
        )

        page = response.json()
        assert page["page_info"]["results"] == 1
        assert page["results"][0]["media_id"] == 202

    async def test_recount(self, client: AsyncClient, db: AsyncIOMotorDatabase, user_headers):
        created = (await client.post(
            "/api/deletion-requests", json=MOVIE, headers=user_headers["alice"]
        )).json()
        base = f"/api/deletion-requests/{created['_id']}"
        await client.post(f"{base}/vote", json={"vote": True}, headers=user_headers["bob"])
        await db.deletion_requests.update_many({}, {"$set": {"votes_for": 9}})

        response = await client.post(f"{base}/recount", headers=user_headers["bob"])
        assert response.status_code == 403

        response = await client.post(f"{base}/recount", headers=user_headers["admin"])
        assert response.status_code == 200
        assert response.json()["votes_for"] == 1


class TestBadgeAndReviewAPI:
    """Tests for badge and review endpoints."""

    async def test_first_review_awards_milestone(self, client: AsyncClient, user_headers):
        response = await client.post(
            "/api/reviews",
            json={"media_id": 101, "media_type": "movie", "rating": 9, "content": "Still holds up"},
            headers=user_headers["alice"],
        )
        assert response.status_code == 201

        response = await client.post(
            "/api/reviews",
            json={"media_id": 101, "media_type": "movie"},
            headers=user_headers["alice"],
        )
        assert response.status_code == 400

        badges = (await client.get("/api/badges/me", headers=user_headers["alice"])).json()
        assert [b["badge_type"] for b in badges] == ["REVIEWS_WRITTEN_1"]
        assert badges[0]["display_name"] == "First Review"

    async def test_catalogue(self, client: AsyncClient):
        response = await client.get("/api/badges/definitions")
        types = {d["type"] for d in response.json()}
        assert "TOP_REVIEWER_MONTH" in types
        assert "REVIEWS_WRITTEN_100" in types

    async def test_admin_award(self, client: AsyncClient, user_headers):
        award = {"user_id": "bob", "badge_type": "COMMUNITY_HERO"}

        response = await client.post("/api/badges/award", json=award, headers=user_headers["alice"])
        assert response.status_code == 403

        response = await client.post("/api/badges/award", json=award, headers=user_headers["admin"])
        assert response.status_code == 201

        response = await client.post("/api/badges/award", json=award, headers=user_headers["admin"])
        assert response.status_code == 409

        badges = (await client.get("/api/badges/users/bob")).json()
        assert badges[0]["badge_type"] == "COMMUNITY_HERO"


class TestUserAPI:
    """Tests for the user deletion cascade."""

    async def test_delete_user_cascades(self, client: AsyncClient, db: AsyncIOMotorDatabase, user_headers):
        own = (await client.post(
            "/api/deletion-requests", json=MOVIE, headers=user_headers["bob"]
        )).json()
        other = (await client.post(
            "/api/deletion-requests", json={**MOVIE, "media_id": 202}, headers=user_headers["alice"]
        )).json()
        await client.post(
            f"/api/deletion-requests/{own['_id']}/vote", json={"vote": True}, headers=user_headers["alice"]
        )
        await client.post(
            f"/api/deletion-requests/{other['_id']}/vote", json={"vote": True}, headers=user_headers["bob"]
        )
        await client.post(
            "/api/reviews", json={"media_id": 101, "media_type": "movie"}, headers=user_headers["bob"]
        )

        response = await client.delete("/api/users/bob", headers=user_headers["admin"])

        assert response.status_code == 200
        assert response.json() == {"requests": 1, "votes": 1, "badges": 1, "reviews": 1}
        assert await db.deletion_votes.count_documents({}) == 0
        remaining = (await client.get(
            f"/api/deletion-requests/{other['_id']}", headers=user_headers["alice"]
        )).json()
        assert remaining["votes_for"] == 0
        assert await db.users.find_one({"user_id": "bob"}) is None

    async def test_delete_user_requires_admin(self, client: AsyncClient, user_headers):
        response = await client.delete("/api/users/bob", headers=user_headers["alice"])
        assert response.status_code == 403


class TestJobsAPI:
    """Tests for the admin job endpoints."""

    async def test_list_and_run_jobs(self, client: AsyncClient, db: AsyncIOMotorDatabase, user_headers):
        app.state.scheduler = build_scheduler(db, get_settings())
        try:
            response = await client.get("/api/admin/jobs", headers=user_headers["admin"])
            assert response.status_code == 200
            assert [j["id"] for j in response.json()] == [
                "deletion-vote-processor",
                "top-reviewer-month",
                "top-reviewer-year",
            ]

            response = await client.post(
                "/api/admin/jobs/deletion-vote-processor/run", headers=user_headers["admin"]
            )
            assert response.status_code == 200
            assert response.json()["result"]["total"] == 0

            response = await client.post(
                "/api/admin/jobs/unknown/cancel", headers=user_headers["admin"]
            )
            assert response.status_code == 404

            response = await client.get("/api/admin/jobs", headers=user_headers["alice"])
            assert response.status_code == 403
        finally:
            del app.state.scheduler
