"""
Storefront Backend — Admin Blog Endpoint Tests
================================================

What we test:
    ✅ Admin gate: anonymous and CUSTOMER callers get 401, even with bad payloads
    ✅ Create → 201 with the caller as author; invalid payload → 400 with details
    ✅ List includes author name/email, newest first
    ✅ Partial update touches only supplied fields; null for a required field → 400
    ✅ Missing/unknown id → 400/404; duplicate slug → 400
    ✅ Delete by ?id=
"""

import pytest

POST = {
    "title": "Spring Collection",
    "slug": "spring-collection",
    "content": "New linen arrivals.",
    "excerpt": "Linen is back",
}


async def create_post(admin_client, **overrides) -> dict:
    response = await admin_client.post("/api/admin/blog", json={**POST, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["post"]


class TestAdminGate:
    @pytest.mark.asyncio
    async def test_anonymous_gets_401(self, client):
        response = await client.get("/api/admin/blog")

        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized"

    @pytest.mark.asyncio
    async def test_customer_gets_401_before_validation(self, customer_client):
        """An invalid payload from a non-admin still yields 401, not 400."""
        response = await customer_client.post("/api/admin/blog", json={"title": ""})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_customer_cannot_delete(self, customer_client):
        response = await customer_client.delete("/api/admin/blog")

        assert response.status_code == 401


class TestCreateAndList:
    @pytest.mark.asyncio
    async def test_create_sets_author(self, admin_client, admin_user):
        post = await create_post(admin_client)

        assert post["title"] == "Spring Collection"
        assert post["authorId"] == str(admin_user.id)
        assert post["published"] is False

    @pytest.mark.asyncio
    async def test_create_missing_fields(self, admin_client):
        response = await admin_client.post("/api/admin/blog", json={"title": "No slug"})

        assert response.status_code == 400
        missing = {err["loc"][0] for err in response.json()["details"]}
        assert {"slug", "content"} <= missing

    @pytest.mark.asyncio
    async def test_create_duplicate_slug(self, admin_client):
        await create_post(admin_client)

        response = await admin_client.post("/api/admin/blog", json=POST)

        assert response.status_code == 400
        assert "slug" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_list_includes_author(self, admin_client):
        await create_post(admin_client, slug="first")
        await create_post(admin_client, slug="second")

        response = await admin_client.get("/api/admin/blog")

        assert response.status_code == 200
        posts = response.json()["posts"]
        assert [p["slug"] for p in posts] == ["second", "first"]
        assert posts[0]["author"] == {"name": "Admin", "email": "admin@example.com"}


class TestUpdate:
    @pytest.mark.asyncio
    async def test_partial_update(self, admin_client):
        post = await create_post(admin_client)

        response = await admin_client.put("/api/admin/blog", json={"id": post["id"], "published": True})

        assert response.status_code == 200
        updated = response.json()["post"]
        assert updated["published"] is True
        assert updated["title"] == post["title"]
        assert updated["content"] == post["content"]

    @pytest.mark.asyncio
    async def test_update_requires_id(self, admin_client):
        response = await admin_client.put("/api/admin/blog", json={"title": "x"})

        assert response.status_code == 400
        assert response.json()["message"] == "Post ID required"

    @pytest.mark.asyncio
    async def test_update_rejects_null_title(self, admin_client):
        post = await create_post(admin_client)

        response = await admin_client.put("/api/admin/blog", json={"id": post["id"], "title": None})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, admin_client):
        response = await admin_client.put(
            "/api/admin/blog",
            json={"id": "00000000-0000-0000-0000-000000000001", "title": "x"},
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_to_taken_slug(self, admin_client):
        await create_post(admin_client, slug="taken")
        post = await create_post(admin_client, slug="mine")

        response = await admin_client.put("/api/admin/blog", json={"id": post["id"], "slug": "taken"})

        assert response.status_code == 400


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete(self, admin_client):
        post = await create_post(admin_client)

        response = await admin_client.delete("/api/admin/blog", params={"id": post["id"]})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        remaining = (await admin_client.get("/api/admin/blog")).json()["posts"]
        assert remaining == []

    @pytest.mark.asyncio
    async def test_delete_requires_id(self, admin_client):
        response = await admin_client.delete("/api/admin/blog")

        assert response.status_code == 400
        assert response.json()["message"] == "Post ID required"

    @pytest.mark.asyncio
    async def test_delete_invalid_id(self, admin_client):
        response = await admin_client.delete("/api/admin/blog", params={"id": "not-a-uuid"})

        assert response.status_code == 400
