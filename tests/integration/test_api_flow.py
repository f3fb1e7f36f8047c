"""
Integration tests through the HTTP API with a real (in-memory) database.
"""

import pytest
import pytest_asyncio

from socialnet.models.user import Role


async def register(client, username: str) -> dict:
    response = await client.post(
        "/api/auth/register",
        json={
            "firstName": username.capitalize(),
            "lastName": "Example",
            "username": username,
            "email": f"{username}@example.com",
            "password": "secret123",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


async def login(client, username: str) -> dict:
    response = await client.post(
        "/api/auth/login",
        json={"email": f"{username}@example.com", "password": "secret123"},
    )
    assert response.status_code == 200, response.text
    body = response.json()
    return {"id": body["user"]["id"], "headers": {"Authorization": f"Bearer {body['accessToken']}"}}


async def create_post(client, headers: dict, topic: str = "sports", **form) -> dict:
    response = await client.post(
        "/api/posts",
        data={"title": f"About {topic}", "topic": topic, "description": "Match report", **form},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.integration
class TestSocialFlow:
    """A registers and posts, B follows and likes, A is notified."""

    @pytest.mark.asyncio
    async def test_follow_feed_like_notification(self, client):
        await register(client, "amy")
        amy = await login(client, "amy")
        post = await create_post(client, amy["headers"], topic="sports")

        await register(client, "bob")
        bob = await login(client, "bob")

        response = await client.post(f"/api/users/{amy['id']}/follow", headers=bob["headers"])
        assert response.status_code == 200

        response = await client.get("/api/posts", params={"following": "true"}, headers=bob["headers"])
        assert response.status_code == 200
        feed = response.json()
        assert [p["id"] for p in feed["data"]] == [post["id"]]
        assert feed["resultsCount"] == 1

        response = await client.post(f"/api/posts/{post['id']}/like", headers=bob["headers"])
        assert response.status_code == 200
        assert response.json()["data"]["likes"] == [bob["id"]]

        response = await client.get("/api/notifications", headers=amy["headers"])
        assert response.status_code == 200
        inbox = response.json()["data"]
        about_post = [
            n for n in inbox if n["sender"]["id"] == bob["id"] and n["postId"] == post["id"]
        ]
        assert len(about_post) == 1
        assert about_post[0]["hasRead"] is False

        response = await client.get(
            "/api/notifications", params={"unread": "true"}, headers=bob["headers"]
        )
        assert response.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_register_token_and_renewal(self, client):
        registered = await register(client, "amy")

        headers = {"Authorization": f"Bearer {registered['accessToken']}"}
        response = await client.get("/api/auth/renew", headers=headers)

        assert response.status_code == 200
        assert response.json()["user"]["id"] == registered["user"]["id"]
        assert "hashedPassword" not in response.json()["user"]

    @pytest.mark.asyncio
    async def test_post_with_image_and_comments(self, client, image_store):
        await register(client, "amy")
        amy = await login(client, "amy")
        await register(client, "bob")
        bob = await login(client, "bob")

        response = await client.post(
            "/api/posts",
            data={"title": "Look", "topic": "photos", "description": "Sunset"},
            files={"image": ("sunset.png", b"png-bytes", "image/png")},
            headers=amy["headers"],
        )
        assert response.status_code == 201, response.text
        post = response.json()["data"]
        assert post["image"] == "https://cdn.test/posts/new.png"
        image_store.upload.assert_awaited_once()

        response = await client.post(
            "/api/comments",
            json={"postId": post["id"], "content": "Beautiful"},
            headers=bob["headers"],
        )
        assert response.status_code == 201, response.text

        response = await client.get(f"/api/posts/{post['id']}/comments", headers=amy["headers"])
        assert [c["content"] for c in response.json()] == ["Beautiful"]

    @pytest.mark.asyncio
    async def test_conversation_and_messages(self, client, realtime):
        await register(client, "amy")
        amy = await login(client, "amy")
        await register(client, "bob")
        bob = await login(client, "bob")

        response = await client.post(
            "/api/conversations",
            json={"participants": [bob["id"]], "message": "Hi Bob"},
            headers=amy["headers"],
        )
        assert response.status_code == 201, response.text
        conversation_id = response.json()["data"]["id"]

        response = await client.post(
            f"/api/conversations/{conversation_id}/messages",
            json={"content": "Hi Amy"},
            headers=bob["headers"],
        )
        assert response.status_code == 201
        realtime.publish_many.assert_awaited_once()

        response = await client.get(
            f"/api/conversations/{conversation_id}/messages", headers=amy["headers"]
        )
        history = response.json()
        assert [m["content"] for m in history["data"]] == ["Hi Amy", "Hi Bob"]
        assert history["total"] == 2

        response = await client.get("/api/conversations", headers=bob["headers"])
        inbox = response.json()["data"]
        assert inbox[0]["lastMessage"]["content"] == "Hi Amy"
        assert [p["id"] for p in inbox[0]["participants"]] == [amy["id"]]


@pytest.mark.integration
class TestPermissionsAndErrors:
    """Authentication, role and ownership gates and the error shape."""

    @pytest_asyncio.fixture
    async def admin_headers(self, make_user, auth_headers):
        admin = await make_user("root", role=Role.ADMIN)
        return auth_headers(admin.id)

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, client):
        response = await client.get("/api/posts")

        assert response.status_code == 401
        assert response.json() == {"message": "No token provided"}

    @pytest.mark.asyncio
    async def test_invalid_token_is_401(self, client):
        response = await client.get(
            "/api/posts", headers={"Authorization": "Bearer not-a-real-token"}
        )

        assert response.status_code == 401
        assert "message" in response.json()

    @pytest.mark.asyncio
    async def test_request_validation_is_400(self, client):
        response = await client.post("/api/auth/register", json={"username": "x"})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid request"
        assert {error["field"] for error in body["errors"]} >= {"email", "password"}

    @pytest.mark.asyncio
    async def test_duplicate_registration_is_409(self, client):
        await register(client, "amy")

        response = await client.post(
            "/api/auth/register",
            json={
                "firstName": "Other",
                "lastName": "Amy",
                "username": "amy",
                "email": "different@example.com",
                "password": "secret123",
            },
        )

        assert response.status_code == 409
        assert "message" in response.json()

    @pytest.mark.asyncio
    async def test_wrong_password_gets_no_token(self, client):
        await register(client, "amy")

        response = await client.post(
            "/api/auth/login", json={"email": "amy@example.com", "password": "nope-nope"}
        )

        assert response.status_code == 400
        assert "accessToken" not in response.json()

    @pytest.mark.asyncio
    async def test_two_feed_modes_are_rejected(self, client):
        await register(client, "amy")
        amy = await login(client, "amy")

        response = await client.get(
            "/api/posts",
            params={"following": "true", "suggested": "true"},
            headers=amy["headers"],
        )

        assert response.status_code == 422
        assert "message" in response.json()

    @pytest.mark.asyncio
    async def test_missing_post_is_404_before_ownership(self, client, admin_headers):
        await register(client, "amy")
        amy = await login(client, "amy")
        await register(client, "bob")
        bob = await login(client, "bob")
        post = await create_post(client, amy["headers"])

        missing = await client.delete("/api/posts/999", headers=bob["headers"])
        forbidden = await client.delete(f"/api/posts/{post['id']}", headers=bob["headers"])
        by_admin = await client.delete(f"/api/posts/{post['id']}", headers=admin_headers)
        gone = await client.delete(f"/api/posts/{post['id']}", headers=admin_headers)

        assert missing.status_code == 404
        assert forbidden.status_code == 403
        assert by_admin.status_code == 200
        assert gone.status_code == 404

    @pytest.mark.asyncio
    async def test_user_updates_are_self_or_admin(self, client, admin_headers):
        await register(client, "amy")
        amy = await login(client, "amy")
        await register(client, "bob")
        bob = await login(client, "bob")

        forbidden = await client.put(
            f"/api/users/{amy['id']}", json={"firstName": "Hacked"}, headers=bob["headers"]
        )
        missing = await client.put(
            "/api/users/999", json={"firstName": "Ghost"}, headers=bob["headers"]
        )
        own = await client.put(
            f"/api/users/{bob['id']}", json={"firstName": "Robert"}, headers=bob["headers"]
        )
        by_admin = await client.put(
            f"/api/users/{amy['id']}", json={"firstName": "Amelia"}, headers=admin_headers
        )

        assert forbidden.status_code == 403
        assert missing.status_code == 404
        assert own.json()["data"]["firstName"] == "Robert"
        assert by_admin.json()["data"]["firstName"] == "Amelia"

    @pytest.mark.asyncio
    async def test_only_admins_delete_users(self, client, admin_headers):
        await register(client, "amy")
        amy = await login(client, "amy")
        await register(client, "bob")
        bob = await login(client, "bob")

        forbidden = await client.delete(f"/api/users/{amy['id']}", headers=bob["headers"])
        deleted = await client.delete(f"/api/users/{amy['id']}", headers=admin_headers)
        after = await client.get(f"/api/users/{amy['id']}", headers=bob["headers"])

        assert forbidden.status_code == 403
        assert deleted.status_code == 200
        assert after.status_code == 404

    @pytest.mark.asyncio
    async def test_conversation_access_is_for_participants(self, client, admin_headers):
        await register(client, "amy")
        amy = await login(client, "amy")
        await register(client, "bob")
        bob = await login(client, "bob")
        await register(client, "eve")
        eve = await login(client, "eve")

        response = await client.post(
            "/api/conversations",
            json={"participants": [bob["id"]], "message": "Private"},
            headers=amy["headers"],
        )
        conversation_id = response.json()["data"]["id"]

        outsider = await client.get(f"/api/conversations/{conversation_id}", headers=eve["headers"])
        missing = await client.get("/api/conversations/999", headers=eve["headers"])
        by_admin = await client.get(f"/api/conversations/{conversation_id}", headers=admin_headers)
        admin_delete_by_user = await client.delete(
            f"/api/conversations/{conversation_id}", headers=amy["headers"]
        )

        assert outsider.status_code == 403
        assert missing.status_code == 404
        assert by_admin.status_code == 200
        assert admin_delete_by_user.status_code == 403

    @pytest.mark.asyncio
    async def test_only_the_sender_edits_a_message(self, client):
        await register(client, "amy")
        amy = await login(client, "amy")
        await register(client, "bob")
        bob = await login(client, "bob")

        response = await client.post(
            "/api/conversations",
            json={"participants": [bob["id"]], "message": "Original"},
            headers=amy["headers"],
        )
        conversation_id = response.json()["data"]["id"]
        message_id = response.json()["data"]["lastMessage"]["id"]
        url = f"/api/conversations/{conversation_id}/messages/{message_id}"

        by_other = await client.put(url, json={"content": "Forged"}, headers=bob["headers"])
        wrong_conversation = await client.put(
            f"/api/conversations/999/messages/{message_id}",
            json={"content": "Moved"},
            headers=amy["headers"],
        )
        by_sender = await client.put(url, json={"content": "Edited"}, headers=amy["headers"])

        assert by_other.status_code == 403
        assert wrong_conversation.status_code == 404
        assert by_sender.json()["data"]["content"] == "Edited"

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
