"""
Daygrid Backend - Profile API Tests
=====================================

What:  Own profile edits, avatar upload, public profile views, profile post
       sections and account deletion.
"""

import uuid

import pytest


async def _publish(client, headers, image_bytes, public: bool, complete: bool):
    """Give the user one task, optionally fill it, then publish."""
    await client.put("/api/tasks", json={"tasks": ["Only", "Other"]}, headers=headers)
    await client.delete("/api/grid", headers=headers)
    await client.put(
        "/api/grid/cells/0",
        files={"file": ("a.jpg", image_bytes, "image/jpeg")},
        headers=headers,
    )
    if complete:
        await client.put(
            "/api/grid/cells/1",
            files={"file": ("b.jpg", image_bytes, "image/jpeg")},
            headers=headers,
        )
    response = await client.post(
        "/api/grid/publish",
        files={"file": ("collage.jpg", image_bytes, "image/jpeg")},
        data={"public": "true" if public else "false"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_update_profile(test_client, signup):
    alice = await signup("alice@example.com")

    response = await test_client.patch(
        "/api/profile",
        json={"username": "  alice_w  ", "name": "Alice W", "avatar": "https://img.example.com/a.png"},
        headers=alice["headers"],
    )
    assert response.status_code == 200
    body = response.json()
    assert body["username"] == "alice_w"
    assert body["full_name"] == "Alice W"
    assert body["avatar_url"] == "https://img.example.com/a.png"

    own = await test_client.get("/api/profile", headers=alice["headers"])
    assert own.json()["username"] == "alice_w"


@pytest.mark.asyncio
async def test_update_profile_username_rules(test_client, signup):
    alice = await signup("alice@example.com")
    await signup("bob@example.com", username="bob")

    blank = await test_client.patch("/api/profile", json={"username": "   "}, headers=alice["headers"])
    assert blank.status_code == 400

    taken = await test_client.patch("/api/profile", json={"username": "BOB"}, headers=alice["headers"])
    assert taken.status_code == 409


@pytest.mark.asyncio
async def test_upload_avatar(test_client, signup, skip_mime_sniffing, sample_image_bytes):
    alice = await signup("alice@example.com")

    response = await test_client.post(
        "/api/profile/avatar",
        files={"file": ("me.jpg", sample_image_bytes, "image/jpeg")},
        headers=alice["headers"],
    )
    assert response.status_code == 200
    avatar = response.json()["avatar_url"]
    assert avatar.startswith("/media/")
    assert (await test_client.get(avatar)).status_code == 200


@pytest.mark.asyncio
async def test_public_profile_hides_private_fields(test_client, signup):
    alice = await signup("alice@example.com", username="alice")
    bob = await signup("bob@example.com")

    response = await test_client.get(f"/api/profiles/{alice['user_id']}", headers=bob["headers"])
    assert response.status_code == 200
    body = response.json()
    assert body["username"] == "alice"
    assert "email" not in body
    assert "tasks" not in body

    missing = await test_client.get(f"/api/profiles/{uuid.uuid4()}", headers=bob["headers"])
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_profile_sections(test_client, signup, skip_mime_sniffing, sample_image_bytes):
    alice = await signup("alice@example.com")
    bob = await signup("bob@example.com")
    headers = alice["headers"]

    private_done = await _publish(test_client, headers, sample_image_bytes, public=False, complete=True)
    public_partial = await _publish(test_client, headers, sample_image_bytes, public=True, complete=False)
    public_done = await _publish(test_client, headers, sample_image_bytes, public=True, complete=True)

    async def section(viewer, name):
        response = await test_client.get(
            f"/api/profiles/{alice['user_id']}/posts",
            params={"section": name},
            headers=viewer["headers"],
        )
        assert response.status_code == 200
        return [post["id"] for post in response.json()["posts"]]

    # Owner, newest first
    assert await section(alice, "all") == [public_done["id"], public_partial["id"], private_done["id"]]
    assert await section(alice, "public") == [public_done["id"], public_partial["id"]]
    assert await section(alice, "completed") == [public_done["id"], private_done["id"]]

    # Everyone else only sees public posts
    assert await section(bob, "all") == [public_done["id"], public_partial["id"]]
    assert await section(bob, "completed") == [public_done["id"]]


@pytest.mark.asyncio
async def test_delete_account(test_client, signup, skip_mime_sniffing, sample_image_bytes):
    alice = await signup("alice@example.com")
    bob = await signup("bob@example.com")
    post = await _publish(test_client, alice["headers"], sample_image_bytes, public=True, complete=True)
    await test_client.post(f"/api/posts/{post['id']}/likes", headers=bob["headers"])
    await test_client.post(
        f"/api/posts/{post['id']}/comments", json={"content": "nice"}, headers=bob["headers"]
    )

    response = await test_client.delete("/api/profile", headers=alice["headers"])
    assert response.status_code == 204

    assert (await test_client.get("/api/auth/me", headers=alice["headers"])).status_code == 401
    assert (await test_client.get(f"/api/posts/{post['id']}", headers=bob["headers"])).status_code == 404
    feed = await test_client.get("/api/posts/feed", headers=bob["headers"])
    assert feed.json()["posts"] == []
