"""Link group API tests (owner side)."""

import pytest

from helpers import register_and_login, session_cookie


async def _create_group(client, slug="reading", **fields):
    body = {"name": fields.pop("name", slug.title()), "slug": slug, **fields}
    r = await client.post("/api/groups", json=body)
    assert r.status_code == 200, r.text
    return r.json()["data"]


async def _create_cache(client, content="cached", **fields):
    r = await client.post("/api/caches", json={"content": content, **fields})
    assert r.status_code == 200, r.text
    return r.json()["data"]


# ═══════════════════════════════════════════════════════════
# CRUD
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_group(auth_client):
    group = await _create_group(
        auth_client, "reading", description="Things to read", access_key="s3cret"
    )
    assert group["slug"] == "reading"
    assert group["description"] == "Things to read"
    assert group["access_key"] == "s3cret"
    assert group["is_public"] is False
    assert "created_at" in group


@pytest.mark.asyncio
async def test_create_group_duplicate_slug(auth_client):
    await _create_group(auth_client, "reading")
    r = await auth_client.post("/api/groups", json={"name": "Again", "slug": "reading"})
    assert r.status_code == 400
    assert r.json()["msg"] == "Value already taken"


@pytest.mark.asyncio
async def test_create_group_invalid_slug(auth_client):
    r = await auth_client.post("/api/groups", json={"name": "Bad", "slug": "Not A Slug"})
    assert r.status_code == 400
    assert r.json()["code"] == 400


@pytest.mark.asyncio
async def test_list_groups_only_own(auth_client, client):
    await _create_group(auth_client, "mine")
    bob = await register_and_login(client, "bob", "bob-password")
    await client.post(
        "/api/groups", json={"name": "Bob's", "slug": "bobs"}, headers=session_cookie(bob)
    )

    r = await auth_client.get("/api/groups")
    assert r.status_code == 200
    assert [g["slug"] for g in r.json()["data"]] == ["mine"]


@pytest.mark.asyncio
async def test_update_group(auth_client):
    group = await _create_group(auth_client, "reading")
    r = await auth_client.put(
        f"/api/groups/{group['id']}",
        json={"name": "Renamed", "slug": "renamed", "is_public": True},
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert (data["name"], data["slug"], data["is_public"]) == ("Renamed", "renamed", True)
    assert data["access_key"] is None


@pytest.mark.asyncio
async def test_update_group_to_taken_slug(auth_client):
    await _create_group(auth_client, "a")
    b = await _create_group(auth_client, "b")

    r = await auth_client.put(f"/api/groups/{b['id']}", json={"name": "B", "slug": "a"})
    assert r.status_code == 400
    assert r.json()["msg"] == "Value already taken"

    r = await auth_client.get(f"/api/groups/{b['id']}")
    assert r.json()["data"]["slug"] == "b"


@pytest.mark.asyncio
async def test_delete_group(auth_client):
    group = await _create_group(auth_client, "reading")
    r = await auth_client.delete(f"/api/groups/{group['id']}")
    assert r.status_code == 200
    assert r.json()["data"] == {"deleted": True}

    r = await auth_client.get(f"/api/groups/{group['id']}")
    assert r.status_code == 404
    assert r.json()["code"] == 404


# ═══════════════════════════════════════════════════════════
# Ownership
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_other_users_group_is_forbidden(auth_client, client):
    group = await _create_group(auth_client, "reading")
    bob = session_cookie(await register_and_login(client, "bob", "bob-password"))

    for method, path in [
        ("get", f"/api/groups/{group['id']}"),
        ("delete", f"/api/groups/{group['id']}"),
        ("get", f"/api/groups/{group['id']}/details"),
        ("get", f"/api/groups/{group['id']}/links"),
    ]:
        r = await getattr(client, method)(path, headers=bob)
        assert r.status_code == 403, path
        assert r.json()["msg"] == "Not your link group"

    r = await client.post(
        f"/api/groups/{group['id']}/links",
        json={"target_url": "https://evil.example"},
        headers=bob,
    )
    assert r.status_code == 403

    r = await auth_client.get(f"/api/groups/{group['id']}")
    assert r.status_code == 200


# ═══════════════════════════════════════════════════════════
# Links, caches and details
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_and_list_links(auth_client):
    group = await _create_group(auth_client, "reading")
    r = await auth_client.post(
        f"/api/groups/{group['id']}/links",
        json={"target_url": "https://example.com", "name": "Example"},
    )
    assert r.status_code == 200
    link = r.json()["data"]
    assert link["link_type"] == "url"
    assert link["group_id"] == group["id"]

    r = await auth_client.get(f"/api/groups/{group['id']}/links")
    assert [item["id"] for item in r.json()["data"]] == [link["id"]]


@pytest.mark.asyncio
async def test_details_without_cache(auth_client):
    group = await _create_group(auth_client, "reading")
    await auth_client.post(
        f"/api/groups/{group['id']}/links", json={"target_url": "https://example.com"}
    )

    r = await auth_client.get(f"/api/groups/{group['id']}/details")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["group"]["id"] == group["id"]
    assert data["cache"] is None
    assert len(data["links"]) == 1
    assert data["links"][0]["cache"] is None


@pytest.mark.asyncio
async def test_group_cache_replace(auth_client):
    group = await _create_group(auth_client, "reading")
    a = await _create_cache(auth_client, "A")
    b = await _create_cache(auth_client, "B")

    r = await auth_client.put(f"/api/groups/{group['id']}/cache", json={"cache_id": a["id"]})
    assert r.status_code == 200
    r = await auth_client.put(f"/api/groups/{group['id']}/cache", json={"cache_id": b["id"]})
    assert r.status_code == 200

    r = await auth_client.get(f"/api/groups/{group['id']}/details")
    assert r.json()["data"]["cache"]["id"] == b["id"]

    r = await auth_client.delete(f"/api/groups/{group['id']}/cache")
    assert r.json()["data"] == {"cleared": True}
    r = await auth_client.get(f"/api/groups/{group['id']}/details")
    assert r.json()["data"]["cache"] is None


@pytest.mark.asyncio
async def test_group_cache_missing_entry(auth_client):
    group = await _create_group(auth_client, "reading")
    r = await auth_client.put(f"/api/groups/{group['id']}/cache", json={"cache_id": 999})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_details_can_skip_link_caches(auth_client):
    group = await _create_group(auth_client, "reading")
    r = await auth_client.post(
        f"/api/groups/{group['id']}/links", json={"target_url": "https://example.com"}
    )
    link = r.json()["data"]
    cache = await _create_cache(auth_client, "page")
    await auth_client.put(f"/api/links/{link['id']}/cache", json={"cache_id": cache["id"]})

    r = await auth_client.get(f"/api/groups/{group['id']}/details")
    assert r.json()["data"]["links"][0]["cache"]["content"] == "page"

    r = await auth_client.get(
        f"/api/groups/{group['id']}/details", params={"include_link_cache": "false"}
    )
    assert r.json()["data"]["links"][0]["cache"] is None
