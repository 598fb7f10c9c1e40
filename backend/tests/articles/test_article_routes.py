from conftest import ARTICLE_FIELDS, auth_headers_for


async def _create(client, principal, **overrides) -> dict:
    resp = await client.post(
        "/api/articles", json={**ARTICLE_FIELDS, **overrides}, headers=auth_headers_for(principal)
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_article(client, author):
    data = await _create(client, author, relatedArticles=[], contentFormat="markdown")
    assert data["title"] == ARTICLE_FIELDS["title"]
    assert data["status"] == "draft"
    assert data["version"] == 1
    assert data["authorId"] == author.id
    assert data["contentFormat"] == "markdown"
    assert data["isLocked"] is False
    assert data["viewCount"] == 0


async def test_create_accepts_snake_case(client, author):
    data = await _create(client, author, related_articles=["abc"], content_format="markdown")
    assert data["relatedArticles"] == ["abc"]


async def test_create_validation_error_lists_every_field(client, author):
    resp = await client.post(
        "/api/articles", json={"title": "x"}, headers=auth_headers_for(author)
    )
    assert resp.status_code == 422
    error = resp.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert set(error["validationErrors"]) == {"title", "body", "category"}


async def test_actor_cannot_create(client, actor):
    resp = await client.post("/api/articles", json=ARTICLE_FIELDS, headers=auth_headers_for(actor))
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "FORBIDDEN"


async def test_get_article_hides_others_drafts(client, author, other_author):
    created = await _create(client, author)
    resp = await client.get(f"/api/articles/{created['id']}", headers=auth_headers_for(other_author))
    assert resp.status_code == 404


async def test_get_article_bad_id_is_400(client, reader):
    resp = await client.get("/api/articles/not-a-uuid", headers=auth_headers_for(reader))
    assert resp.status_code == 400
    assert "validationErrors" in resp.json()["error"]


async def test_update_with_change_reason(client, author):
    created = await _create(client, author)
    resp = await client.put(
        f"/api/articles/{created['id']}",
        json={"title": "Updated VPN token guide"},
        headers={**auth_headers_for(author), "X-Change-Reason": "Typo fix"},
    )
    assert resp.status_code == 200
    assert resp.json()["version"] == 2

    resp = await client.get(f"/api/articles/{created['id']}/versions", headers=auth_headers_for(author))
    versions = resp.json()["versions"]
    assert versions[0]["changeReason"] == "Typo fix"
    assert versions[1]["changeReason"] == "Initial creation"


async def test_update_with_null_expiration_clears_it(client, author):
    created = await _create(client, author, expirationDate="2030-01-01T00:00:00Z")
    assert created["expirationDate"] is not None

    resp = await client.put(
        f"/api/articles/{created['id']}",
        json={"expirationDate": None},
        headers=auth_headers_for(author),
    )
    assert resp.status_code == 200
    assert resp.json()["expirationDate"] is None

    resp = await client.put(f"/api/articles/{created['id']}", json={}, headers=auth_headers_for(author))
    assert resp.status_code == 400


async def test_update_blocked_by_lock_is_423(client, author, editor):
    created = await _create(client, author)
    resp = await client.post(f"/api/articles/{created['id']}/lock", headers=auth_headers_for(editor))
    assert resp.status_code == 200

    resp = await client.put(
        f"/api/articles/{created['id']}",
        json={"title": "Locked out title"},
        headers=auth_headers_for(author),
    )
    assert resp.status_code == 423
    error = resp.json()["error"]
    assert error["code"] == "RESOURCE_LOCKED"
    assert error["details"]["lockedByName"] == "Eve Editor"


async def test_lifecycle_endpoints(client, author, editor):
    created = await _create(client, author)
    article_id = created["id"]

    resp = await client.post(f"/api/articles/{article_id}/publish", headers=auth_headers_for(author))
    assert resp.json()["status"] == "published"

    resp = await client.post(f"/api/articles/{article_id}/archive", headers=auth_headers_for(author))
    assert resp.status_code == 403

    resp = await client.post(f"/api/articles/{article_id}/archive", headers=auth_headers_for(editor))
    assert resp.json()["status"] == "archived"

    resp = await client.post(f"/api/articles/{article_id}/publish", headers=auth_headers_for(editor))
    assert resp.status_code == 400

    resp = await client.delete(f"/api/articles/{article_id}", headers=auth_headers_for(author))
    assert resp.json()["status"] == "deleted"

    resp = await client.post(f"/api/articles/{article_id}/restore", headers=auth_headers_for(author))
    assert resp.json()["status"] == "draft"
    assert resp.json()["version"] == 5


async def test_permanent_delete(client, author, editor):
    created = await _create(client, author)
    article_id = created["id"]
    await client.delete(f"/api/articles/{article_id}", headers=auth_headers_for(author))

    resp = await client.delete(f"/api/articles/{article_id}/permanent", headers=auth_headers_for(author))
    assert resp.status_code == 403

    resp = await client.delete(f"/api/articles/{article_id}/permanent", headers=auth_headers_for(editor))
    assert resp.status_code == 204

    resp = await client.get(f"/api/articles/{article_id}", headers=auth_headers_for(editor))
    assert resp.status_code == 404


async def test_search_endpoint(client, author, reader):
    first = await _create(client, author, title="Outlook keeps asking for password", tags=["outlook"])
    await _create(client, author, title="Teams audio is choppy", tags=["teams"])
    await client.post(f"/api/articles/{first['id']}/publish", headers=auth_headers_for(author))

    resp = await client.get("/api/articles", params={"query": "outlook"}, headers=auth_headers_for(reader))
    assert resp.status_code == 200
    body = resp.json()
    assert [a["title"] for a in body["data"]] == ["Outlook keeps asking for password"]
    assert body["pagination"] == {
        "page": 1,
        "limit": 20,
        "totalItems": 1,
        "totalPages": 1,
        "hasNextPage": False,
        "hasPreviousPage": False,
    }

    resp = await client.get(
        "/api/articles",
        params={"sortBy": "briefTitle", "sortOrder": "asc", "status": "draft,published"},
        headers=auth_headers_for(author),
    )
    assert [a["title"] for a in resp.json()["data"]] == [
        "Outlook keeps asking for password",
        "Teams audio is choppy",
    ]


async def test_search_limit_bounds(client, reader):
    resp = await client.get("/api/articles", params={"limit": 101}, headers=auth_headers_for(reader))
    assert resp.status_code == 400


async def test_tags_and_related(client, author, reader):
    first = await _create(client, author, tags=["vpn"])
    second = await _create(client, author, title="VPN client install", tags=["vpn"])
    for article in (first, second):
        await client.post(f"/api/articles/{article['id']}/publish", headers=auth_headers_for(author))

    resp = await client.get("/api/articles/tags", headers=auth_headers_for(reader))
    assert resp.json() == [{"name": "vpn", "count": 2}]

    resp = await client.get(f"/api/articles/{first['id']}/related", headers=auth_headers_for(reader))
    assert [a["id"] for a in resp.json()] == [second["id"]]


async def test_requires_authentication(client):
    resp = await client.get("/api/articles")
    assert resp.status_code == 401
