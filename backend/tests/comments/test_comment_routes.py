from conftest import ARTICLE_FIELDS, auth_headers_for


async def _published(client, author) -> str:
    resp = await client.post("/api/articles", json=ARTICLE_FIELDS, headers=auth_headers_for(author))
    article_id = resp.json()["id"]
    await client.post(f"/api/articles/{article_id}/publish", headers=auth_headers_for(author))
    return article_id


async def test_comment_flow(client, author, actor, reader):
    article_id = await _published(client, author)

    resp = await client.post(
        f"/api/articles/{article_id}/comments",
        json={"content": "Worked for me"},
        headers=auth_headers_for(actor),
    )
    assert resp.status_code == 201
    comment = resp.json()
    assert comment["authorId"] == actor.id
    assert comment["isEdited"] is False

    resp = await client.put(
        f"/api/comments/{comment['id']}",
        json={"content": "Worked for me on Windows 11"},
        headers=auth_headers_for(actor),
    )
    assert resp.json()["isEdited"] is True

    resp = await client.get(f"/api/articles/{article_id}/comments", headers=auth_headers_for(reader))
    assert resp.json()["totalCount"] == 1
    assert resp.json()["comments"][0]["content"] == "Worked for me on Windows 11"

    resp = await client.delete(f"/api/comments/{comment['id']}", headers=auth_headers_for(actor))
    assert resp.status_code == 204


async def test_reader_cannot_comment(client, author, reader):
    article_id = await _published(client, author)
    resp = await client.post(
        f"/api/articles/{article_id}/comments",
        json={"content": "Hi"},
        headers=auth_headers_for(reader),
    )
    assert resp.status_code == 403


async def test_empty_comment_is_422(client, author, actor):
    article_id = await _published(client, author)
    resp = await client.post(
        f"/api/articles/{article_id}/comments", json={"content": " "}, headers=auth_headers_for(actor)
    )
    assert resp.status_code == 422
    assert "content" in resp.json()["error"]["validationErrors"]
