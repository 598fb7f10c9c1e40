from conftest import auth_headers_for


async def test_category_crud(client, editor, reader):
    resp = await client.post(
        "/api/categories",
        json={"name": "Databases", "description": "DB runbooks", "order": 3},
        headers=auth_headers_for(editor),
    )
    assert resp.status_code == 201
    category = resp.json()
    assert category["articleCount"] == 0

    resp = await client.get("/api/categories", headers=auth_headers_for(reader))
    assert [c["name"] for c in resp.json()] == ["Databases"]

    resp = await client.put(
        f"/api/categories/{category['id']}",
        json={"description": "Database runbooks"},
        headers=auth_headers_for(editor),
    )
    assert resp.json()["description"] == "Database runbooks"

    resp = await client.delete(f"/api/categories/{category['id']}", headers=auth_headers_for(editor))
    assert resp.status_code == 204

    resp = await client.get(f"/api/categories/{category['id']}", headers=auth_headers_for(reader))
    assert resp.status_code == 404


async def test_category_writes_are_editor_only(client, author):
    resp = await client.post("/api/categories", json={"name": "Nope"}, headers=auth_headers_for(author))
    assert resp.status_code == 403


async def test_duplicate_category_is_409(client, editor):
    headers = auth_headers_for(editor)
    await client.post("/api/categories", json={"name": "Databases"}, headers=headers)
    resp = await client.post("/api/categories", json={"name": "DATABASES"}, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "CONFLICT"


async def test_reconcile_route(client, editor):
    resp = await client.post("/api/categories/reconcile", headers=auth_headers_for(editor))
    assert resp.status_code == 200
    assert resp.json() == []
