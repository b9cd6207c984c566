"""Tests for /api/files endpoints."""

import base64

import pytest
from httpx import AsyncClient


async def _create(client, **body):
    resp = await client.post("/api/files", json=body)
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_create_and_list(client: AsyncClient):
    folder = await _create(client, name="docs", type="folder", path="/")
    item = await _create(
        client, name="a.txt", type="file", path="/docs/", size=5,
        mimeType="text/plain", content="hello",
    )

    assert folder["path"] == "/docs/"
    assert item["path"] == "/docs/a.txt"
    assert item["mime_type"] == "text/plain"
    assert "last_modified" in item

    resp = await client.get("/api/files", params={"path": "/docs/"})
    assert resp.status_code == 200
    assert [i["id"] for i in resp.json()] == [item["id"]]


@pytest.mark.asyncio
async def test_list_defaults_to_root(client: AsyncClient):
    await _create(client, name="x.txt", type="file", path="/")
    await _create(client, name="y", type="folder", path="/")
    await _create(client, name="z.txt", type="file", path="/y/")

    resp = await client.get("/api/files")
    assert [i["name"] for i in resp.json()] == ["y", "x.txt"]


@pytest.mark.asyncio
async def test_create_missing_fields_returns_400(client: AsyncClient):
    resp = await client.post("/api/files", json={"name": "a.txt", "type": "file"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "validation_error"
    assert "path" in body["detail"]


@pytest.mark.asyncio
async def test_create_duplicate_returns_409(client: AsyncClient):
    await _create(client, name="a.txt", type="file", path="/")
    resp = await client.post("/api/files", json={"name": "a.txt", "type": "file", "path": "/"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "conflict"


@pytest.mark.asyncio
async def test_create_folder_over_file_name_returns_409(client: AsyncClient):
    await _create(client, name="docs", type="file", path="/", content="x")
    resp = await client.post("/api/files", json={"name": "docs", "type": "folder", "path": "/"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "conflict"

    listed = await client.get("/api/files")
    assert [i["type"] for i in listed.json()] == ["file"]


@pytest.mark.asyncio
async def test_create_name_with_control_character_returns_400(client: AsyncClient):
    resp = await client.post("/api/files", json={"name": "a\u0000b", "type": "file", "path": "/"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_create_negative_size_returns_422(client: AsyncClient):
    resp = await client.post(
        "/api/files", json={"name": "a.txt", "type": "file", "path": "/", "size": -1},
    )
    assert resp.status_code == 422
    assert (await client.get("/api/files")).json() == []


@pytest.mark.asyncio
async def test_delete(client: AsyncClient):
    item = await _create(client, name="a.txt", type="file", path="/")

    resp = await client.delete("/api/files", params={"id": item["id"]})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "deleted": item}

    resp = await client.get("/api/files")
    assert resp.json() == []


@pytest.mark.asyncio
async def test_delete_missing_returns_404(client: AsyncClient):
    resp = await client.delete("/api/files", params={"id": "nope"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_delete_without_id_returns_400(client: AsyncClient):
    resp = await client.delete("/api/files")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_move(client: AsyncClient):
    item = await _create(client, name="a.txt", type="file", path="/")
    await _create(client, name="dest", type="folder", path="/")

    resp = await client.post("/api/files/move", json={"itemId": item["id"], "targetPath": "/dest/"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["moved"]["id"] == item["id"]
    assert data["moved"]["path"] == "/dest/a.txt"


@pytest.mark.asyncio
async def test_move_with_rename(client: AsyncClient):
    item = await _create(client, name="a.txt", type="file", path="/")
    resp = await client.post(
        "/api/files/move",
        json={"itemId": item["id"], "targetPath": "/", "newName": "b.txt"},
    )
    assert resp.json()["moved"]["path"] == "/b.txt"


@pytest.mark.asyncio
async def test_move_missing_fields_returns_400(client: AsyncClient):
    resp = await client.post("/api/files/move", json={"itemId": "x"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_move_missing_item_returns_404(client: AsyncClient):
    resp = await client.post("/api/files/move", json={"itemId": "nope", "targetPath": "/"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_get_item(client: AsyncClient):
    item = await _create(client, name="a.txt", type="file", path="/")
    resp = await client.get(f"/api/files/{item['id']}")
    assert resp.status_code == 200
    assert resp.json() == item


@pytest.mark.asyncio
async def test_download(client: AsyncClient):
    payload = b"\x00\x01binary"
    uri = "data:application/octet-stream;base64," + base64.b64encode(payload).decode()
    item = await _create(client, name="blob.bin", type="file", path="/", content=uri)

    resp = await client.get(f"/api/files/{item['id']}/download")
    assert resp.status_code == 200
    assert resp.content == payload
    assert resp.headers["content-type"] == "application/octet-stream"
    assert "blob.bin" in resp.headers["content-disposition"]


@pytest.mark.asyncio
async def test_download_folder_returns_400(client: AsyncClient):
    folder = await _create(client, name="docs", type="folder", path="/")
    resp = await client.get(f"/api/files/{folder['id']}/download")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_mutations_recorded_in_audit(client: AsyncClient):
    item = await _create(client, name="a.txt", type="file", path="/")
    await _create(client, name="docs", type="folder", path="/")
    await client.post("/api/files/move", json={"itemId": item["id"], "targetPath": "/docs/"})
    await client.delete("/api/files", params={"id": item["id"]})

    actions = [e["action"] for e in (await client.get("/api/audit")).json()]
    assert actions == ["DELETE", "MOVE", "CREATE_FOLDER", "UPLOAD"]
