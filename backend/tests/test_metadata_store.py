"""Tests for metadata stores — shared contract, JSON persistence, concurrency."""

import asyncio
import json

import pytest

from netdrive.errors import (
    ConflictError,
    NotFoundError,
    StorageReadError,
    ValidationError,
)
from netdrive.services.metadata_store import JsonMetadataStore

from tests.conftest import make_item


class TestContract:
    @pytest.mark.asyncio
    async def test_insert_assigns_id(self, metadata_store):
        item = await metadata_store.insert(make_item("/a.txt"))
        assert item.id
        assert await metadata_store.find_by_id(item.id) == item

    @pytest.mark.asyncio
    async def test_last_modified_is_timezone_aware(self, metadata_store):
        item = await metadata_store.insert(make_item("/a.txt"))
        found = await metadata_store.find_by_id(item.id)
        listed = await metadata_store.children("/")
        assert found.last_modified.tzinfo is not None
        assert listed[0].last_modified.utcoffset() == found.last_modified.utcoffset()
        assert found.last_modified == item.last_modified

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, metadata_store):
        a = await metadata_store.insert(make_item("/a.txt"))
        b = await metadata_store.insert(make_item("/b.txt"))
        assert a.id != b.id

    @pytest.mark.asyncio
    async def test_find_missing_returns_none(self, metadata_store):
        assert await metadata_store.find_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_list_sorts_folders_first_then_name(self, metadata_store):
        for path in ("/b.txt", "/z/", "/a.txt", "/m/"):
            await metadata_store.insert(make_item(path))
        names = [i.name for i in await metadata_store.list()]
        assert names == ["m", "z", "a.txt", "b.txt"]

    @pytest.mark.asyncio
    async def test_children_exact_one_level(self, metadata_store):
        for path in ("/a/", "/a/b/", "/a/b/c.txt"):
            await metadata_store.insert(make_item(path))
        children = await metadata_store.children("/a/")
        assert [c.path for c in children] == ["/a/b/"]

    @pytest.mark.asyncio
    async def test_duplicate_path_rejected(self, metadata_store):
        await metadata_store.insert(make_item("/a.txt"))
        with pytest.raises(ConflictError):
            await metadata_store.insert(make_item("/a.txt"))

    @pytest.mark.asyncio
    async def test_same_name_different_kind_allowed(self, metadata_store):
        await metadata_store.insert(make_item("/docs"))
        await metadata_store.insert(make_item("/docs/"))
        assert len(await metadata_store.children("/")) == 2

    @pytest.mark.asyncio
    async def test_update_fields_moves_between_parents(self, metadata_store):
        item = await metadata_store.insert(make_item("/a.txt"))
        await metadata_store.insert(make_item("/docs/"))

        updated = await metadata_store.update_fields(item.id, {"path": "/docs/a.txt"})

        assert updated.id == item.id
        assert updated.path == "/docs/a.txt"
        assert [c.name for c in await metadata_store.children("/")] == ["docs"]
        assert [c.id for c in await metadata_store.children("/docs/")] == [item.id]

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, metadata_store):
        with pytest.raises(NotFoundError):
            await metadata_store.update_fields("nope", {"size": 1})

    @pytest.mark.asyncio
    async def test_update_immutable_field_rejected(self, metadata_store):
        item = await metadata_store.insert(make_item("/a.txt"))
        with pytest.raises(ValidationError):
            await metadata_store.update_fields(item.id, {"type": "folder"})

    @pytest.mark.asyncio
    async def test_update_onto_existing_path_rejected(self, metadata_store):
        item = await metadata_store.insert(make_item("/a.txt"))
        await metadata_store.insert(make_item("/b.txt"))
        with pytest.raises(ConflictError):
            await metadata_store.update_fields(item.id, {"path": "/b.txt", "name": "b.txt"})

    @pytest.mark.asyncio
    async def test_delete_returns_record(self, metadata_store):
        item = await metadata_store.insert(make_item("/a.txt"))
        removed = await metadata_store.delete(item.id)
        assert removed.id == item.id
        assert await metadata_store.find_by_id(item.id) is None
        assert await metadata_store.children("/") == []

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, metadata_store):
        with pytest.raises(NotFoundError):
            await metadata_store.delete("nope")


class TestJsonPersistence:
    @pytest.mark.asyncio
    async def test_snapshot_written_as_json_array(self, tmp_path):
        store = JsonMetadataStore(tmp_path / "metadata.json")
        item = await store.insert(make_item("/a.txt", mime_type="text/plain"))

        data = json.loads((tmp_path / "metadata.json").read_text())
        assert isinstance(data, list)
        assert data[0]["id"] == item.id
        assert data[0]["path"] == "/a.txt"
        assert data[0]["type"] == "file"

    @pytest.mark.asyncio
    async def test_reload_rebuilds_index(self, tmp_path):
        first = JsonMetadataStore(tmp_path / "metadata.json")
        await first.insert(make_item("/docs/"))
        await first.insert(make_item("/docs/a.txt"))

        second = JsonMetadataStore(tmp_path / "metadata.json")
        children = await second.children("/docs/")
        assert [c.name for c in children] == ["a.txt"]

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path):
        store = JsonMetadataStore(tmp_path / "nested" / "metadata.json")
        assert await store.list() == []

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "metadata.json"
        path.write_text("not json")
        store = JsonMetadataStore(path)
        with pytest.raises(StorageReadError):
            await store.list()


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_inserts_all_persist(self, tmp_path):
        store = JsonMetadataStore(tmp_path / "metadata.json")
        await asyncio.gather(
            *(store.insert(make_item(f"/file-{i}.txt")) for i in range(20))
        )

        reloaded = JsonMetadataStore(tmp_path / "metadata.json")
        assert len(await reloaded.list()) == 20

    @pytest.mark.asyncio
    async def test_concurrent_same_path_one_wins(self, tmp_path):
        store = JsonMetadataStore(tmp_path / "metadata.json")
        results = await asyncio.gather(
            store.insert(make_item("/a.txt")),
            store.insert(make_item("/a.txt")),
            return_exceptions=True,
        )
        assert sum(isinstance(r, ConflictError) for r in results) == 1
        assert len(await store.list()) == 1
