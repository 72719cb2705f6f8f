"""Unit tests for the JSON-document article repository."""

import asyncio
import json

import pytest

from app.domain.entities import Article
from app.domain.exceptions import EntityNotFoundError, StorageError
from app.infrastructure.persistence import JsonFileArticleRepository


SEED = {
    "articles": [
        {
            "id": "test-id",
            "title": "Test Article",
            "content": "Test Content",
            "image": None,
            "created_at": "2024-01-01T00:00:00.000Z",
            "updated_at": "2024-01-01T00:00:00.000Z",
        }
    ]
}


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "data" / "db.json"


@pytest.fixture
def seeded(db_path):
    db_path.parent.mkdir(parents=True)
    db_path.write_text(json.dumps(SEED), encoding="utf-8")
    return db_path


def _read(path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.mark.asyncio
async def test_missing_file_is_an_empty_store(db_path):
    repo = JsonFileArticleRepository(db_path)
    assert await repo.get_all() == []
    assert await repo.get_by_id("anything") is None
    assert not db_path.exists()


@pytest.mark.asyncio
async def test_reads_seeded_document(seeded):
    repo = JsonFileArticleRepository(seeded)
    article = await repo.get_by_id("test-id")
    assert article is not None
    assert article.title == "Test Article"
    assert article.image is None
    assert article.created_at.year == 2024


@pytest.mark.asyncio
async def test_create_appends_and_writes_whole_document(seeded):
    repo = JsonFileArticleRepository(seeded)
    created = await repo.create(Article(title="New", content="Body"))

    document = _read(seeded)
    assert [a["id"] for a in document["articles"]] == ["test-id", created.id]
    stored = document["articles"][1]
    assert set(stored) == {"id", "title", "content", "image", "created_at", "updated_at"}
    assert stored["created_at"].endswith("Z")
    assert stored["created_at"] == stored["updated_at"]


@pytest.mark.asyncio
async def test_create_makes_parent_directory(db_path):
    repo = JsonFileArticleRepository(db_path)
    await repo.create(Article(title="First"))
    assert len(_read(db_path)["articles"]) == 1


@pytest.mark.asyncio
async def test_update_replaces_record_in_place(seeded):
    repo = JsonFileArticleRepository(seeded)
    await repo.create(Article(title="Second"))
    article = await repo.get_by_id("test-id")
    article.apply_changes({"title": "Updated Title"})

    updated = await repo.update(article)

    document = _read(seeded)
    assert document["articles"][0]["title"] == "Updated Title"
    assert document["articles"][0]["content"] == "Test Content"
    assert document["articles"][0]["created_at"] == SEED["articles"][0]["created_at"]
    assert document["articles"][1]["title"] == "Second"
    assert updated.updated_at > updated.created_at


@pytest.mark.asyncio
async def test_update_missing_record(seeded):
    repo = JsonFileArticleRepository(seeded)
    with pytest.raises(EntityNotFoundError):
        await repo.update(Article(id="ghost", title="x"))


@pytest.mark.asyncio
async def test_delete_returns_removed_article(seeded):
    repo = JsonFileArticleRepository(seeded)
    removed = await repo.delete("test-id")
    assert removed is not None
    assert removed.title == "Test Article"
    assert _read(seeded) == {"articles": []}
    assert await repo.delete("test-id") is None


@pytest.mark.asyncio
async def test_malformed_json_is_a_storage_error(db_path):
    db_path.parent.mkdir(parents=True)
    db_path.write_text("{not json", encoding="utf-8")
    repo = JsonFileArticleRepository(db_path)
    with pytest.raises(StorageError):
        await repo.get_all()


@pytest.mark.asyncio
async def test_wrong_document_shape_is_a_storage_error(db_path):
    db_path.parent.mkdir(parents=True)
    db_path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    repo = JsonFileArticleRepository(db_path)
    with pytest.raises(StorageError):
        await repo.create(Article(title="x"))


@pytest.mark.asyncio
async def test_no_temporary_files_left_behind(db_path):
    repo = JsonFileArticleRepository(db_path)
    await repo.create(Article(title="x"))
    await repo.delete((await repo.get_all())[0].id)
    assert [p.name for p in db_path.parent.iterdir()] == ["db.json"]


@pytest.mark.asyncio
async def test_interleaved_creates_are_serialized(db_path, monkeypatch):
    repo = JsonFileArticleRepository(db_path)
    read_records = repo._read_records

    async def read_then_yield():
        records = await read_records()
        await asyncio.sleep(0)
        return records

    monkeypatch.setattr(repo, "_read_records", read_then_yield)
    articles = [Article(title=f"A{i}") for i in range(10)]

    await asyncio.gather(*(repo.create(a) for a in articles))

    assert [a["id"] for a in _read(db_path)["articles"]] == [a.id for a in articles]


@pytest.mark.asyncio
async def test_non_string_id_is_a_storage_error(db_path):
    db_path.parent.mkdir(parents=True)
    record = dict(SEED["articles"][0], id=5)
    db_path.write_text(json.dumps({"articles": [record]}), encoding="utf-8")
    repo = JsonFileArticleRepository(db_path)
    with pytest.raises(StorageError):
        await repo.get_all()


@pytest.mark.asyncio
async def test_non_string_image_fails_before_document_is_rewritten(db_path):
    db_path.parent.mkdir(parents=True)
    record = dict(SEED["articles"][0], image=42)
    original = json.dumps({"articles": [record]})
    db_path.write_text(original, encoding="utf-8")
    repo = JsonFileArticleRepository(db_path)

    with pytest.raises(StorageError):
        await repo.delete("test-id")

    assert db_path.read_text(encoding="utf-8") == original
