"""Concrete repository implementation backed by a single JSON document.

Document layout::

    {"articles": [{"id": ..., "title": ..., "content": ..., "image": ...,
                   "created_at": ..., "updated_at": ...}, ...]}

Every operation reads the whole document, mutates the list in memory and
writes the whole document back. An asyncio.Lock serializes those
read-modify-write sequences within the process; the write itself goes
through a temporary file and ``os.replace``.
"""

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from app.application.interfaces import ArticleRepository
from app.domain.entities import Article
from app.domain.exceptions import EntityNotFoundError, StorageError

logger = logging.getLogger(__name__)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with a ``Z`` suffix and microsecond precision."""
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class JsonFileArticleRepository(ArticleRepository):
    """Implements the ArticleRepository port on top of one JSON file."""

    def __init__(self, data_file: str | Path):
        self._path = Path(data_file)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    # ── Mapping ─────────────────────────────────────────────────────

    def _to_entity(self, record: dict[str, Any]) -> Article:
        """Map stored record → domain entity."""
        try:
            created_at = parse_timestamp(record["created_at"])
            updated_at = parse_timestamp(record.get("updated_at") or record["created_at"])
            return Article(
                id=record["id"],
                title=record.get("title") or "",
                content=record.get("content") or "",
                image=record.get("image"),
                created_at=created_at,
                updated_at=updated_at,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError("read", str(self._path), f"malformed article record: {exc}") from exc

    def _to_record(self, entity: Article) -> dict[str, Any]:
        """Map domain entity → stored record."""
        return {
            "id": entity.id,
            "title": entity.title,
            "content": entity.content,
            "image": entity.image,
            "created_at": format_timestamp(entity.created_at),
            "updated_at": format_timestamp(entity.updated_at),
        }

    # ── Document I/O ────────────────────────────────────────────────

    def _check_record(self, record: Any) -> None:
        if not isinstance(record, dict):
            raise StorageError("read", str(self._path), "article record is not an object")
        if not isinstance(record.get("id"), str):
            raise StorageError("read", str(self._path), f"article id must be a string: {record.get('id')!r}")
        image = record.get("image")
        if image is not None and not isinstance(image, str):
            raise StorageError(
                "read", str(self._path), f"article '{record['id']}' has a non-string image: {image!r}"
            )

    async def _read_records(self) -> list[dict[str, Any]]:
        if not self._path.exists():
            return []
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StorageError("read", str(self._path), str(exc)) from exc
        except json.JSONDecodeError as exc:
            raise StorageError("read", str(self._path), f"invalid JSON: {exc}") from exc

        if not isinstance(document, dict) or not isinstance(document.get("articles"), list):
            raise StorageError("read", str(self._path), "expected an object with an 'articles' list")
        for record in document["articles"]:
            self._check_record(record)
        return document["articles"]

    async def _write_records(self, records: list[dict[str, Any]]) -> None:
        payload = json.dumps({"articles": records}, indent=2, ensure_ascii=False)
        tmp_path = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, self._path)
        except OSError as exc:
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)
            raise StorageError("write", str(self._path), str(exc)) from exc

        logger.debug("Wrote %d article(s) to %s", len(records), self._path)

    @staticmethod
    def _index_of(records: list[dict[str, Any]], article_id: str) -> int | None:
        for i, record in enumerate(records):
            if record.get("id") == article_id:
                return i
        return None

    # ── Port implementation ─────────────────────────────────────────

    async def get_all(self) -> list[Article]:
        return [self._to_entity(r) for r in await self._read_records()]

    async def get_by_id(self, article_id: str) -> Article | None:
        records = await self._read_records()
        index = self._index_of(records, article_id)
        return self._to_entity(records[index]) if index is not None else None

    async def create(self, article: Article) -> Article:
        async with self._lock:
            records = await self._read_records()
            if self._index_of(records, article.id) is not None:
                raise StorageError("write", str(self._path), f"duplicate article id '{article.id}'")
            records.append(self._to_record(article))
            await self._write_records(records)
        return article

    async def update(self, article: Article) -> Article:
        async with self._lock:
            records = await self._read_records()
            index = self._index_of(records, article.id)
            if index is None:
                raise EntityNotFoundError("Article", article.id)
            record = self._to_record(article)
            # created_at is owned by the stored record, never by the caller.
            record["created_at"] = records[index].get("created_at", record["created_at"])
            records[index] = record
            await self._write_records(records)
        return self._to_entity(record)

    async def delete(self, article_id: str) -> Article | None:
        async with self._lock:
            records = await self._read_records()
            index = self._index_of(records, article_id)
            if index is None:
                return None
            removed = self._to_entity(records.pop(index))
            await self._write_records(records)
        return removed
