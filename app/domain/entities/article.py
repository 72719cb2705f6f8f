"""Domain entities — pure Python business objects, no framework dependencies."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

# Fields a caller may change through a partial update.
EDITABLE_FIELDS = frozenset({"title", "content"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Article:
    """Core domain entity representing a published article."""

    title: str = ""
    content: str = ""
    image: str | None = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.updated_at is None:
            self.updated_at = self.created_at

    def apply_changes(self, changes: dict[str, Any]) -> None:
        """Shallow-merge caller-supplied fields and refresh updated_at.

        Keys outside EDITABLE_FIELDS (id, created_at, image, ...) are ignored.
        """
        for key, value in changes.items():
            if key in EDITABLE_FIELDS:
                setattr(self, key, value)
        self.touch()

    def replace_image(self, reference: str | None) -> str | None:
        """Point the article at a new image and return the previous reference."""
        previous = self.image
        self.image = reference
        self.touch()
        return previous

    def touch(self) -> None:
        """Refresh updated_at, keeping it strictly increasing."""
        now = _utcnow()
        floor = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now if now >= floor else floor
