"""Pydantic DTOs (Data Transfer Objects) for the Article feature."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class ArticleCreate(BaseModel):
    """Schema for creating a new article — empty values are accepted as-is."""

    title: str = Field("", examples=["Getting Started"])
    content: str = Field("", examples=["This is the article body."])

    model_config = {"extra": "ignore"}


class ArticleUpdate(BaseModel):
    """Schema for a partial update — only fields the caller sent are applied.

    id, created_at, updated_at and image are not accepted from the payload.
    A field that is sent must carry a string; null is rejected.
    """

    title: str | None = None
    content: str | None = None

    model_config = {"extra": "ignore"}

    @field_validator("title", "content")
    @classmethod
    def reject_null(cls, value: str | None) -> str:
        # Defaults are not validated, so this only fires for an explicit null.
        if value is None:
            raise ValueError("must be a string, not null")
        return value

    def changes(self) -> dict[str, str]:
        return self.model_dump(exclude_unset=True)


class ArticleResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    title: str
    content: str
    image: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
