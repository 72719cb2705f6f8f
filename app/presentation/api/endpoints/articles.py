"""Article CRUD endpoints.

Create and update accept either a JSON body or ``multipart/form-data`` with
text fields and an optional ``image`` file part.
"""

import json
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile

from app.application.schemas import ArticleCreate, ArticleUpdate, ArticleResponse
from app.application.services import ArticleService
from app.domain.entities import ImageUpload
from app.domain.exceptions import EntityNotFoundError, InvalidAssetError
from app.infrastructure.dependencies import get_article_service


router = APIRouter(prefix="/articles", tags=["Articles"])

NOT_FOUND = "Article not found"
IMAGE_FIELD = "image"

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


# ── Helpers ──────────────────────────────────────────────────────────

async def _read_payload(request: Request) -> tuple[dict[str, Any], ImageUpload | None]:
    """Split the request body into plain fields and an optional image upload."""
    content_type = request.headers.get("content-type", "").lower()
    max_bytes = request.app.state.settings.max_image_size_bytes

    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        fields: dict[str, Any] = {}
        image: ImageUpload | None = None
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == IMAGE_FIELD and value.filename:
                    image = ImageUpload(
                        filename=value.filename,
                        content_type=value.content_type or "application/octet-stream",
                        # One byte past the ceiling is enough to reject an oversized file.
                        content=await value.read(max_bytes + 1),
                    )
                continue
            fields[key] = value
        return fields, image

    body = await request.body()
    if not body.strip():
        return {}, None
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed JSON body")
    if not isinstance(data, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be a JSON object",
        )
    return data, None


def _validate(schema: type[BaseModel], fields: dict[str, Any]) -> Any:
    try:
        return schema.model_validate(fields)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


def _asset_rejected(e: InvalidAssetError) -> HTTPException:
    code = (
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE if e.too_large else status.HTTP_400_BAD_REQUEST
    )
    return HTTPException(status_code=code, detail=e.message)


# ── Endpoints ────────────────────────────────────────────────────────

@router.get("", response_model=list[ArticleResponse])
async def list_articles(
    service: ArticleService = Depends(get_article_service),
) -> list[ArticleResponse]:
    """Retrieve every article in stored order."""
    articles = await service.list_articles()
    return [ArticleResponse.model_validate(a, from_attributes=True) for a in articles]


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: str,
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    """Retrieve a single article by ID."""
    try:
        article = await service.get_article(article_id)
    except EntityNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return ArticleResponse.model_validate(article, from_attributes=True)


@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
async def create_article(
    request: Request,
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    """Create a new article, optionally with an image."""
    fields, image = await _read_payload(request)
    data = _validate(ArticleCreate, fields)
    try:
        article = await service.create_article(data, image)
    except InvalidAssetError as e:
        raise _asset_rejected(e)
    return ArticleResponse.model_validate(article, from_attributes=True)


@router.put("/{article_id}", response_model=ArticleResponse)
@router.patch("/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: str,
    request: Request,
    service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    """Partially update an article; a new image replaces the old one."""
    fields, image = await _read_payload(request)
    data = _validate(ArticleUpdate, fields)
    try:
        article = await service.update_article(article_id, data, image)
    except EntityNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    except InvalidAssetError as e:
        raise _asset_rejected(e)
    return ArticleResponse.model_validate(article, from_attributes=True)


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    article_id: str,
    service: ArticleService = Depends(get_article_service),
) -> Response:
    """Delete an article and its image."""
    try:
        await service.delete_article(article_id)
    except EntityNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
