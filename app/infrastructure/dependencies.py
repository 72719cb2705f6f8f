"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Request

from app.config import Settings
from app.application.services import ArticleService
from app.infrastructure.persistence import JsonFileArticleRepository
from app.infrastructure.storage.local_file_storage import LocalFileStorage


def build_article_service(
    repository: JsonFileArticleRepository,
    storage: LocalFileStorage,
    settings: Settings,
) -> ArticleService:
    return ArticleService(
        repository=repository,
        image_storage=storage,
        max_image_bytes=settings.max_image_size_bytes,
    )


async def get_article_service(request: Request) -> AsyncGenerator[ArticleService, None]:
    """Provides an ArticleService bound to the app's shared repository and storage.

    The repository lives on ``app.state`` so every request serializes its
    document writes through the same lock.
    """
    state = request.app.state
    yield build_article_service(state.article_repository, state.image_storage, state.settings)
