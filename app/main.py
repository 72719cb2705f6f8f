"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.domain.exceptions import StorageError
from app.infrastructure.dependencies import build_article_service
from app.infrastructure.logging.log_config import setup_logging
from app.infrastructure.persistence import JsonFileArticleRepository
from app.infrastructure.storage.local_file_storage import LocalFileStorage
from app.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging, prepare the upload directory."""
    settings: Settings = app.state.settings
    setup_logging(settings)

    storage: LocalFileStorage = app.state.image_storage
    storage.ensure_dir()
    logger.info(
        "Serving articles from %s, images from %s",
        app.state.article_repository.path,
        storage.upload_dir,
    )

    if settings.prune_orphaned_uploads:
        service = build_article_service(app.state.article_repository, storage, settings)
        try:
            await service.prune_orphaned_images()
        except StorageError:
            logger.exception("Orphaned image sweep failed — continuing without it")

    yield


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # One repository per app so all requests share its write lock
    app.state.settings = settings
    app.state.article_repository = JsonFileArticleRepository(settings.data_file)
    app.state.image_storage = LocalFileStorage(
        upload_dir=settings.upload_dir,
        url_prefix=settings.uploads_url_prefix,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)

    # Mount API routes and uploaded images
    app.include_router(api_router)
    app.mount(
        settings.uploads_url_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=_settings.host,
        port=_settings.port,
        reload=_settings.app_env == "development",
    )
