"""Application service (use case) for Article operations."""

import logging
from pathlib import PurePosixPath

from app.application.interfaces import ArticleRepository, ImageStorage
from app.application.schemas import ArticleCreate, ArticleUpdate
from app.domain.entities import Article, ImageUpload
from app.domain.exceptions import EntityNotFoundError, InvalidAssetError

logger = logging.getLogger(__name__)

DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024


class ArticleService:
    """Orchestrates article business logic and the lifecycle of article images.

    Image files are written before the document references them and removed
    only after the document write that drops the reference. Removal is
    best-effort: a failure is logged and never fails the operation.
    """

    def __init__(
        self,
        repository: ArticleRepository,
        image_storage: ImageStorage,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
    ):
        self._repository = repository
        self._images = image_storage
        self._max_image_bytes = max_image_bytes

    async def list_articles(self) -> list[Article]:
        return await self._repository.get_all()

    async def get_article(self, article_id: str) -> Article:
        article = await self._repository.get_by_id(article_id)
        if article is None:
            raise EntityNotFoundError("Article", article_id)
        return article

    async def create_article(self, data: ArticleCreate, image: ImageUpload | None = None) -> Article:
        if image is not None:
            self._validate_image(image)

        article = Article(title=data.title, content=data.content)
        if image is not None:
            article.image = await self._images.store(image)

        created = await self._repository.create(article)
        logger.info("Created article %s", created.id)
        return created

    async def update_article(
        self, article_id: str, data: ArticleUpdate, image: ImageUpload | None = None
    ) -> Article:
        if image is not None:
            self._validate_image(image)

        article = await self.get_article(article_id)
        article.apply_changes(data.changes())

        previous_image = None
        if image is not None:
            previous_image = article.replace_image(await self._images.store(image))

        try:
            updated = await self._repository.update(article)
        except EntityNotFoundError:
            # Deleted between our read and write; the fresh file is now an orphan.
            if image is not None:
                await self._discard_image(article.image)
            raise

        if previous_image and previous_image != updated.image:
            await self._discard_image(previous_image)

        logger.info("Updated article %s", updated.id)
        return updated

    async def delete_article(self, article_id: str) -> None:
        removed = await self._repository.delete(article_id)
        if removed is None:
            raise EntityNotFoundError("Article", article_id)

        if removed.image:
            await self._discard_image(removed.image)
        logger.info("Deleted article %s", article_id)

    async def prune_orphaned_images(self) -> list[str]:
        """Delete stored images that no article references. Returns the removed references."""
        # Match on filenames: references stored under an older URL prefix still count.
        referenced = {PurePosixPath(a.image).name for a in await self._repository.get_all() if a.image}
        pruned: list[str] = []
        for reference in self._images.list_references():
            if PurePosixPath(reference).name in referenced:
                continue
            if await self._discard_image(reference):
                pruned.append(reference)

        if pruned:
            logger.info("Pruned %d orphaned image(s)", len(pruned))
        return pruned

    # ── Helpers ─────────────────────────────────────────────────────

    def _validate_image(self, image: ImageUpload) -> None:
        if not image.is_image:
            raise InvalidAssetError("Only image files are allowed!")
        if image.size > self._max_image_bytes:
            raise InvalidAssetError("File too large", too_large=True)

    async def _discard_image(self, reference: str | None) -> bool:
        if not reference:
            return False
        try:
            return await self._images.delete(reference)
        except OSError as exc:
            logger.warning("Could not delete image %s: %s", reference, exc)
            return False
