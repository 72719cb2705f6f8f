"""Abstract repository interfaces (ports) — define the contract, not the implementation."""

from abc import ABC, abstractmethod

from app.domain.entities import Article


class ArticleRepository(ABC):
    """Port for article persistence — implemented in the infrastructure layer.

    Every call is independently consistent with the last durable write;
    implementations hold no article state between calls.
    """

    @abstractmethod
    async def get_all(self) -> list[Article]:
        """Retrieve every article in stored (insertion) order."""
        ...

    @abstractmethod
    async def get_by_id(self, article_id: str) -> Article | None:
        """Retrieve a single article by its ID."""
        ...

    @abstractmethod
    async def create(self, article: Article) -> Article:
        """Append a new article and persist it."""
        ...

    @abstractmethod
    async def update(self, article: Article) -> Article:
        """Replace the stored article with the same ID.

        Raises EntityNotFoundError if it no longer exists.
        """
        ...

    @abstractmethod
    async def delete(self, article_id: str) -> Article | None:
        """Remove an article. Returns the removed article, or None if not found."""
        ...
