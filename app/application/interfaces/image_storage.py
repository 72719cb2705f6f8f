"""Abstract interface (port) for article image storage."""

from abc import ABC, abstractmethod

from app.domain.entities import ImageUpload


class ImageStorage(ABC):
    """Port for storing the image files that articles reference."""

    @abstractmethod
    async def store(self, upload: ImageUpload) -> str:
        """Persist an upload under a collision-resistant name and return its public reference."""
        ...

    @abstractmethod
    async def delete(self, reference: str) -> bool:
        """Delete the file behind a reference. Returns True if a file was removed.

        Raises OSError if the file exists but cannot be removed.
        """
        ...

    @abstractmethod
    def exists(self, reference: str) -> bool:
        """Check whether the file behind a reference is present."""
        ...

    @abstractmethod
    def list_references(self) -> list[str]:
        """Return a reference for every file currently in storage."""
        ...
