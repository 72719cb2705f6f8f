from .article_repository import ArticleRepository
from .image_storage import ImageStorage

__all__ = [
    "ArticleRepository",
    "ImageStorage",
]
