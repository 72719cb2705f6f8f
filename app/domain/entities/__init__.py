from .article import Article, EDITABLE_FIELDS
from .image_upload import ImageUpload

__all__ = [
    "Article",
    "EDITABLE_FIELDS",
    "ImageUpload",
]
