from .json_article_repository import JsonFileArticleRepository

__all__ = [
    "JsonFileArticleRepository",
]
