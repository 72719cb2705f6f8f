"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class InvalidAssetError(Exception):
    """Raised when an uploaded asset is rejected before anything is persisted.

    ``too_large`` distinguishes a size-ceiling violation from a type mismatch
    so the HTTP layer can pick the matching status code.
    """

    def __init__(self, message: str, too_large: bool = False):
        self.message = message
        self.too_large = too_large
        super().__init__(message)


class StorageError(Exception):
    """Raised when the article document or the upload directory cannot be read or written."""

    def __init__(self, operation: str, path: str, reason: str):
        self.operation = operation
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to {operation} '{path}': {reason}")
