from dataclasses import dataclass


@dataclass
class ImageUpload:
    """An uploaded file as received from the transport, not yet persisted."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")
