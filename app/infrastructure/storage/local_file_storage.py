"""Local filesystem storage for article images.

Storage layout:
    <upload_dir>/<epoch_ms>-<sanitised_name>.<ext>     — uploaded images

Each stored file is referenced as ``<url_prefix>/<filename>``, which is also
the path it is served under by the static mount.
"""

import logging
import re
import time
from pathlib import Path

from app.application.interfaces import ImageStorage
from app.domain.entities import ImageUpload
from app.domain.exceptions import StorageError

logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def _sanitise(name: str, max_len: int = 80) -> str:
    """Replace non-word characters with underscores and truncate."""
    return re.sub(r"[^\w\-]", "_", name)[:max_len].strip("_") or "unnamed"


class LocalFileStorage(ImageStorage):
    """Infrastructure adapter for local image storage."""

    def __init__(self, upload_dir: str | Path, url_prefix: str = "/uploads"):
        self._upload_dir = Path(upload_dir)
        self._url_prefix = "/" + url_prefix.strip("/")

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    def ensure_dir(self) -> None:
        self._upload_dir.mkdir(parents=True, exist_ok=True)

    # ── References ──────────────────────────────────────────────────

    def reference_for(self, filename: str) -> str:
        return f"{self._url_prefix}/{filename}"

    def path_for(self, reference: str) -> Path | None:
        """Resolve a reference to a path inside the upload directory, or None if it points elsewhere."""
        prefix = self._url_prefix + "/"
        if not reference.startswith(prefix):
            return None
        filename = reference[len(prefix):]
        if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
            return None
        return self._upload_dir / filename

    # ── Image Storage ───────────────────────────────────────────────

    def _unique_name(self, original: str) -> str:
        """Build ``<epoch_ms>-<stem><ext>``, adding a counter if that name is taken."""
        path = Path(original)
        stem = _sanitise(path.stem)
        ext = "." + _sanitise(path.suffix[1:], max_len=10) if path.suffix else ""
        base = f"{_epoch_millis()}-{stem}"

        candidate = f"{base}{ext}"
        counter = 1
        while (self._upload_dir / candidate).exists():
            candidate = f"{base}-{counter}{ext}"
            counter += 1
        return candidate

    async def store(self, upload: ImageUpload) -> str:
        """Store an uploaded image and return its public reference."""
        try:
            self.ensure_dir()
            filename = self._unique_name(upload.filename or "image")
            dest_path = self._upload_dir / filename
            with dest_path.open("xb") as fh:
                fh.write(upload.content)
        except OSError as exc:
            raise StorageError("store image in", str(self._upload_dir), str(exc)) from exc

        logger.info("Stored image: %s (%d bytes)", dest_path, upload.size)
        return self.reference_for(filename)

    async def delete(self, reference: str) -> bool:
        """Delete a stored image from disk.

        Returns True if a file was deleted, False if it was missing or the
        reference does not point into the upload directory.
        """
        file_path = self.path_for(reference)
        if file_path is None:
            logger.warning("Refusing to delete image outside upload dir: %s", reference)
            return False
        if not file_path.is_file():
            return False

        file_path.unlink()
        logger.info("Deleted image from disk: %s", file_path)
        return True

    def exists(self, reference: str) -> bool:
        file_path = self.path_for(reference)
        return file_path is not None and file_path.is_file()

    def list_references(self) -> list[str]:
        if not self._upload_dir.is_dir():
            return []
        return sorted(
            self.reference_for(p.name)
            for p in self._upload_dir.iterdir()
            if p.is_file() and not p.name.startswith(".")
        )
