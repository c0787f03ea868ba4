import logging
import mimetypes
import re
import uuid
from dataclasses import dataclass
from pathlib import Path

from docmanager.errors import StorageError

logger = logging.getLogger(__name__)

_SAFE_SUFFIX = re.compile(r"\.[A-Za-z0-9]{1,10}")


@dataclass(frozen=True)
class StoredFile:
    name: str
    content_type: str
    size: int


class FileStorage:
    """Flat directory of uploaded blobs, each under a freshly generated name."""

    def __init__(self, upload_dir):
        self.root = Path(upload_dir).resolve()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RuntimeError(f"Could not create upload directory {self.root}") from e

    @staticmethod
    def _unique_name(original: str | None) -> str:
        suffix = Path(original or "").suffix.lower()
        if not _SAFE_SUFFIX.fullmatch(suffix):
            suffix = ""
        return uuid.uuid4().hex + suffix

    def path_for(self, name: str) -> Path:
        path = (self.root / name).resolve()
        if path.parent != self.root:
            logger.error("Rejected stored file name outside upload dir: %r", name)
            raise StorageError()
        return path

    def store(self, original_filename: str | None, data: bytes) -> StoredFile:
        """Write ``data`` under a fresh name. The content type comes from the stored name, never the client."""
        name = self._unique_name(original_filename)
        path = self.path_for(name)
        try:
            path.write_bytes(data)
        except OSError:
            logger.exception("Could not store file %s as %s", original_filename, name)
            raise StorageError()

        logger.info("File stored successfully: %s", name)
        return StoredFile(
            name=name,
            content_type=self.content_type(name),
            size=len(data),
        )

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def delete(self, name: str) -> None:
        """Idempotent: a file that is already gone is not an error."""
        try:
            self.path_for(name).unlink(missing_ok=True)
            logger.info("File deleted: %s", name)
        except (OSError, StorageError):
            logger.exception("Could not delete file: %s", name)

    @staticmethod
    def content_type(name: str) -> str:
        guessed, _ = mimetypes.guess_type(name)
        return guessed or "application/octet-stream"
