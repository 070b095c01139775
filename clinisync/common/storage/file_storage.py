# clinisync/common/storage/file_storage.py
"""Local-disk storage for uploaded medical images."""

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from clinisync.common.config import settings
from clinisync.common.errors import FileRejectedError, ValidationFailedError
from clinisync.common.utils.global_messages import GlobalMessages

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".pdf", ".dcm"}
ALLOWED_CONTENT_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "application/pdf",
    "application/dicom",
    "application/dcm",
}


@dataclass(frozen=True)
class StoredFile:
    filename: str
    original_name: str
    size: int


class FileStorage:
    """
    Validates uploads and writes them under ``upload_dir``.

    Stored names look like ``image-<millis>-<random><ext>`` so two uploads of
    the same file never collide.
    """

    def __init__(self, upload_dir: Optional[Union[str, Path]] = None, max_bytes: Optional[int] = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_bytes = max_bytes or settings.MAX_UPLOAD_BYTES

    def validate(self, original_name: str, content_type: Optional[str], size: int) -> str:
        """Return the lower-cased extension of an acceptable upload."""
        if not original_name:
            raise ValidationFailedError(GlobalMessages.NO_FILE_UPLOADED)
        extension = Path(original_name).suffix.lower()
        if extension not in ALLOWED_EXTENSIONS or (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
            raise FileRejectedError(GlobalMessages.FILE_TYPE_NOT_ALLOWED)
        if size > self.max_bytes:
            raise FileRejectedError(GlobalMessages.FILE_TOO_LARGE)
        return extension

    def store(self, data: bytes, original_name: str, content_type: Optional[str]) -> StoredFile:
        try:
            extension = self.validate(original_name, content_type, len(data))
        except ValidationFailedError as e:
            logger.warning("Rejected upload %r: %s", original_name, e)
            raise

        filename = f"image-{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}{extension}"
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        (self.upload_dir / filename).write_bytes(data)
        logger.info("Stored upload %s (%d bytes)", filename, len(data))
        return StoredFile(filename=filename, original_name=original_name, size=len(data))

    def remove(self, filename: str) -> bool:
        """Delete a stored file. Returns False if it was already gone."""
        path = self.upload_dir / Path(filename).name
        if not path.exists():
            return False
        path.unlink()
        return True
