"""
Image upload pre-checks and storage naming shared by contact photos and profile avatars.
"""

import logging
import secrets
import time
from typing import Optional

from contactbook.core.errors import BackendError, PersistenceError, UploadRejected
from contactbook.core.notifications import Notifier
from contactbook.services.ports import StorageGateway

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024


def check_image(content_type: Optional[str], size: int, max_bytes: int = MAX_IMAGE_BYTES) -> None:
    """Raise UploadRejected for non-image content or payloads over `max_bytes`."""
    if not (content_type or "").startswith("image/"):
        raise UploadRejected("Please select an image file.")
    if size > max_bytes:
        raise UploadRejected(
            f"Please select an image under {max_bytes // (1024 * 1024)}MB.",
            status_code=413,
        )


def storage_path(prefix: str, filename: Optional[str]) -> str:
    """`<prefix>/<millis>-<random>.<ext>`; the extension comes from the client filename."""
    ext = (filename or "").rsplit(".", 1)[-1].lower() if "." in (filename or "") else "bin"
    return f"{prefix}/{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"


class ImageUploader:
    def __init__(self, storage: StorageGateway, notifier: Notifier, max_bytes: int = MAX_IMAGE_BYTES) -> None:
        self.storage = storage
        self.notifier = notifier
        self.max_bytes = max_bytes

    async def upload(self, prefix: str, filename: Optional[str], content_type: Optional[str], data: bytes) -> str:
        """Check, store and return the public URL of an image."""
        try:
            check_image(content_type, len(data), self.max_bytes)
        except UploadRejected as e:
            title = "File too large" if e.status_code == 413 else "Invalid file"
            self.notifier.error(title, e.message)
            raise

        path = storage_path(prefix, filename)
        try:
            await self.storage.upload(path, data, content_type or "application/octet-stream")
            url = await self.storage.get_public_url(path)
        except BackendError as e:
            logger.error("Error uploading %s: %s", path, e.message)
            self.notifier.error("Upload failed", "Failed to upload photo. Please try again.")
            raise PersistenceError("Failed to upload photo. Please try again.")
        return url
