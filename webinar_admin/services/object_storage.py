"""Object storage for uploaded speaker photos."""
import logging
import re
from pathlib import Path

from webinar_admin.utils.exceptions import StorageError
from webinar_admin.utils.validation import ALLOWED_PHOTO_EXTENSIONS

logger = logging.getLogger(__name__)

SPEAKER_PREFIX = "speakers/"
STORAGE_ROOT = Path("static")
# Streamlit serves ./static under /app/static when static serving is enabled.
PUBLIC_BASE_URL = "/app/static/"


def sanitize_filename(filename: str) -> str:
    """Keep the extension and reduce the stem to safe characters."""
    path = Path(filename.strip())
    stem = re.sub(r"[^A-Za-z0-9_.-]+", "_", path.stem).strip("_.").lower()
    return f"{stem or 'upload'}{path.suffix.lower()}"


class LocalObjectStorage:
    """Stores uploads under a directory and hands out public URLs for them."""

    def __init__(self, root: Path = STORAGE_ROOT, base_url: str = PUBLIC_BASE_URL):
        self.root = Path(root)
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"

    def public_url(self, key: str) -> str:
        return f"{self.base_url}{key}"

    def upload(self, filename: str, data: bytes, prefix: str = SPEAKER_PREFIX) -> str:
        """
        Store a file keyed by its name under ``prefix``.

        An existing object with the same key is overwritten.

        Args:
            filename: Original filename (the key is derived from it)
            data: File contents
            prefix: Key prefix, ``speakers/`` by default

        Returns:
            Publicly fetchable URL of the stored object

        Raises:
            ValueError: If the file type is not an allowed image type
            StorageError: If the file cannot be written
        """
        safe_name = sanitize_filename(filename)
        if Path(safe_name).suffix not in ALLOWED_PHOTO_EXTENSIONS:
            raise ValueError("Unsupported image type, please upload png/jpg/jpeg/gif")

        key = f"{prefix}{safe_name}"
        target = self.root / key
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as error:
            raise StorageError(f"Could not store {key}: {error}") from error

        logger.info("Uploaded %s (%d bytes)", key, len(data))
        return self.public_url(key)
