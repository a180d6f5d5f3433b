# src/article_editor/services/image_validation_service.py
import logging
from typing import Iterable, Optional
from urllib.parse import urlparse

from mutflex_shell.core.managers.config_manager import config_manager
from article_editor.errors import ImageValidationError
from article_editor.model import ImageFile

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10MB


class ImageValidationService:
    """
    Checks files before they reach the upload gateway.

    The editor only requires an `image/*` type; the gateway itself narrows
    that down to an explicit list of formats.
    """

    def __init__(self, max_bytes: Optional[int] = None, allowed_types: Optional[Iterable[str]] = None):
        self.max_bytes = int(max_bytes if max_bytes is not None
                             else config_manager.get_nested("editor.upload.max_bytes", MAX_IMAGE_BYTES))
        self.allowed_types = {t.lower() for t in allowed_types} if allowed_types else None

    def validate(self, file: ImageFile) -> ImageFile:
        """Returns the file unchanged, or raises ImageValidationError."""
        content_type = (file.content_type or "").lower()
        if not content_type.startswith("image/"):
            raise ImageValidationError(f"'{file.filename}' is not an image ({content_type or 'unknown type'}).")
        if self.allowed_types is not None and content_type not in self.allowed_types:
            allowed = ", ".join(sorted(t.split("/", 1)[1].upper() for t in self.allowed_types))
            raise ImageValidationError(f"File type not allowed. Allowed types: {allowed}")
        if file.size > self.max_bytes:
            limit_mb = self.max_bytes / (1024 * 1024)
            raise ImageValidationError(f"'{file.filename}' exceeds the {limit_mb:g}MB limit.")
        if file.size == 0:
            raise ImageValidationError(f"'{file.filename}' is empty.")
        return file

    @staticmethod
    def validate_url(url: str) -> str:
        """Accepts absolute http(s) URLs and site-relative paths."""
        candidate = (url or "").strip()
        if not candidate:
            raise ImageValidationError("Image URL is empty.")
        if candidate.startswith("/") and not candidate.startswith("//"):
            return candidate
        parsed = urlparse(candidate)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ImageValidationError(f"Invalid image URL: {candidate}")
        return candidate

    @staticmethod
    def is_absolute_http_url(url: str) -> bool:
        parsed = urlparse((url or "").strip())
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
