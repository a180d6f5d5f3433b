# src/article_editor/managers/upload_storage_manager.py
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Iterable, Optional

from werkzeug.utils import secure_filename

from mutflex_shell.core.managers.config_manager import config_manager
from mutflex_shell.core.utils.path_utils import PathUtils
from article_editor.model import ImageFile
from article_editor.services.image_validation_service import ImageValidationService

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
PUBLIC_PREFIX = "/uploads"


class UploadStorageManager:
    """
    Stores uploaded images on disk under unique names and hands back the
    public URL they are served from.
    """

    def __init__(self, upload_dir: Optional[Path] = None, max_bytes: Optional[int] = None,
                 allowed_types: Optional[Iterable[str]] = None):
        self.upload_dir = Path(upload_dir) if upload_dir else PathUtils.get_uploads_root()
        self.upload_dir.mkdir(parents=True, exist_ok=True)

        if max_bytes is None:
            max_bytes = config_manager.get_nested("server.upload.max_bytes", None)
        if allowed_types is None:
            allowed_types = config_manager.get_nested("server.upload.allowed_types", DEFAULT_ALLOWED_TYPES)
        self.validator = ImageValidationService(max_bytes=max_bytes, allowed_types=allowed_types)

    @property
    def max_bytes(self) -> int:
        return self.validator.max_bytes

    @staticmethod
    def unique_name(original: str) -> str:
        """`img-<millis>-<random><ext>`, the extension taken from the sanitized original name."""
        ext = os.path.splitext(secure_filename(original or ""))[1].lower()
        return f"img-{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}{ext}"

    def save(self, file: ImageFile) -> str:
        """Validates and writes the file. Returns its public URL."""
        self.validator.validate(file)
        name = self.unique_name(file.filename)
        target = self.upload_dir / name
        target.write_bytes(file.data)
        logger.info("Stored upload '%s' as %s (%d bytes).", file.filename, name, file.size)
        return f"{PUBLIC_PREFIX}/{name}"

    def resolve(self, name: str) -> Optional[Path]:
        """The on-disk path of a stored upload, or None for unknown/unsafe names."""
        safe = secure_filename(name or "")
        if not safe or safe != name:
            return None
        path = self.upload_dir / safe
        return path if path.is_file() else None
