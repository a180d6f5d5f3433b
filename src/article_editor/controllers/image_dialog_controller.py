# src/article_editor/controllers/image_dialog_controller.py
import abc
import logging
from typing import Optional

from bs4 import Tag

from article_editor.controllers.visual_edit_controller import VisualEditSurface
from article_editor.controllers.wysiwyg_controller import StructuredEditor
from article_editor.dom.core import NodePath
from article_editor.errors import (
    ImageValidationError,
    NodeNotFoundError,
    UploadBusyError,
    UploadError,
)
from article_editor.managers.notification_manager import NotificationManager
from article_editor.managers.upload_manager import ImageUploadManager
from article_editor.model import ALIGNMENTS, WIDTH_OPTIONS, ImageAttributes, ImageFile
from article_editor.services.image_validation_service import ImageValidationService

logger = logging.getLogger(__name__)


class ImageTarget(metaclass=abc.ABCMeta):
    """The image a dialog edits: read its attributes, apply new ones, or remove it."""

    @abc.abstractmethod
    def read(self) -> ImageAttributes:
        ...

    @abc.abstractmethod
    def apply(self, attributes: ImageAttributes) -> None:
        ...

    @abc.abstractmethod
    def remove(self) -> None:
        ...



class WysiwygImageTarget(ImageTarget):
    """An image node addressed by its document position."""

    def __init__(self, editor: StructuredEditor, path: NodePath):
        self.editor = editor
        self.path = tuple(path)

    def read(self) -> ImageAttributes:
        return self.editor.image_attributes(self.path)

    def apply(self, attributes: ImageAttributes) -> None:
        self.editor.update_image(self.path, attributes)

    def remove(self) -> None:
        self.editor.delete_image(self.path)

    def __repr__(self):
        return f"WysiwygImageTarget(path={self.path})"


class VisualImageTarget(ImageTarget):
    """An `<img>` element inside the visual-edit document."""

    def __init__(self, surface: VisualEditSurface, element: Tag):
        self.surface = surface
        self.element = element

    def read(self) -> ImageAttributes:
        return self.surface.image_attributes(self.element)

    def apply(self, attributes: ImageAttributes) -> None:
        self.surface.apply_image_attributes(self.element, attributes)

    def remove(self) -> None:
        self.surface.remove_image(self.element)

    def __repr__(self):
        return f"VisualImageTarget(src={self.element.get('src')!r})"


class ImagePropertiesDialog:
    """
    Edits one image at a time. The target reference only lives while the
    dialog is open; `save`, `delete` and `close` all release it.
    """

    def __init__(self, notifications: Optional[NotificationManager] = None,
                 uploads: Optional[ImageUploadManager] = None):
        self.notifications = notifications or NotificationManager()
        self.uploads = uploads
        self.target: Optional[ImageTarget] = None
        self.attributes: Optional[ImageAttributes] = None
        self.uploading = False

    @property
    def is_open(self) -> bool:
        return self.target is not None

    def open(self, target: ImageTarget) -> ImageAttributes:
        self.attributes = target.read()
        self.target = target
        logger.debug("Image dialog opened for %r", target)
        return self.attributes

    def close(self) -> None:
        self.target = None
        self.attributes = None
        self.uploading = False

    # --- Field edits (kept local until save) ---

    def set_alt(self, alt: str) -> None:
        self._require_open()
        self.attributes = self.attributes.model_copy(update={"alt": alt or ""})

    def set_caption(self, caption: str) -> None:
        self._require_open()
        self.attributes = self.attributes.model_copy(update={"caption": (caption or "").strip()})

    def set_width(self, width: str) -> None:
        self._require_open()
        if width not in WIDTH_OPTIONS:
            raise ValueError(f"Width must be one of {', '.join(WIDTH_OPTIONS)}")
        self.attributes = self.attributes.model_copy(update={"width": width})

    def set_alignment(self, alignment: str) -> None:
        self._require_open()
        if alignment not in ALIGNMENTS:
            raise ValueError(f"Alignment must be one of {', '.join(ALIGNMENTS)}")
        self.attributes = self.attributes.model_copy(update={"alignment": alignment})

    def set_source_url(self, url: str) -> bool:
        self._require_open()
        try:
            src = ImageValidationService.validate_url(url)
        except ImageValidationError as e:
            self.notifications.error("Invalid URL", str(e))
            return False
        self.attributes = self.attributes.model_copy(update={"src": src})
        return True

    async def replace_source(self, file: ImageFile) -> bool:
        """Uploads a replacement file; the new URL is applied on save."""
        self._require_open()
        if self.uploading:
            self.notifications.error("Please wait", "An image is already being uploaded.")
            return False
        if self.uploads is None:
            self.notifications.error("Image upload is not available.")
            return False

        self.uploading = True
        try:
            url = await self.uploads.upload(file)
        except UploadBusyError as e:
            self.notifications.error("Please wait", str(e))
            return False
        except ImageValidationError as e:
            self.notifications.error("Invalid image", str(e))
            return False
        except UploadError as e:
            self.notifications.error("Image upload failed", str(e))
            return False
        finally:
            self.uploading = False

        if not self.is_open:
            logger.info("Dialog closed before upload finished; result ignored.")
            return False
        self.attributes = self.attributes.model_copy(update={"src": url})
        self.notifications.success("Image uploaded")
        return True

    # --- Commit ---

    def save(self) -> bool:
        self._require_open()
        try:
            self.target.apply(self.attributes)
        except NodeNotFoundError as e:
            logger.warning("Image save failed: %s", e)
            self.notifications.error("Image not found", "The image could not be located in the document.")
            return False
        finally:
            self.close()
        return True

    def delete(self) -> bool:
        self._require_open()
        try:
            self.target.remove()
        except NodeNotFoundError as e:
            logger.warning("Image delete failed: %s", e)
            self.notifications.error("Image not found", "The image could not be located in the document.")
            return False
        finally:
            self.close()
        self.notifications.success("Image deleted")
        return True

    def _require_open(self) -> None:
        if self.target is None:
            raise RuntimeError("Image dialog is not open.")
