# src/article_editor/controllers/rich_text_editor.py
import logging
from typing import Callable, List, Optional

from bs4 import Tag

from article_editor.controllers.image_dialog_controller import (
    ImagePropertiesDialog,
    VisualImageTarget,
    WysiwygImageTarget,
)
from article_editor.controllers.mode_controller import ModeController
from article_editor.dom.core import NodePath
from article_editor.managers.notification_manager import NotificationManager
from article_editor.managers.upload_manager import ImageUploadManager
from article_editor.model import ClipboardPayload, ImageAttributes, ImageFile, ModeState

logger = logging.getLogger(__name__)


class RichTextEditor:
    """
    The editor as the hosting form sees it: a `value` / `on_change` pair.

    Pointer and clipboard events are routed to whichever surface is live.
    """

    def __init__(
            self,
            value: str = "",
            on_change: Optional[Callable[[str], None]] = None,
            uploads: Optional[ImageUploadManager] = None,
            notifications: Optional[NotificationManager] = None,
    ):
        self.notifications = notifications or NotificationManager()
        self.uploads = uploads
        self.controller = ModeController(
            value,
            on_change=on_change,
            uploads=uploads,
            notifications=self.notifications,
        )

    @property
    def value(self) -> str:
        return self.controller.current_html

    @value.setter
    def value(self, html: str) -> None:
        self.controller.apply_external_value(html)

    @property
    def state(self) -> ModeState:
        return self.controller.state

    @property
    def editor(self):
        return self.controller.editor

    @property
    def visual(self):
        return self.controller.visual

    @property
    def dialog(self) -> ImagePropertiesDialog:
        return self.controller.dialog

    # --- Clipboard / drop / toolbar ---

    async def paste(self, payload: ClipboardPayload) -> bool:
        """
        Returns True when the paste was consumed. An unhandled paste in the
        WYSIWYG surface falls back to inserting the html or text.
        """
        state = self.controller.state
        if state is ModeState.WYSIWYG:
            if await self.editor.handle_paste(payload):
                return True
            if payload.html:
                return self.editor.insert_content(payload.html)
            if payload.text:
                return self.editor.insert_text(payload.text)
            return False
        if state is ModeState.SOURCE_VISUAL:
            return await self.visual.handle_paste(payload)
        return False

    async def drop(self, files: List[ImageFile], moved: bool = False) -> bool:
        state = self.controller.state
        if state is ModeState.WYSIWYG:
            return await self.editor.handle_drop(files, moved=moved)
        if state is ModeState.SOURCE_VISUAL and not moved:
            return await self.visual.handle_drop(files)
        return False

    async def insert_image_file(self, file: ImageFile) -> bool:
        """The toolbar image button."""
        if self.controller.state is not ModeState.WYSIWYG:
            return False
        return await self.editor.insert_image_from_file(file)

    # --- Image clicks ---

    def click_image(self, path: Optional[NodePath] = None, src: Optional[str] = None) -> Optional[ImageAttributes]:
        """A click on a rendered image in the WYSIWYG surface."""
        if self.controller.state is not ModeState.WYSIWYG:
            return None
        resolved = self.editor.resolve_image(path, src)
        if resolved is None:
            logger.debug("Click did not resolve to an image (path=%s, src=%s).", path, src)
            return None
        return self.dialog.open(WysiwygImageTarget(self.editor, resolved))

    def click_visual_element(self, element: Tag) -> Optional[ImageAttributes]:
        """A click inside the visual-edit document."""
        if self.controller.state is not ModeState.SOURCE_VISUAL:
            return None
        img = self.visual.click(element)
        if img is None:
            return None
        return self.dialog.open(VisualImageTarget(self.visual, img))

    def teardown(self) -> None:
        self.controller.teardown()
