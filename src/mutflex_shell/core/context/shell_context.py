# src/mutflex_shell/core/context/shell_context.py
import logging
from typing import Any, Dict, Optional

from article_editor.controllers.rich_text_editor import RichTextEditor
from article_editor.managers.notification_manager import NotificationManager
from article_editor.managers.upload_manager import ImageUploadManager
from article_editor.model import Notification
from article_editor.services.upload_gateway_service import UploadGatewayService
from mutflex_shell.core.loop_runner import call_on_main_loop
from mutflex_shell.core.managers.draft_manager import DraftManager
from mutflex_shell.model import ArticleDraft

logger = logging.getLogger(__name__)


class ShellContext:
    """
    Manages session variables and the editing session of the shell: the
    article draft (the hosting form) and the editor bound to its content.
    """

    def __init__(self, draft_manager: Optional[DraftManager] = None,
                 uploads: Optional[ImageUploadManager] = None):
        self._vars: Dict[str, str] = {}
        self.prompt_session: Optional[Any] = None
        self.next_prompt_buffer: Optional[str] = None

        self.draft_manager = draft_manager
        self.gateway: Optional[UploadGatewayService] = None
        if uploads is None:
            self.gateway = UploadGatewayService()
            uploads = ImageUploadManager(self.gateway)
        self.uploads = uploads
        self.notifications = NotificationManager(listener=self._print_notification)

        self.draft: ArticleDraft = ArticleDraft()
        self.editor: Optional[RichTextEditor] = None
        self.server_process: Optional[Any] = None

    # --- Editing session ---

    def open_editor(self, html: Optional[str] = None) -> RichTextEditor:
        """Binds a fresh editor to the draft's content (value/on_change)."""
        self.close_editor()
        if html is not None:
            self.draft.content = html
        self.editor = RichTextEditor(
            self.draft.content,
            on_change=self._on_content_change,
            uploads=self.uploads,
            notifications=self.notifications,
        )
        self.export_editor_variables()
        return self.editor

    def close_editor(self) -> None:
        if self.editor is not None:
            call_on_main_loop(self.editor.teardown)
            self.editor = None

    def set_draft(self, draft: ArticleDraft) -> None:
        self.draft = draft
        if self.editor is not None:
            call_on_main_loop(self.editor.controller.apply_external_value, draft.content)
        self.export_draft_variables()

    def _on_content_change(self, html: str) -> None:
        self.draft.content = html
        self.set("article.length", str(len(html)))

    def export_draft_variables(self) -> None:
        """Exposes the draft as @{article.title}, @{article.slug}, ..."""
        self.set("article.title", self.draft.title)
        self.set("article.slug", self.draft.slug)
        self.set("article.length", str(len(self.draft.content)))

    def export_editor_variables(self) -> None:
        if self.editor is None:
            return
        self.set("editor.state", self.editor.state.value)
        self.set("editor.super", str(self.editor.controller.super_article).lower())

    @staticmethod
    def _print_notification(notification: Notification) -> None:
        icon = "❌" if notification.is_error else "✅"
        line = f"{icon} {notification.title}"
        if notification.description:
            line += f": {notification.description}"
        print(line)

    # --- Variables ---

    def set(self, key: str, value: str) -> None:
        """Sets a context variable."""
        self._vars[key] = value

    def get(self, key: str) -> Optional[str]:
        """Retrieves a context variable. Returns None if key does not exist."""
        return self._vars.get(key)

    def __repr__(self) -> str:
        state = self.editor.state.value if self.editor else "closed"
        return f"<ShellContext editor={state} vars_count={len(self._vars)}>"
