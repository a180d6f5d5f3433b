# src/article_editor/controllers/mode_controller.py
import logging
from typing import Callable, Optional

from article_editor.controllers.image_dialog_controller import ImagePropertiesDialog
from article_editor.controllers.preview_controller import PreviewRenderer, PreviewSurface
from article_editor.controllers.visual_edit_controller import VisualEditSurface
from article_editor.controllers.wysiwyg_controller import StructuredEditor
from article_editor.dom.builder import DocumentBuilder
from article_editor.managers.notification_manager import NotificationManager
from article_editor.managers.upload_manager import ImageUploadManager
from article_editor.model import EditorMode, ModeState, SourceTab
from article_editor.services.super_article_service import SuperArticleReport, analyze
from article_editor.utils.style_utils import LayoutDirection

logger = logging.getLogger(__name__)


class ModeController:
    """
    Owns the current HTML and decides which surface is live.

    Only one surface is ever live. Switching always goes through the
    serialized HTML: leaving WYSIWYG captures the editor's serialization,
    entering it re-parses the HtmlSource buffer. Source tabs rebuild from
    the buffer on every activation.
    """

    def __init__(
            self,
            html: str = "",
            on_change: Optional[Callable[[str], None]] = None,
            uploads: Optional[ImageUploadManager] = None,
            notifications: Optional[NotificationManager] = None,
            direction: Optional[LayoutDirection] = None,
    ):
        self.on_change = on_change
        self.notifications = notifications or NotificationManager()
        direction = direction or LayoutDirection.from_config()
        renderer = PreviewRenderer(direction)

        self.editor = StructuredEditor(
            uploads=uploads,
            notifications=self.notifications,
            on_update=self._on_editor_change,
            builder=DocumentBuilder(direction),
        )
        self.visual = VisualEditSurface(
            on_sync=self._on_visual_sync,
            uploads=uploads,
            notifications=self.notifications,
            renderer=renderer,
        )
        self.preview = PreviewSurface(renderer)
        self.dialog = ImagePropertiesDialog(self.notifications, uploads)

        self.state: ModeState = ModeState.WYSIWYG
        self.report: SuperArticleReport = SuperArticleReport()
        self._html: str = ""
        self._pending_from: Optional[ModeState] = None
        self.load(html)

    # =========================================================================
    #  STATE
    # =========================================================================

    @property
    def mode(self) -> EditorMode:
        if self.state is ModeState.SWITCH_WARNING_PENDING:
            return self._pending_from.mode
        return self.state.mode

    @property
    def tab(self) -> Optional[SourceTab]:
        if self.state is ModeState.SWITCH_WARNING_PENDING:
            return self._pending_from.tab
        return self.state.tab

    @property
    def super_article(self) -> bool:
        return self.report.is_super_article

    @property
    def warning_pending(self) -> bool:
        return self.state is ModeState.SWITCH_WARNING_PENDING

    @property
    def current_html(self) -> str:
        """The single authoritative value handed to the hosting form."""
        return self._html

    def load(self, html: str) -> ModeState:
        """
        Loads a fresh document. The super-article check runs here and only
        here; a flagged document opens in the visual source tab.
        """
        html = html or ""
        self._leave_current_surface()
        self._pending_from = None
        self._html = html
        self.report = analyze(html)

        if self.report.is_super_article:
            logger.info("Advanced styling detected (%s); opening in visual source mode.",
                        ", ".join(self.report.matched))
            self.visual.activate(html)
            self.state = ModeState.SOURCE_VISUAL
        else:
            self.editor.set_content(html)
            self.editor.active = True
            self.state = ModeState.WYSIWYG
        return self.state

    # =========================================================================
    #  TRANSITIONS
    # =========================================================================

    def switch_to_source(self, tab: SourceTab = SourceTab.EDIT) -> ModeState:
        tab = SourceTab(tab)
        if self.state is ModeState.SWITCH_WARNING_PENDING:
            self._pending_from = None

        if self.state is ModeState.WYSIWYG:
            self._set_html(self.editor.get_html())

        self._leave_current_surface()
        self._enter_tab(tab)
        return self.state

    def request_wysiwyg(self) -> ModeState:
        """
        Leaves source mode. A super-article waits in SWITCH_WARNING_PENDING
        for confirmation and the document is left untouched until then.
        """
        if self.state in (ModeState.WYSIWYG, ModeState.SWITCH_WARNING_PENDING):
            return self.state

        if self.super_article:
            self._pending_from = self.state
            self.state = ModeState.SWITCH_WARNING_PENDING
            logger.info("Switch to WYSIWYG needs confirmation: advanced formatting would be lost.")
            return self.state

        self._enter_wysiwyg()
        return self.state

    def confirm_switch(self) -> ModeState:
        """'Continue and lose formatting'."""
        if self.state is not ModeState.SWITCH_WARNING_PENDING:
            return self.state
        self._pending_from = None
        self._enter_wysiwyg()
        # The document is now whatever the structured model kept of it.
        self.report = SuperArticleReport(threshold=self.report.threshold)
        self._set_html(self.editor.get_html())
        return self.state

    def cancel_switch(self) -> ModeState:
        if self.state is not ModeState.SWITCH_WARNING_PENDING:
            return self.state
        self.state = self._pending_from
        self._pending_from = None
        return self.state

    def apply_external_value(self, html: str) -> bool:
        """
        Adopts a value supplied by the hosting form. Only honoured while the
        WYSIWYG surface is live and the value differs from its serialization.
        """
        html = html or ""
        if self.state is not ModeState.WYSIWYG:
            logger.debug("External value ignored while in %s.", self.state.value)
            return False
        if html == self.editor.get_html():
            return False
        logger.info("Adopting externally supplied content (%d chars).", len(html))
        self.load(html)
        return True

    def edit_source(self, html: str) -> None:
        """Raw textarea input in the `edit` tab."""
        if self.state is not ModeState.SOURCE_EDIT:
            raise RuntimeError(f"Raw source can only be edited in the edit tab (now {self.state.value}).")
        self._set_html(html or "")

    def teardown(self) -> None:
        self.dialog.close()
        self.visual.teardown()
        self.preview.deactivate()
        self.editor.destroy()
        logger.debug("Editor session torn down.")

    # --- internals ---

    def _enter_tab(self, tab: SourceTab) -> None:
        if tab is SourceTab.VISUAL:
            self.visual.activate(self._html)
        elif tab is SourceTab.PREVIEW:
            self.preview.activate(self._html)
        self.state = ModeState.for_tab(tab)

    def _enter_wysiwyg(self) -> None:
        self._leave_current_surface()
        self.editor.set_content(self._html)
        self.editor.active = True
        self.state = ModeState.WYSIWYG

    def _leave_current_surface(self) -> None:
        self.dialog.close()
        self.editor.active = False
        if self.visual.active:
            # Leaving the tab is not a teardown: pending edits still land in the buffer.
            if self.visual.sync_pending:
                self.visual.sync_now()
            self.visual.teardown()
        if self.preview.srcdoc is not None:
            self.preview.deactivate()

    def _on_editor_change(self, html: str) -> None:
        if self.state is not ModeState.WYSIWYG:
            logger.debug("Dropped update from the structured editor while in %s.", self.state.value)
            return
        self._set_html(html)

    def _on_visual_sync(self, html: str) -> None:
        if not self.visual.active:
            return
        self._set_html(html)

    def _set_html(self, html: str) -> None:
        if html == self._html:
            return
        self._html = html
        if self.on_change:
            self.on_change(html)
