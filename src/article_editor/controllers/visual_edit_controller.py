# src/article_editor/controllers/visual_edit_controller.py
import logging
from typing import Callable, List, Optional

from bs4 import Tag

from mutflex_shell.core.managers.config_manager import config_manager
from article_editor.controllers.preview_controller import PreviewRenderer
from article_editor.controllers.wysiwyg_controller import first_image_src
from article_editor.dom.live_document import LiveDocumentHandle
from article_editor.dom.nodes.image import FIGURE_CLASS
from article_editor.errors import (
    ImageValidationError,
    NodeNotFoundError,
    UploadBusyError,
    UploadError,
)
from article_editor.managers.notification_manager import NotificationManager
from article_editor.managers.upload_manager import ImageUploadManager
from article_editor.model import ClipboardPayload, ImageAttributes, ImageFile
from article_editor.services.image_validation_service import ImageValidationService
from article_editor.utils.debounce import Debouncer
from article_editor.utils.style_utils import format_style, parse_style

logger = logging.getLogger(__name__)


class VisualEditSurface:
    """
    The `visual` source tab: the rendered HtmlSource made content-editable.

    Typing is synced back through a debounce; discrete actions (image paste,
    drop, properties save/delete) sync immediately.
    """

    def __init__(
            self,
            on_sync: Callable[[str], None],
            uploads: Optional[ImageUploadManager] = None,
            notifications: Optional[NotificationManager] = None,
            renderer: Optional[PreviewRenderer] = None,
            debounce_ms: Optional[int] = None,
            flush_on_teardown: Optional[bool] = None,
    ):
        self.on_sync = on_sync
        self.uploads = uploads
        self.notifications = notifications or NotificationManager()
        self.renderer = renderer or PreviewRenderer()

        if debounce_ms is None:
            debounce_ms = config_manager.get_nested("editor.visual_edit.debounce_ms", 300)
        if flush_on_teardown is None:
            flush_on_teardown = config_manager.get_nested("editor.visual_edit.flush_on_teardown", False)
        self.flush_on_teardown = bool(flush_on_teardown)

        self._debouncer = Debouncer(int(debounce_ms) / 1000.0, self._sync)
        self.document: Optional[LiveDocumentHandle] = None
        self.srcdoc: Optional[str] = None
        self.selection_anchor: Optional[Tag] = None

    @property
    def active(self) -> bool:
        return self.document is not None

    @property
    def sync_pending(self) -> bool:
        return self._debouncer.pending

    @property
    def direction(self):
        return self.renderer.direction

    def activate(self, content_html: str) -> str:
        """Rebuilds the editable document from the latest HtmlSource."""
        self._debouncer.cancel()
        self.srcdoc = self.renderer.render(content_html, editable=True)
        self.document = LiveDocumentHandle(self.srcdoc)
        self.selection_anchor = None
        logger.debug("Visual edit surface activated (%d chars).", len(content_html or ""))
        return self.srcdoc

    def teardown(self) -> None:
        """
        Drops the live document. A pending sync is cleared, not fired, unless
        `editor.visual_edit.flush_on_teardown` is set.
        """
        if self._debouncer.pending:
            if self.flush_on_teardown:
                logger.debug("Flushing pending visual-edit sync on teardown.")
                self._debouncer.flush()
            else:
                logger.debug("Discarding pending visual-edit sync on teardown.")
                self._debouncer.cancel()
        self.document = None
        self.srcdoc = None
        self.selection_anchor = None

    # --- Typing ---

    def handle_input(self, markup: Optional[str] = None) -> None:
        """
        An input event. `markup`, when given, is the body content after the
        user's edit. Must be called from inside the running event loop.
        """
        self._require_document()
        if markup is not None:
            self.document.replace_body(markup)
            self.selection_anchor = None
        self._debouncer.trigger()

    def handle_keyup(self) -> None:
        self._require_document()
        self._debouncer.trigger()

    def set_selection(self, anchor: Optional[Tag]) -> None:
        """Moves the caret after `anchor`; None puts it at the end of the body."""
        if anchor is not None and not self.document.contains(anchor):
            raise NodeNotFoundError("Selection anchor is not part of the visual document.")
        self.selection_anchor = anchor

    def sync_now(self) -> str:
        """Immediate, non-debounced sync."""
        self._debouncer.cancel()
        return self._sync()

    def _sync(self) -> str:
        if self.document is None:
            return ""
        markup = self.document.serialize()
        self.on_sync(markup)
        return markup

    def _require_document(self) -> None:
        if self.document is None:
            raise RuntimeError("Visual edit surface is not active.")

    # --- Images ---

    async def handle_paste(self, payload: ClipboardPayload) -> bool:
        """
        Same rules as the WYSIWYG surface: image files and data-URI `<img>`
        markup are uploaded, an absolute http(s) `<img>` is inserted as is.
        """
        images = [f for f in payload.files if (f.content_type or "").lower().startswith("image/")]
        if images:
            await self._upload_and_insert(images[0])
            return True

        src = first_image_src(payload.html) if payload.html else None
        if src is None:
            return False
        if src.lower().startswith("data:"):
            file = ImageFile.from_data_uri(src)
            if file is None:
                logger.debug("Ignoring pasted image with a malformed data URI.")
                return False
            await self._upload_and_insert(file)
            return True
        if ImageValidationService.is_absolute_http_url(src):
            self.insert_image(src)
            return True
        logger.debug("Ignoring pasted image with unsupported source: %.60s", src)
        return False

    async def handle_drop(self, files: List[ImageFile]) -> bool:
        if not files:
            return False
        await self._upload_and_insert(files[0])
        return True

    async def _upload_and_insert(self, file: ImageFile) -> Optional[Tag]:
        if self.uploads is None:
            self.notifications.error("Image upload is not available.")
            return None
        try:
            url = await self.uploads.upload(file)
        except UploadBusyError as e:
            self.notifications.error("Please wait", str(e))
            return None
        except ImageValidationError as e:
            self.notifications.error("Invalid image", str(e))
            return None
        except UploadError as e:
            self.notifications.error("Image upload failed", str(e))
            return None

        if self.document is None:
            logger.info("Visual surface closed before upload of '%s' finished; result ignored.", file.filename)
            return None
        img = self.insert_image(url)
        self.notifications.success("Image uploaded")
        return img

    def insert_image(self, src: str) -> Tag:
        """Creates an `<img>` at the selection (or the end of the body) and syncs."""
        self._require_document()
        img = self.document.create_element("img", {
            "src": src,
            "alt": "",
            "loading": "lazy",
            "decoding": "async",
            "style": "width: 100%",
        })
        if self.selection_anchor is not None and self.document.contains(self.selection_anchor):
            self.document.insert_after(self.selection_anchor, img)
        else:
            self.document.append(img)
        self.selection_anchor = img
        self.sync_now()
        return img

    def click(self, element: Tag) -> Optional[Tag]:
        """
        Resolves a click to an image element, or None when the click should
        fall through to default behaviour.
        """
        if self.document is None or element is None:
            return None
        if element.name == "img" and self.document.contains(element):
            return element
        return None

    def find_image(self, src: str) -> Optional[Tag]:
        """The first `<img>` whose src matches, e.g. to reopen an image by URL."""
        if self.document is None or not src:
            return None
        src = src.strip()
        return self.document.query_one(lambda tag: tag.name == "img" and (tag.get("src") or "").strip() == src)

    def image_attributes(self, img: Tag) -> ImageAttributes:
        self._require_image(img)
        figure = self._enclosing_figure(img)
        style = parse_style(img.get("style"))
        align_source = figure.get("style") if figure is not None else None
        caption_tag = figure.find("figcaption") if figure is not None else None
        return ImageAttributes(
            src=img.get("src") or "",
            alt=img.get("alt") or "",
            title=img.get("title") or None,
            width=style.get("width") or img.get("width") or "100%",
            alignment=self.direction.alignment_from_style(align_source),
            loading=img.get("loading") or "lazy",
            decoding=img.get("decoding") or "async",
            caption=caption_tag.get_text(strip=True) if caption_tag is not None else "",
        )

    def apply_image_attributes(self, img: Tag, attributes: ImageAttributes) -> None:
        """Patches the `<img>` element (and its figure) in place, then syncs."""
        self._require_image(img)
        img["src"] = attributes.src
        img["alt"] = attributes.alt or ""
        style = parse_style(img.get("style"))
        style["width"] = attributes.width
        img["style"] = format_style(style)

        figure = self._enclosing_figure(img)
        if figure is None and (attributes.caption or attributes.alignment != "center"):
            figure = self.document.create_element("figure", {"class": FIGURE_CLASS})
            img.wrap(figure)

        if figure is not None:
            figure_style = parse_style(figure.get("style"))
            figure_style.update(self.direction.figure_style(attributes.alignment))
            figure["style"] = format_style(figure_style)

            caption_tag = figure.find("figcaption")
            if attributes.caption:
                if caption_tag is None:
                    caption_tag = self.document.create_element("figcaption")
                    figure.append(caption_tag)
                caption_tag.string = attributes.caption
            elif caption_tag is not None:
                caption_tag.decompose()

        self.sync_now()

    def remove_image(self, img: Tag) -> None:
        """Removes the image, together with its figure wrapper, and syncs."""
        self._require_image(img)
        figure = self._enclosing_figure(img)
        if figure is not None and len(figure.find_all("img")) == 1:
            figure.decompose()
        else:
            img.decompose()
        if self.selection_anchor is not None and not self.document.contains(self.selection_anchor):
            self.selection_anchor = None
        self.sync_now()

    def contains(self, img: Optional[Tag]) -> bool:
        return self.document is not None and img is not None and img.name == "img" \
            and self.document.contains(img)

    def _require_image(self, img: Tag) -> None:
        if not self.contains(img):
            raise NodeNotFoundError("Image is no longer part of the visual document.")

    @staticmethod
    def _enclosing_figure(img: Tag) -> Optional[Tag]:
        parent = img.parent
        if parent is not None and parent.name == "figure":
            return parent
        return None
