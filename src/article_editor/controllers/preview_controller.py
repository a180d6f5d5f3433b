# src/article_editor/controllers/preview_controller.py
import html
import logging
from typing import Dict, Optional

from mutflex_shell.core.managers.config_manager import config_manager
from article_editor.utils.style_utils import LayoutDirection

logger = logging.getLogger(__name__)

# Scripts never run inside either frame; same-origin is kept so the
# visual-edit surface can read the DOM back.
IFRAME_SANDBOX = "allow-same-origin"

PREVIEW_STYLESHEET = """
body { font-family: 'Cairo', 'Tajawal', system-ui, sans-serif; line-height: 1.8; color: #1f2937;
       max-width: 820px; margin: 0 auto; padding: 24px; }
body[contenteditable="true"] { outline: none; min-height: 300px; }
img { max-width: 100%; height: auto; border-radius: 8px; }
figure.image-container { margin-top: 1.5em; margin-bottom: 1.5em; }
figure.image-container figcaption { font-size: 0.875em; color: #6b7280; margin-top: 0.5em; }
blockquote { border-inline-start: 4px solid #e5e7eb; padding-inline-start: 1em; color: #4b5563; }
table { border-collapse: collapse; width: 100%; }
td, th { border: 1px solid #e5e7eb; padding: 8px; }
a { color: #2563eb; text-decoration: underline; }
""".strip()


class PreviewRenderer:
    """Builds the isolated, direction-aware document both source sub-tabs render in."""

    def __init__(self, direction: Optional[LayoutDirection] = None, lang: Optional[str] = None):
        self.direction = direction or LayoutDirection.from_config()
        self.lang = lang or config_manager.get_nested("editor.lang", "ar")

    def render(self, content_html: str, editable: bool = False) -> str:
        """
        Wraps an HTML fragment in a complete document for an iframe `srcdoc`.
        The fragment is inserted verbatim; malformed markup is left to the parser.
        """
        editable_attr = ' contenteditable="true"' if editable else ""
        return (
            "<!DOCTYPE html>"
            f'<html dir="{self.direction.direction}" lang="{html.escape(self.lang, quote=True)}">'
            '<head><meta charset="utf-8">'
            f"<style>{PREVIEW_STYLESHEET}</style></head>"
            f"<body{editable_attr}>{content_html or ''}</body></html>"
        )

    @staticmethod
    def iframe_attributes(srcdoc: str) -> Dict[str, str]:
        return {"sandbox": IFRAME_SANDBOX, "srcdoc": srcdoc}


class PreviewSurface:
    """The read-only `preview` source tab."""

    def __init__(self, renderer: Optional[PreviewRenderer] = None):
        self.renderer = renderer or PreviewRenderer()
        self.srcdoc: Optional[str] = None

    def activate(self, content_html: str) -> str:
        """Re-renders from the latest HtmlSource on every tab activation."""
        self.srcdoc = self.renderer.render(content_html, editable=False)
        logger.debug("Preview rebuilt (%d chars).", len(self.srcdoc))
        return self.srcdoc

    def deactivate(self) -> None:
        self.srcdoc = None

    @property
    def iframe(self) -> Dict[str, str]:
        return self.renderer.iframe_attributes(self.srcdoc or "")
