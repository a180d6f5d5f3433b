# src/article_editor/dom/serializer.py
import html
import logging
from typing import List, Optional

from .core import Mark, Node
from .marks import close_tag, open_tag, sort_marks
from .models import ContentDocument
from .registry import NodeRegistry
from ..utils.style_utils import LayoutDirection

logger = logging.getLogger(__name__)


class DocumentSerializer:
    """Renders a ContentDocument back into an HTML string."""

    def __init__(self, direction: Optional[LayoutDirection] = None):
        NodeRegistry.discover()
        self.direction = direction or LayoutDirection.from_config()

    def serialize(self, doc: ContentDocument) -> str:
        return self.render_nodes(doc.blocks)

    def render_nodes(self, nodes: List[Node]) -> str:
        return "".join(self.render_node(node) for node in nodes)

    def render_node(self, node: Node) -> str:
        definition = NodeRegistry.get_by_type(node.type)
        if definition is None:
            logger.warning("No renderer for node type '%s'; emitting its text only.", node.type)
            return html.escape(node.text_content, quote=False)
        return definition.renderer(node, self)

    def render_inline(self, nodes: List[Node]) -> str:
        """
        Renders text and hard breaks, sharing the outer marks of neighbouring
        text nodes so `<strong>a<em>b</em></strong>` survives a round trip.
        """
        out: List[str] = []
        open_marks: List[Mark] = []

        for node in nodes:
            wanted = sort_marks(node.marks) if node.is_text else []
            keep = 0
            while keep < len(open_marks) and keep < len(wanted) and open_marks[keep] == wanted[keep]:
                keep += 1
            for mark in reversed(open_marks[keep:]):
                out.append(close_tag(mark))
            open_marks = open_marks[:keep]
            for mark in wanted[keep:]:
                out.append(open_tag(mark))
                open_marks.append(mark)

            if node.is_text:
                out.append(html.escape(node.text or "", quote=False))
            else:
                out.append(self.render_node(node))

        for mark in reversed(open_marks):
            out.append(close_tag(mark))
        return "".join(out)

    def block_style(self, node: Node) -> str:
        """The ` style="text-align: …"` fragment of a textblock, omitted for the default alignment."""
        align = node.attrs.get("textAlign")
        if not align or align == self.direction.default_text_align:
            return ""
        return f' style="text-align: {html.escape(align, quote=True)}"'
