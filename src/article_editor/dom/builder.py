# src/article_editor/dom/builder.py
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag

from .core import Mark, Node
from .marks import mark_from_tag, sort_marks
from .models import ContentDocument
from .registry import NodeRegistry
from ..utils.style_utils import LayoutDirection, text_align_of

logger = logging.getLogger(__name__)

# Tags whose children are parsed as if they sat directly in the parent.
CONTAINER_TAGS = {
    "html", "body", "main", "article", "section", "div", "header", "footer",
    "aside", "nav", "thead", "tbody", "tfoot", "center", "form",
}
# Tags that never contribute editable content.
SKIPPED_TAGS = {"script", "style", "head", "meta", "link", "title", "noscript", "template", "iframe"}

_WHITESPACE = re.compile(r"\s+")


class DocumentBuilder:
    """
    Builder responsible for parsing raw HTML into a structured ContentDocument.

    Anything the schema has no node for (inline styles, spans, layout divs)
    is flattened away; this is the lossy step the super-article check guards.
    """

    def __init__(self, direction: Optional[LayoutDirection] = None):
        """Initializes the builder and ensures the NodeRegistry is populated."""
        NodeRegistry.discover()
        self.direction = direction or LayoutDirection.from_config()

    def parse(self, html: str) -> ContentDocument:
        """
        Parses an HTML string into a ContentDocument.

        Args:
            html (str): Raw HTML, a fragment or a full page.

        Returns:
            ContentDocument: The document; an empty paragraph for empty input.
        """
        clean_html = (html or "").replace('\ufeff', '').strip()
        soup = BeautifulSoup(clean_html, 'html.parser')
        root = soup.body if soup.body else soup

        blocks = self.parse_blocks(root)
        if not blocks:
            blocks = [Node(type="paragraph", attrs={"textAlign": self.direction.default_text_align})]
        return ContentDocument(root=Node(type="doc", content=blocks))

    # --- Block level ---

    def parse_blocks(self, parent: Tag) -> List[Node]:
        """Parses the children of a tag into block nodes, wrapping loose inline runs in paragraphs."""
        blocks: List[Node] = []
        inline_run: List[Any] = []

        def _flush() -> None:
            if inline_run:
                blocks.extend(self._paragraph_from_run(inline_run))
                inline_run.clear()

        for child in parent.children:
            if isinstance(child, (Comment, Doctype)):
                continue
            if isinstance(child, NavigableString):
                inline_run.append(child)
                continue
            if not isinstance(child, Tag) or child.name in SKIPPED_TAGS:
                continue

            definition = NodeRegistry.get_by_tag(child.name)
            if definition and definition.is_block:
                _flush()
                blocks.extend(_as_list(definition.parser(child, self)))
            elif child.name in CONTAINER_TAGS:
                _flush()
                blocks.extend(self.parse_blocks(child))
            else:
                inline_run.append(child)

        _flush()
        return blocks

    def _paragraph_from_run(self, run: Iterable[Any]) -> List[Node]:
        inline: List[Node] = []
        for item in run:
            inline.extend(self._parse_inline_item(item, []))
        return self.split_textblock("paragraph", {"textAlign": self.direction.default_text_align}, inline)

    def textblock(self, tag: Tag, node_type: str, attrs: Optional[Dict[str, Any]] = None) -> List[Node]:
        """Parses a paragraph-like tag, splitting it around any images found inside."""
        block_attrs = dict(attrs or {})
        block_attrs["textAlign"] = text_align_of(tag.get("style"), self.direction) or self.direction.default_text_align
        return self.split_textblock(node_type, block_attrs, self.parse_inline(tag), keep_empty=True)

    def split_textblock(
            self, node_type: str, attrs: Dict[str, Any], inline: List[Node], keep_empty: bool = False
    ) -> List[Node]:
        """
        Wraps inline nodes into textblocks. Block-level nodes found among
        them (images) end the current textblock and are emitted in between.
        An explicit empty tag (`<p></p>`) survives as an empty textblock when
        `keep_empty` is set; loose whitespace between blocks never does.
        """
        result: List[Node] = []
        segment: List[Node] = []
        had_block = False

        def _emit() -> None:
            content = _trim(segment)
            if content:
                result.append(Node(type=node_type, attrs=dict(attrs), content=content))
            segment.clear()

        for node in inline:
            if node.is_text or node.type == "hardBreak":
                segment.append(node)
            else:
                had_block = True
                _emit()
                result.append(node)
        _emit()

        if keep_empty and not result and not had_block:
            result.append(Node(type=node_type, attrs=dict(attrs)))
        return result

    # --- Inline level ---

    def parse_inline(self, tag: Tag, marks: Optional[List[Mark]] = None) -> List[Node]:
        """Parses the children of a tag into text/hardBreak nodes (and block images)."""
        nodes: List[Node] = []
        for child in tag.children:
            nodes.extend(self._parse_inline_item(child, marks or []))
        return merge_text(nodes)

    def _parse_inline_item(self, item: Any, marks: List[Mark]) -> List[Node]:
        if isinstance(item, (Comment, Doctype)):
            return []
        if isinstance(item, NavigableString):
            text = _WHITESPACE.sub(" ", str(item))
            if not text:
                return []
            return [Node(type="text", text=text, marks=sort_marks(list(marks)))]
        if not isinstance(item, Tag) or item.name in SKIPPED_TAGS:
            return []

        if item.name == "br":
            return [Node(type="hardBreak")]

        definition = NodeRegistry.get_by_tag(item.name)
        if definition and definition.type_name == "image":
            return _as_list(definition.parser(item, self))

        mark = mark_from_tag(item)
        child_marks = list(marks)
        if mark is not None:
            child_marks = [m for m in child_marks if m.type != mark.type] + [mark]
        return self.parse_inline(item, child_marks)


def _as_list(result) -> List[Node]:
    if result is None:
        return []
    if isinstance(result, list):
        return result
    return [result]


def merge_text(nodes: List[Node]) -> List[Node]:
    """Joins adjacent text nodes that carry identical marks."""
    merged: List[Node] = []
    for node in nodes:
        if (node.is_text and merged and merged[-1].is_text
                and merged[-1].marks == node.marks):
            merged[-1] = Node(type="text", text=(merged[-1].text or "") + (node.text or ""),
                              marks=merged[-1].marks)
        else:
            merged.append(node)
    return merged


def _trim(segment: List[Node]) -> List[Node]:
    """Strips leading/trailing whitespace of a textblock and drops empty text nodes."""
    nodes = merge_text(list(segment))
    if nodes and nodes[0].is_text:
        nodes[0] = nodes[0].model_copy(update={"text": (nodes[0].text or "").lstrip()})
    if nodes and nodes[-1].is_text:
        nodes[-1] = nodes[-1].model_copy(update={"text": (nodes[-1].text or "").rstrip()})
    return [n for n in nodes if not (n.is_text and not n.text)]

