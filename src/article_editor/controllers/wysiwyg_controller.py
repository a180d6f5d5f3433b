# src/article_editor/controllers/wysiwyg_controller.py
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup
from pydantic import BaseModel

from mutflex_shell.core.managers.config_manager import config_manager
from article_editor.dom.builder import DocumentBuilder, merge_text
from article_editor.dom.core import Mark, Node, NodePath
from article_editor.dom.marks import LINK_DEFAULTS, add_mark, remove_mark
from article_editor.dom.models import ContentDocument
from article_editor.dom.nodes.image import ImageNode, build_image
from article_editor.dom.serializer import DocumentSerializer
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

logger = logging.getLogger(__name__)

TEXT_ALIGNMENTS = ("left", "center", "right", "justify")
LIST_TYPES = ("bulletList", "orderedList")


class Selection(BaseModel):
    """
    A text range inside one textblock, or a node selection (an image).
    Offsets count characters; a hard break counts as one.
    """
    path: NodePath
    start: int = 0
    end: int = 0
    kind: str = "text"  # 'text' | 'node'

    @property
    def is_caret(self) -> bool:
        return self.start == self.end


class StructuredEditor:
    """
    The WYSIWYG surface: owns the ContentDocument while it is the live surface.

    Every command runs as a transaction on a copy of the document, is
    recorded for undo, and ends with the new serialization being pushed to
    `on_update`.
    """

    def __init__(
            self,
            html: str = "",
            uploads: Optional[ImageUploadManager] = None,
            notifications: Optional[NotificationManager] = None,
            on_update: Optional[Callable[[str], None]] = None,
            builder: Optional[DocumentBuilder] = None,
            serializer: Optional[DocumentSerializer] = None,
    ):
        self.builder = builder or DocumentBuilder()
        self.serializer = serializer or DocumentSerializer(self.builder.direction)
        self.uploads = uploads
        self.notifications = notifications or NotificationManager()
        self.on_update = on_update
        self.history_depth = int(config_manager.get_nested("editor.history_depth", 100))

        self.doc: ContentDocument = self.builder.parse(html)
        self.selection: Optional[Selection] = None
        self._undo: List[Tuple[ContentDocument, Optional[Selection]]] = []
        self._redo: List[Tuple[ContentDocument, Optional[Selection]]] = []
        self._destroyed = False
        # False while another surface owns the HTML; late uploads are dropped then.
        self.active = True
        self._select_end()

    # =========================================================================
    #  CONTENT
    # =========================================================================

    def get_html(self) -> str:
        return self.serializer.serialize(self.doc)

    def set_content(self, html: str, emit: bool = False) -> None:
        """Replaces the whole document. History starts over."""
        self.doc = self.builder.parse(html)
        self._undo.clear()
        self._redo.clear()
        self._select_end()
        logger.debug("Document reloaded (%d blocks).", len(self.doc.blocks))
        if emit:
            self._emit()

    def destroy(self) -> None:
        """Marks the editor as gone; late upload results are ignored from now on."""
        self._destroyed = True
        self.on_update = None

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    # =========================================================================
    #  SELECTION
    # =========================================================================

    def select(self, path: NodePath, start: Optional[int] = None, end: Optional[int] = None) -> Selection:
        """Places the selection inside the textblock at `path` (caret at its end by default)."""
        path = tuple(path)
        node = self.doc.node_at(path)
        if node is None:
            raise IndexError(f"No node at path {path}")
        if node.type == "image":
            self.selection = Selection(path=path, kind="node")
            return self.selection
        if not node.is_textblock:
            found = self._first_textblock(node, path)
            if found is None:
                raise IndexError(f"No textblock inside node at {path}")
            path, node = found

        length = _inline_length(node.content)
        start = length if start is None else max(0, min(start, length))
        end = start if end is None else max(start, min(end, length))
        self.selection = Selection(path=path, start=start, end=end)
        return self.selection

    def select_block(self, index: int, start: Optional[int] = None, end: Optional[int] = None) -> Selection:
        """Selects inside the n-th top-level block."""
        return self.select((index,), start, end)

    def _select_end(self) -> None:
        last = None
        for path, node in self.doc.walk():
            if node.is_textblock:
                last = (path, node)
        if last is None:
            self.selection = None
        else:
            path, node = last
            length = _inline_length(node.content)
            self.selection = Selection(path=path, start=length, end=length)

    def _first_textblock(self, node: Node, base: NodePath) -> Optional[Tuple[NodePath, Node]]:
        for index, child in enumerate(node.content):
            if child.is_textblock:
                return base + (index,), child
            found = self._first_textblock(child, base + (index,))
            if found:
                return found
        return None

    def _text_selection(self) -> Optional[Selection]:
        if self.selection is None or self.selection.kind != "text":
            return None
        node = self.doc.node_at(self.selection.path)
        if node is None or not node.is_textblock:
            return None
        return self.selection

    # =========================================================================
    #  TRANSACTIONS & HISTORY
    # =========================================================================

    def _transaction(self, mutate: Callable[[ContentDocument], Optional[Selection]]) -> bool:
        """
        Runs `mutate` against a copy of the document. The copy only replaces
        the live document when `mutate` returns without raising.
        """
        draft = self.doc.copy_deep()
        new_selection = mutate(draft)
        self._undo.append((self.doc, self.selection))
        del self._undo[:-self.history_depth]
        self._redo.clear()
        self.doc = draft
        self.selection = new_selection
        self._emit()
        return True

    def _emit(self) -> None:
        if self.on_update:
            self.on_update(self.get_html())

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append((self.doc, self.selection))
        self.doc, self.selection = self._undo.pop()
        self._emit()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append((self.doc, self.selection))
        self.doc, self.selection = self._redo.pop()
        self._emit()
        return True

    # =========================================================================
    #  TEXT & MARKS
    # =========================================================================

    def insert_text(self, text: str) -> bool:
        """Types `text` at the caret, replacing a selected range."""
        sel = self._text_selection()
        if sel is None or not text:
            return False

        def _mutate(doc: ContentDocument) -> Selection:
            block = doc.node_at(sel.path)
            left, rest = split_inline(block.content, sel.start)
            _, right = split_inline(rest, sel.end - sel.start)
            marks = left[-1].marks if left and left[-1].is_text else []
            block.content = merge_text(left + [Node(type="text", text=text, marks=list(marks))] + right)
            caret = sel.start + len(text)
            return Selection(path=sel.path, start=caret, end=caret)

        return self._transaction(_mutate)

    def toggle_mark(self, mark_type: str) -> bool:
        return self._apply_mark(mark_type, mode="toggle")

    def set_link(self, href: str) -> bool:
        href = (href or "").strip()
        if not href:
            return self.unset_link()
        return self._apply_mark("link", mode="add", attrs={"href": href, **LINK_DEFAULTS})

    def unset_link(self) -> bool:
        return self._apply_mark("link", mode="remove")

    def is_active(self, mark_type: str) -> bool:
        sel = self._text_selection()
        if sel is None:
            return False
        block = self.doc.node_at(sel.path)
        start, end = _effective_range(sel, block)
        _, rest = split_inline(block.content, start)
        middle, _ = split_inline(rest, end - start)
        texts = [n for n in middle if n.is_text]
        return bool(texts) and all(n.has_mark(mark_type) for n in texts)

    def _apply_mark(self, mark_type: str, mode: str, attrs: Optional[dict] = None) -> bool:
        sel = self._text_selection()
        if sel is None:
            return False
        block = self.doc.node_at(sel.path)
        start, end = _effective_range(sel, block)
        if start == end:
            return False

        def _mutate(doc: ContentDocument) -> Selection:
            target = doc.node_at(sel.path)
            left, rest = split_inline(target.content, start)
            middle, right = split_inline(rest, end - start)
            texts = [n for n in middle if n.is_text]
            remove = mode == "remove" or (mode == "toggle" and texts and all(n.has_mark(mark_type) for n in texts))
            updated = []
            for node in middle:
                if not node.is_text:
                    updated.append(node)
                elif remove:
                    updated.append(node.model_copy(update={"marks": remove_mark(node.marks, mark_type)}))
                else:
                    updated.append(node.model_copy(update={"marks": add_mark(node.marks, Mark(type=mark_type, attrs=attrs or {}))}))
            target.content = merge_text(left + updated + right)
            return sel

        return self._transaction(_mutate)

    # =========================================================================
    #  BLOCK COMMANDS
    # =========================================================================

    def toggle_heading(self, level: int) -> bool:
        """Turns the current block into a heading, or back into a paragraph if it already is one of `level`."""
        sel = self._text_selection()
        if sel is None or level not in (1, 2, 3):
            return False
        block = self.doc.node_at(sel.path)
        if block.type == "heading" and int(block.attrs.get("level", 1)) == level:
            return self.set_paragraph()
        return self._retype_block(sel, "heading", {"level": level})

    def set_paragraph(self) -> bool:
        sel = self._text_selection()
        if sel is None:
            return False
        return self._retype_block(sel, "paragraph", {})

    def _retype_block(self, sel: Selection, node_type: str, extra_attrs: dict) -> bool:
        def _mutate(doc: ContentDocument) -> Selection:
            block = doc.node_at(sel.path)
            attrs = {"textAlign": block.attrs.get("textAlign", self.builder.direction.default_text_align)}
            attrs.update(extra_attrs)
            doc.replace_at(sel.path, [Node(type=node_type, attrs=attrs, content=block.content)])
            return sel

        return self._transaction(_mutate)

    def set_text_align(self, alignment: str) -> bool:
        sel = self._text_selection()
        if sel is None or alignment not in TEXT_ALIGNMENTS:
            return False
        block = self.doc.node_at(sel.path)
        if block.type not in ("paragraph", "heading"):
            return False

        def _mutate(doc: ContentDocument) -> Selection:
            doc.node_at(sel.path).attrs["textAlign"] = alignment
            return sel

        return self._transaction(_mutate)

    def toggle_bullet_list(self) -> bool:
        return self._toggle_list("bulletList")

    def toggle_ordered_list(self) -> bool:
        return self._toggle_list("orderedList")

    def _toggle_list(self, list_type: str) -> bool:
        sel = self._text_selection()
        if sel is None:
            return False
        path = sel.path
        item = self.doc.node_at(path[:-1]) if len(path) > 1 else None
        parent_list = self.doc.node_at(path[:-2]) if len(path) > 2 else None
        inside_list = item is not None and item.type == "listItem" and parent_list is not None \
            and parent_list.type in LIST_TYPES

        def _mutate(doc: ContentDocument) -> Selection:
            block = doc.node_at(path)
            if inside_list:
                list_node = doc.node_at(path[:-2])
                if list_node.type != list_type:
                    list_node.type = list_type
                    list_node.attrs = {}
                else:
                    item_index = path[-2]
                    before = list_node.content[:item_index]
                    lifted = list_node.content[item_index].content
                    after = list_node.content[item_index + 1:]
                    replacement = []
                    if before:
                        replacement.append(Node(type=list_type, attrs=dict(list_node.attrs), content=before))
                    replacement.extend(lifted)
                    if after:
                        replacement.append(Node(type=list_type, attrs=dict(list_node.attrs), content=after))
                    doc.replace_at(path[:-2], replacement)
            else:
                wrapped = Node(type=list_type, content=[Node(type="listItem", content=[block])])
                doc.replace_at(path, [wrapped])
            return _relocate(doc, block, sel)

        return self._transaction(_mutate)

    def toggle_blockquote(self) -> bool:
        sel = self._text_selection()
        if sel is None:
            return False
        path = sel.path
        parent = self.doc.node_at(path[:-1]) if len(path) > 1 else None
        inside_quote = parent is not None and parent.type == "blockquote"

        def _mutate(doc: ContentDocument) -> Selection:
            block = doc.node_at(path)
            if inside_quote:
                quote = doc.node_at(path[:-1])
                doc.replace_at(path[:-1], list(quote.content))
            else:
                doc.replace_at(path, [Node(type="blockquote", content=[block])])
            return _relocate(doc, block, sel)

        return self._transaction(_mutate)

    def insert_content(self, html: str) -> bool:
        """Default paste: the parsed blocks go in after the current block."""
        blocks = self.builder.parse(html).blocks
        blocks = [b for b in blocks if not (b.is_textblock and not b.content)]
        if not blocks:
            return False
        anchor, replace = self._insertion_path()

        def _mutate(doc: ContentDocument) -> Optional[Selection]:
            if replace:
                doc.replace_at(anchor, blocks)
            else:
                doc.insert_at(anchor, blocks)
            last = blocks[-1]
            return _relocate(doc, last, None) if last.is_textblock else Selection(
                path=anchor[:-1] + (anchor[-1] + len(blocks) - 1,), kind="node")

        return self._transaction(_mutate)

    def _insertion_path(self) -> Tuple[NodePath, bool]:
        """Where pasted blocks go; an empty current textblock is replaced."""
        sel = self.selection
        if sel is None or self.doc.node_at(sel.path) is None:
            return (len(self.doc.blocks),), False
        node = self.doc.node_at(sel.path)
        if node.is_textblock and not node.content:
            return sel.path, True
        return sel.path[:-1] + (sel.path[-1] + 1,), False

    # =========================================================================
    #  IMAGES
    # =========================================================================

    def insert_image(self, src: str, **attributes) -> NodePath:
        """
        Inserts an image node at the selection with the default attributes
        `{alt: '', width: '100%', alignment: 'center'}`. A caret inside text
        splits the textblock; an empty textblock is replaced.

        Returns:
            NodePath: the path of the new image node.
        """
        image = build_image(src, **attributes)
        sel = self.selection
        result: dict = {}

        def _mutate(doc: ContentDocument) -> Selection:
            if sel is None or doc.node_at(sel.path) is None:
                path = (len(doc.blocks),)
                doc.insert_at(path, [image])
            elif sel.kind == "node":
                path = sel.path[:-1] + (sel.path[-1] + 1,)
                doc.insert_at(path, [image])
            else:
                block = doc.node_at(sel.path)
                length = _inline_length(block.content)
                if not block.content:
                    path = sel.path
                    doc.replace_at(path, [image])
                elif sel.end >= length:
                    path = sel.path[:-1] + (sel.path[-1] + 1,)
                    doc.insert_at(path, [image])
                elif sel.start <= 0:
                    path = sel.path
                    doc.insert_at(path, [image])
                else:
                    left, rest = split_inline(block.content, sel.start)
                    _, right = split_inline(rest, sel.end - sel.start)
                    head = Node(type=block.type, attrs=dict(block.attrs), content=merge_text(left))
                    tail = Node(type=block.type, attrs=dict(block.attrs), content=merge_text(right))
                    doc.replace_at(sel.path, [head, image, tail])
                    path = sel.path[:-1] + (sel.path[-1] + 1,)
            result["path"] = path
            return Selection(path=path, kind="node")

        self._transaction(_mutate)
        logger.info("Image inserted at %s: %s", result["path"], src)
        return result["path"]

    def image_paths(self) -> List[NodePath]:
        return [path for path, node in self.doc.walk() if node.type == "image"]

    def resolve_image(self, path: Optional[NodePath] = None, src: Optional[str] = None) -> Optional[NodePath]:
        """
        Resolves a click target to the image node that owns it: first the
        target and its ancestors, then a document scan matching `src`.
        """
        if path is not None:
            candidate = tuple(path)
            while candidate:
                node = self.doc.node_at(candidate)
                if node is not None and node.type == "image":
                    return candidate
                candidate = candidate[:-1]
        if src:
            found = self.doc.find(lambda n: n.type == "image" and n.attrs.get("src") == src)
            if found:
                return found[0]
        return None

    def image_attributes(self, path: NodePath) -> ImageAttributes:
        node = self._image_at(path)
        return ImageNode(attrs=dict(node.attrs)).to_attributes()

    def update_image(self, path: NodePath, attributes: ImageAttributes) -> None:
        """Atomically replaces the attributes of the image at `path`."""
        path = tuple(path)
        self._image_at(path)

        def _mutate(doc: ContentDocument) -> Optional[Selection]:
            doc.replace_at(path, [ImageNode.from_attributes(attributes)])
            return self.selection

        self._transaction(_mutate)

    def delete_image(self, path: NodePath) -> None:
        """Atomically removes the image at `path` and nothing else."""
        path = tuple(path)
        self._image_at(path)

        def _mutate(doc: ContentDocument) -> Optional[Selection]:
            doc.remove_at(path)
            return None

        self._transaction(_mutate)
        self._select_end()

    def _image_at(self, path: NodePath) -> Node:
        node = self.doc.node_at(tuple(path))
        if node is None or node.type != "image":
            raise NodeNotFoundError(f"No image at {tuple(path)}")
        return node

    # --- Upload driven insertion ---

    async def insert_image_from_file(self, file: ImageFile) -> bool:
        """Toolbar action: upload a picked file and insert it."""
        return await self._upload_and_insert(file)

    async def handle_paste(self, payload: ClipboardPayload) -> bool:
        """
        Intercepts image pastes. Returns True when the event was consumed;
        False lets the default paste behaviour run.
        """
        if payload.files:
            images = [f for f in payload.files if (f.content_type or "").lower().startswith("image/")]
            await self._upload_and_insert(images[0] if images else payload.files[0])
            return True

        if payload.html:
            src = first_image_src(payload.html)
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

    async def handle_drop(self, files: List[ImageFile], moved: bool = False) -> bool:
        if moved or not files:
            return False
        await self._upload_and_insert(files[0])
        return True

    async def _upload_and_insert(self, file: ImageFile) -> bool:
        if self.uploads is None:
            self.notifications.error("Image upload is not available.")
            return False
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

        if self._destroyed or not self.active:
            logger.info("Editor closed or inactive before upload of '%s' finished; result ignored.",
                        file.filename)
            return False
        self.insert_image(url)
        self.notifications.success("Image uploaded")
        return True


# =============================================================================
#  Inline helpers
# =============================================================================

def _node_length(node: Node) -> int:
    return len(node.text or "") if node.is_text else 1


def _inline_length(content: List[Node]) -> int:
    return sum(_node_length(n) for n in content)


def split_inline(content: List[Node], offset: int) -> Tuple[List[Node], List[Node]]:
    """Splits inline content at a character offset, cutting a text node if needed."""
    left: List[Node] = []
    right: List[Node] = []
    position = 0
    for node in content:
        length = _node_length(node)
        if position + length <= offset:
            left.append(node)
        elif position >= offset:
            right.append(node)
        else:
            cut = offset - position
            left.append(node.model_copy(update={"text": node.text[:cut]}, deep=True))
            right.append(node.model_copy(update={"text": node.text[cut:]}, deep=True))
        position += length
    return left, right


def _effective_range(sel: Selection, block: Node) -> Tuple[int, int]:
    """A caret acts on its whole textblock."""
    if sel.is_caret:
        return 0, _inline_length(block.content)
    return sel.start, sel.end


def _relocate(doc: ContentDocument, block: Node, sel: Optional[Selection]) -> Optional[Selection]:
    """Finds a moved block by identity and carries the selection offsets along."""
    for path, node in doc.walk():
        if node is block:
            if sel is None:
                length = _inline_length(node.content)
                return Selection(path=path, start=length, end=length)
            return Selection(path=path, start=sel.start, end=sel.end, kind=sel.kind)
    return None


def first_image_src(html: str) -> Optional[str]:
    soup = BeautifulSoup(html or "", "html.parser")
    img = soup.find("img")
    if img is None:
        return None
    src = (img.get("src") or "").strip()
    return src or None
