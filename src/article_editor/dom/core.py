from typing import Dict, Any, List, Callable, Type, Optional, Tuple, Union

from pydantic import BaseModel, Field
from bs4 import Tag

# A path is the list of child indices leading from the document root to a node.
NodePath = Tuple[int, ...]


class Mark(BaseModel):
    """An inline annotation on a text node (bold, link, ...)."""
    type: str
    attrs: Dict[str, Any] = Field(default_factory=dict)


class Node(BaseModel):
    """
    Base data model of the structured document tree.

    Text nodes carry `text` and `marks`; every other node carries `attrs`
    and an ordered list of child nodes in `content`.
    """
    type: str
    attrs: Dict[str, Any] = Field(default_factory=dict)
    text: Optional[str] = None
    marks: List[Mark] = Field(default_factory=list)
    content: List['Node'] = Field(default_factory=list)

    @property
    def is_text(self) -> bool:
        return self.type == "text"

    @property
    def is_textblock(self) -> bool:
        return self.type in TEXTBLOCK_TYPES

    @property
    def text_content(self) -> str:
        """Concatenated text of this node and all its descendants."""
        if self.is_text:
            return self.text or ""
        return "".join(child.text_content for child in self.content)

    def has_mark(self, mark_type: str) -> bool:
        return any(m.type == mark_type for m in self.marks)


Node.model_rebuild()

TEXTBLOCK_TYPES = {"paragraph", "heading", "codeBlock"}

# A node parser turns a bs4 Tag into one node, or several when the tag has
# to be split (e.g. a <p> with an <img> inside it).
NodeParser = Callable[[Tag, Any], Union[Node, List[Node], None]]
NodeRenderer = Callable[[Node, Any], str]


class NodeDefinition:
    """
    Configuration object binding HTML tags to a node model, its parser and
    its renderer.
    """

    def __init__(
            self,
            type_name: str,
            tags: Tuple[str, ...],
            model: Type[Node],
            parser: NodeParser,
            renderer: NodeRenderer,
            group: str = "block",
            extra_types: Optional[Tuple[str, ...]] = None,
    ):
        self.type_name = type_name
        self.tags = tags
        self.model = model
        self.parser = parser
        self.renderer = renderer
        self.group = group
        self.node_types = (type_name,) + tuple(extra_types or ())

    @property
    def is_block(self) -> bool:
        return self.group == "block"
