# src/article_editor/dom/models.py
from typing import Callable, Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field

from .core import Node, NodePath


class ContentDocument(BaseModel):
    """
    The structured document edited by the WYSIWYG surface.

    Nodes are addressed by their path (child indices from the root). All
    mutating helpers work in place; callers copy the document first when
    they need transactional behaviour.
    """
    root: Node = Field(default_factory=lambda: Node(type="doc"))

    @property
    def blocks(self) -> List[Node]:
        return self.root.content

    def copy_deep(self) -> "ContentDocument":
        return self.model_copy(deep=True)

    def node_at(self, path: NodePath) -> Optional[Node]:
        node = self.root
        for index in path:
            if index < 0 or index >= len(node.content):
                return None
            node = node.content[index]
        return node

    def walk(self) -> Iterator[Tuple[NodePath, Node]]:
        """Depth-first, document-order iteration over (path, node) pairs."""
        stack: List[Tuple[NodePath, Node]] = [((), self.root)]
        while stack:
            path, node = stack.pop()
            if path:
                yield path, node
            for index in range(len(node.content) - 1, -1, -1):
                stack.append((path + (index,), node.content[index]))

    def find(self, predicate: Callable[[Node], bool]) -> Optional[Tuple[NodePath, Node]]:
        for path, node in self.walk():
            if predicate(node):
                return path, node
        return None

    def find_all(self, predicate: Callable[[Node], bool]) -> List[Tuple[NodePath, Node]]:
        return [(path, node) for path, node in self.walk() if predicate(node)]

    def replace_at(self, path: NodePath, replacement: List[Node]) -> None:
        parent = self.node_at(path[:-1])
        if parent is None or not path:
            raise IndexError(f"No node at path {path}")
        index = path[-1]
        parent.content[index:index + 1] = replacement

    def insert_at(self, path: NodePath, nodes: List[Node]) -> None:
        parent = self.node_at(path[:-1])
        if parent is None:
            raise IndexError(f"No parent for path {path}")
        index = path[-1]
        parent.content[index:index] = nodes

    def remove_at(self, path: NodePath) -> Node:
        parent = self.node_at(path[:-1])
        if parent is None or not path or path[-1] >= len(parent.content):
            raise IndexError(f"No node at path {path}")
        removed = parent.content.pop(path[-1])
        if parent.type == "doc" and not parent.content:
            parent.content.append(Node(type="paragraph"))
        return removed
