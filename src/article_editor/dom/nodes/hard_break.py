from bs4 import Tag

from ..core import Node, NodeDefinition


def parse_hard_break(tag: Tag, builder) -> Node:
    return Node(type="hardBreak")


def render_hard_break(node: Node, serializer) -> str:
    return "<br>"


DEFINITION = NodeDefinition(
    type_name="hardBreak",
    tags=("br",),
    model=Node,
    parser=parse_hard_break,
    renderer=render_hard_break,
    group="inline",
)
