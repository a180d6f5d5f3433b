from bs4 import Tag

from ..core import Node, NodeDefinition


def parse_horizontal_rule(tag: Tag, builder) -> Node:
    return Node(type="horizontalRule")


def render_horizontal_rule(node: Node, serializer) -> str:
    return "<hr>"


DEFINITION = NodeDefinition(
    type_name="horizontalRule",
    tags=("hr",),
    model=Node,
    parser=parse_horizontal_rule,
    renderer=render_horizontal_rule,
)
