from bs4 import Tag

from ..core import Node, NodeDefinition


def parse_list_item(tag: Tag, builder) -> list:
    # A <li> outside of a list is read as the paragraphs it contains.
    return builder.parse_blocks(tag)


def render_list_item(node: Node, serializer) -> str:
    return f"<li>{serializer.render_nodes(node.content)}</li>"


DEFINITION = NodeDefinition(
    type_name="listItem",
    tags=("li",),
    model=Node,
    parser=parse_list_item,
    renderer=render_list_item,
)
