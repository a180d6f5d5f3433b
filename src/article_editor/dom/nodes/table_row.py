from bs4 import Tag

from ..core import Node, NodeDefinition


def parse_table_row(tag: Tag, builder) -> list:
    # A row outside of a table keeps only its text content.
    return builder.parse_blocks(tag)


def render_table_row(node: Node, serializer) -> str:
    return f"<tr>{serializer.render_nodes(node.content)}</tr>"


DEFINITION = NodeDefinition(
    type_name="tableRow",
    tags=("tr",),
    model=Node,
    parser=parse_table_row,
    renderer=render_table_row,
)
