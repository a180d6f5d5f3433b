from bs4 import Tag

from ..core import Node, NodeDefinition
from .table_cell import parse_cell


def parse_table(tag: Tag, builder):
    rows = []
    for tr in tag.find_all("tr"):
        # Rows of nested tables belong to those tables.
        if tr.find_parent("table") is not tag:
            continue
        cells = [parse_cell(cell, builder) for cell in tr.find_all(["td", "th"], recursive=False)]
        if cells:
            rows.append(Node(type="tableRow", content=cells))
    return Node(type="table", content=rows) if rows else None


def render_table(node: Node, serializer) -> str:
    return f"<table><tbody>{serializer.render_nodes(node.content)}</tbody></table>"


DEFINITION = NodeDefinition(
    type_name="table",
    tags=("table",),
    model=Node,
    parser=parse_table,
    renderer=render_table,
)
