from bs4 import Tag

from ..core import Node, NodeDefinition
from .bullet_list import parse_list_items


def parse_ordered_list(tag: Tag, builder):
    items = parse_list_items(tag, builder)
    if not items:
        return None
    start = tag.get("start")
    attrs = {"start": int(start)} if start and str(start).isdigit() and int(start) != 1 else {}
    return Node(type="orderedList", attrs=attrs, content=items)


def render_ordered_list(node: Node, serializer) -> str:
    start = node.attrs.get("start")
    start_attr = f' start="{int(start)}"' if start and int(start) != 1 else ""
    return f"<ol{start_attr}>{serializer.render_nodes(node.content)}</ol>"


DEFINITION = NodeDefinition(
    type_name="orderedList",
    tags=("ol",),
    model=Node,
    parser=parse_ordered_list,
    renderer=render_ordered_list,
)
