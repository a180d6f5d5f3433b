from bs4 import Tag

from ..core import Node, NodeDefinition


def parse_list_items(tag: Tag, builder) -> list:
    """Collects the <li> children of a list; stray content becomes its own item."""
    items = []
    for child in tag.find_all(recursive=False):
        if child.name == "li":
            items.append(Node(type="listItem", content=builder.parse_blocks(child) or [Node(type="paragraph")]))
    return items


def parse_bullet_list(tag: Tag, builder):
    items = parse_list_items(tag, builder)
    return Node(type="bulletList", content=items) if items else None


def render_bullet_list(node: Node, serializer) -> str:
    return f"<ul>{serializer.render_nodes(node.content)}</ul>"


DEFINITION = NodeDefinition(
    type_name="bulletList",
    tags=("ul",),
    model=Node,
    parser=parse_bullet_list,
    renderer=render_bullet_list,
)
