from bs4 import Tag

from ..core import Node, NodeDefinition


def parse_blockquote(tag: Tag, builder) -> Node:
    content = builder.parse_blocks(tag) or [Node(type="paragraph")]
    return Node(type="blockquote", content=content)


def render_blockquote(node: Node, serializer) -> str:
    return f"<blockquote>{serializer.render_nodes(node.content)}</blockquote>"


DEFINITION = NodeDefinition(
    type_name="blockquote",
    tags=("blockquote",),
    model=Node,
    parser=parse_blockquote,
    renderer=render_blockquote,
)
