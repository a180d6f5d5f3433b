from bs4 import Tag

from ..core import Node, NodeDefinition


class ParagraphNode(Node):
    type: str = "paragraph"


def parse_paragraph(tag: Tag, builder) -> list:
    return builder.textblock(tag, "paragraph")


def render_paragraph(node: Node, serializer) -> str:
    return f"<p{serializer.block_style(node)}>{serializer.render_inline(node.content)}</p>"


DEFINITION = NodeDefinition(
    type_name="paragraph",
    tags=("p",),
    model=ParagraphNode,
    parser=parse_paragraph,
    renderer=render_paragraph,
)
