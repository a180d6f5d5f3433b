from bs4 import Tag

from ..core import Node, NodeDefinition

# Headings beyond the supported levels collapse into the deepest one.
LEVELS = (1, 2, 3)


class HeadingNode(Node):
    type: str = "heading"

    @property
    def level(self) -> int:
        return int(self.attrs.get("level", 1))


def parse_heading(tag: Tag, builder) -> list:
    level = min(int(tag.name[1]), LEVELS[-1])
    return builder.textblock(tag, "heading", {"level": level})


def render_heading(node: Node, serializer) -> str:
    level = min(max(int(node.attrs.get("level", 1)), LEVELS[0]), LEVELS[-1])
    return f"<h{level}{serializer.block_style(node)}>{serializer.render_inline(node.content)}</h{level}>"


DEFINITION = NodeDefinition(
    type_name="heading",
    tags=("h1", "h2", "h3", "h4", "h5", "h6"),
    model=HeadingNode,
    parser=parse_heading,
    renderer=render_heading,
)
