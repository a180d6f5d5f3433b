import html

from bs4 import Tag

from ..core import Node, NodeDefinition


def parse_code_block(tag: Tag, builder) -> Node:
    text = tag.get_text()
    content = [Node(type="text", text=text)] if text else []
    return Node(type="codeBlock", content=content)


def render_code_block(node: Node, serializer) -> str:
    return f"<pre><code>{html.escape(node.text_content, quote=False)}</code></pre>"


DEFINITION = NodeDefinition(
    type_name="codeBlock",
    tags=("pre",),
    model=Node,
    parser=parse_code_block,
    renderer=render_code_block,
)
