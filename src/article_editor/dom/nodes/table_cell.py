from bs4 import Tag

from ..core import Node, NodeDefinition


def _span(tag: Tag, name: str) -> int:
    value = str(tag.get(name, "1"))
    return int(value) if value.isdigit() and int(value) > 0 else 1


def parse_cell(tag: Tag, builder) -> Node:
    node_type = "tableHeader" if tag.name == "th" else "tableCell"
    attrs = {"colspan": _span(tag, "colspan"), "rowspan": _span(tag, "rowspan")}
    content = builder.parse_blocks(tag) or [Node(type="paragraph")]
    return Node(type=node_type, attrs=attrs, content=content)


def parse_stray_cell(tag: Tag, builder) -> list:
    return builder.parse_blocks(tag)


def render_cell(node: Node, serializer) -> str:
    tag = "th" if node.type == "tableHeader" else "td"
    spans = "".join(
        f' {name}="{int(node.attrs[name])}"'
        for name in ("colspan", "rowspan")
        if int(node.attrs.get(name, 1)) != 1
    )
    return f"<{tag}{spans}>{serializer.render_nodes(node.content)}</{tag}>"


DEFINITION = NodeDefinition(
    type_name="tableCell",
    tags=("td", "th"),
    model=Node,
    parser=parse_stray_cell,
    renderer=render_cell,
    extra_types=("tableHeader",),
)
