import html
from typing import Optional

from bs4 import Tag

from ..core import Node, NodeDefinition
from ...model import ImageAttributes
from ...utils.style_utils import format_style, parse_style

FIGURE_CLASS = "image-container"

# Exactly these attributes live on an image node (plus the optional caption).
IMAGE_ATTRIBUTES = ("src", "alt", "title", "width", "alignment", "loading", "decoding", "caption")

# Sources that are never turned into an image node.
UNSAFE_SCHEMES = ("javascript:", "vbscript:")


class ImageNode(Node):
    type: str = "image"

    @property
    def src(self) -> str: return self.attrs.get("src", "")

    @property
    def alt(self) -> str: return self.attrs.get("alt", "")

    @property
    def width(self) -> str: return self.attrs.get("width", "100%")

    @property
    def alignment(self) -> str: return self.attrs.get("alignment", "center")

    @property
    def caption(self) -> str: return self.attrs.get("caption", "")

    def to_attributes(self) -> ImageAttributes:
        return ImageAttributes(**{k: v for k, v in self.attrs.items() if k in IMAGE_ATTRIBUTES and v is not None})

    @classmethod
    def from_attributes(cls, attributes: ImageAttributes) -> "ImageNode":
        return cls(attrs=attributes.model_dump())


def build_image(src: str, **overrides) -> ImageNode:
    """An image node with the default insertion attributes."""
    return ImageNode.from_attributes(ImageAttributes(src=src, **overrides))


def parse_image(tag: Tag, builder):
    figure: Optional[Tag] = None
    img: Optional[Tag] = tag

    if tag.name == "figure":
        figure = tag
        img = tag.find("img")
        if img is None:
            return builder.parse_blocks(tag)

    src = (img.get("src") or "").strip()
    if not src or src.lower().startswith(UNSAFE_SCHEMES):
        return None

    img_style = parse_style(img.get("style"))
    align_source = figure.get("style") if figure is not None else img.get("style")
    caption_tag = figure.find("figcaption") if figure is not None else None

    attributes = ImageAttributes(
        src=src,
        alt=img.get("alt") or "",
        title=img.get("title") or None,
        width=img_style.get("width") or img.get("width") or "100%",
        alignment=builder.direction.alignment_from_style(align_source),
        loading=img.get("loading") or "lazy",
        decoding=img.get("decoding") or "async",
        caption=caption_tag.get_text(" ", strip=True) if caption_tag is not None else "",
    )
    return ImageNode.from_attributes(attributes)


def render_image(node: Node, serializer) -> str:
    attrs = node.attrs
    figure_style = format_style(serializer.direction.figure_style(attrs.get("alignment", "center")))

    img_parts = [
        f'src="{html.escape(attrs.get("src", ""), quote=True)}"',
        f'alt="{html.escape(attrs.get("alt") or "", quote=True)}"',
    ]
    if attrs.get("title"):
        img_parts.append(f'title="{html.escape(attrs["title"], quote=True)}"')
    img_parts.append(f'loading="{html.escape(attrs.get("loading") or "lazy", quote=True)}"')
    img_parts.append(f'decoding="{html.escape(attrs.get("decoding") or "async", quote=True)}"')
    img_parts.append(f'style="width: {html.escape(attrs.get("width") or "100%", quote=True)}"')

    caption = attrs.get("caption") or ""
    figcaption = f"<figcaption>{html.escape(caption, quote=False)}</figcaption>" if caption else ""
    return (
        f'<figure class="{FIGURE_CLASS}" style="{figure_style}">'
        f'<img {" ".join(img_parts)}/>{figcaption}</figure>'
    )


DEFINITION = NodeDefinition(
    type_name="image",
    tags=("img", "figure"),
    model=ImageNode,
    parser=parse_image,
    renderer=render_image,
)
