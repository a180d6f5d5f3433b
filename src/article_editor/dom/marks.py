# src/article_editor/dom/marks.py
import html
from typing import Dict, List, Optional

from bs4 import Tag

from .core import Mark

# Outer-to-inner nesting order used when rendering overlapping marks.
MARK_ORDER = ("link", "bold", "italic", "underline", "strike", "code")

MARK_TAGS: Dict[str, str] = {
    "strong": "bold",
    "b": "bold",
    "em": "italic",
    "i": "italic",
    "u": "underline",
    "s": "strike",
    "strike": "strike",
    "del": "strike",
    "code": "code",
    "a": "link",
}

RENDER_TAGS: Dict[str, str] = {
    "bold": "strong",
    "italic": "em",
    "underline": "u",
    "strike": "s",
    "code": "code",
    "link": "a",
}

LINK_CLASS = "text-primary underline"
LINK_DEFAULTS = {"target": "_blank", "rel": "noopener noreferrer nofollow"}


def mark_from_tag(tag: Tag) -> Optional[Mark]:
    mark_type = MARK_TAGS.get(tag.name)
    if not mark_type:
        return None
    if mark_type == "link":
        href = tag.get("href")
        if not href:
            return None
        attrs = {"href": href}
        for key in ("target", "rel"):
            value = tag.get(key)
            if value:
                attrs[key] = " ".join(value) if isinstance(value, list) else value
        return Mark(type="link", attrs=attrs)
    return Mark(type=mark_type)


def sort_marks(marks: List[Mark]) -> List[Mark]:
    return sorted(marks, key=lambda m: MARK_ORDER.index(m.type) if m.type in MARK_ORDER else len(MARK_ORDER))


def add_mark(marks: List[Mark], mark: Mark) -> List[Mark]:
    """Adds a mark, replacing any existing mark of the same type."""
    return sort_marks([m for m in marks if m.type != mark.type] + [mark])


def remove_mark(marks: List[Mark], mark_type: str) -> List[Mark]:
    return [m for m in marks if m.type != mark_type]


def open_tag(mark: Mark) -> str:
    tag = RENDER_TAGS.get(mark.type, "span")
    if mark.type != "link":
        return f"<{tag}>"
    attrs = [f'href="{html.escape(mark.attrs.get("href", ""), quote=True)}"']
    for key in ("target", "rel"):
        if mark.attrs.get(key):
            attrs.append(f'{key}="{html.escape(mark.attrs[key], quote=True)}"')
    attrs.append(f'class="{LINK_CLASS}"')
    return f"<a {' '.join(attrs)}>"


def close_tag(mark: Mark) -> str:
    return f"</{RENDER_TAGS.get(mark.type, 'span')}>"
