# src/article_editor/utils/style_utils.py
import logging
import re
from typing import Dict, Optional, Tuple

from mutflex_shell.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)

_TEXT_ALIGN_PATTERN = re.compile(r"text-align\s*:\s*([a-z-]+)", re.IGNORECASE)


def parse_style(style: Optional[str]) -> Dict[str, str]:
    """Parses an inline `style` attribute into an ordered property dict."""
    result: Dict[str, str] = {}
    if not style:
        return result
    for declaration in style.split(";"):
        if ":" not in declaration:
            continue
        prop, value = declaration.split(":", 1)
        prop = prop.strip().lower()
        if prop:
            result[prop] = value.strip()
    return result


def format_style(properties: Dict[str, str]) -> str:
    return "; ".join(f"{k}: {v}" for k, v in properties.items() if v not in (None, ""))


class LayoutDirection:
    """
    Reading direction of the rendered article.

    Image alignment is expressed through margins: `center` sets both
    horizontal margins to auto, any other alignment sets auto on the side
    away from the image. In the default rtl layout that means right -> only
    margin-left auto, left -> only margin-right auto. `start`/`end` values of
    `text-align` resolve against the direction.
    """

    def __init__(self, direction: str = "rtl"):
        direction = (direction or "rtl").lower()
        if direction not in ("rtl", "ltr"):
            logger.warning("Unknown layout direction '%s', falling back to rtl.", direction)
            direction = "rtl"
        self.direction = direction

    @classmethod
    def from_config(cls) -> "LayoutDirection":
        return cls(config_manager.get_nested("editor.layout_direction", "rtl"))

    @property
    def start_side(self) -> str:
        return "right" if self.direction == "rtl" else "left"

    @property
    def end_side(self) -> str:
        return "left" if self.direction == "rtl" else "right"

    @property
    def default_text_align(self) -> str:
        return self.start_side

    def resolve_align(self, value: Optional[str]) -> Optional[str]:
        value = (value or "").strip().lower()
        if value == "start":
            return self.start_side
        if value == "end":
            return self.end_side
        if value in ("left", "center", "right", "justify"):
            return value
        return None

    def auto_margin_sides(self, alignment: str) -> Tuple[str, ...]:
        """Which physical margins are set to auto for an image alignment."""
        if alignment == "center":
            return ("left", "right")
        if alignment == self.start_side:
            return (self.end_side,)
        return (self.start_side,)

    def figure_style(self, alignment: str) -> Dict[str, str]:
        alignment = alignment if alignment in ("left", "center", "right") else "center"
        auto_sides = self.auto_margin_sides(alignment)
        return {
            "text-align": alignment,
            "margin-left": "auto" if "left" in auto_sides else "0",
            "margin-right": "auto" if "right" in auto_sides else "0",
        }

    def alignment_from_style(self, style: Optional[str], default: str = "center") -> str:
        """
        Reads an image alignment back from a figure's inline style:
        `text-align` wins, otherwise the auto margins decide.
        """
        props = parse_style(style)
        aligned = self.resolve_align(props.get("text-align"))
        if aligned in ("left", "center", "right"):
            return aligned

        left_auto = _is_auto(props.get("margin-left")) or _shorthand_side_auto(props.get("margin"), "left")
        right_auto = _is_auto(props.get("margin-right")) or _shorthand_side_auto(props.get("margin"), "right")
        if left_auto and right_auto:
            return "center"
        if left_auto:
            return "right"
        if right_auto:
            return "left"
        return default


def text_align_of(style: Optional[str], direction: LayoutDirection) -> Optional[str]:
    match = _TEXT_ALIGN_PATTERN.search(style or "")
    return direction.resolve_align(match.group(1)) if match else None


def _is_auto(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "auto"


def _shorthand_side_auto(margin: Optional[str], side: str) -> bool:
    """Resolves the left/right part of a `margin` shorthand."""
    parts = (margin or "").split()
    if not parts:
        return False
    if len(parts) == 1:
        return _is_auto(parts[0])
    if len(parts) in (2, 3):
        return _is_auto(parts[1])
    return _is_auto(parts[3] if side == "left" else parts[1])
