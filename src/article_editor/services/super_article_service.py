# src/article_editor/services/super_article_service.py
import logging
import re
from typing import Dict, List, Optional, Pattern

from pydantic import BaseModel, Field

from mutflex_shell.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)

# Signatures of hand-authored layout CSS that the structured document
# cannot represent. One hit is common in plain content; two or more mean
# the article was deliberately laid out in raw HTML.
SIGNATURES: Dict[str, Pattern[str]] = {
    "flex_display": re.compile(r"display\s*:\s*(?:inline-)?flex\b", re.IGNORECASE),
    "linear_gradient": re.compile(r"linear-gradient\s*\(", re.IGNORECASE),
    "box_shadow": re.compile(r"box-shadow\s*:", re.IGNORECASE),
    "border_radius": re.compile(r"border-radius\s*:\s*\d", re.IGNORECASE),
    "inline_background": re.compile(r"style\s*=\s*[\"'][^\"']*\bbackground(?:-color|-image)?\s*:", re.IGNORECASE),
    "grid_template": re.compile(r"grid-template(?:-columns|-rows|-areas)?\s*:", re.IGNORECASE),
}

DEFAULT_THRESHOLD = 2


class SuperArticleReport(BaseModel):
    matched: List[str] = Field(default_factory=list)
    threshold: int = DEFAULT_THRESHOLD

    @property
    def is_super_article(self) -> bool:
        return len(self.matched) >= self.threshold


def analyze(html: str, threshold: Optional[int] = None) -> SuperArticleReport:
    """
    Scans raw HTML for the advanced styling signatures.

    Args:
        html (str): The document as loaded, before any structured parsing.
        threshold (Optional[int]): Distinct signatures needed; defaults to
                                   `editor.super_article.threshold`.

    Returns:
        SuperArticleReport: The matched signature names and the verdict.
    """
    if threshold is None:
        threshold = int(config_manager.get_nested("editor.super_article.threshold", DEFAULT_THRESHOLD))
    matched = [name for name, pattern in SIGNATURES.items() if html and pattern.search(html)]
    report = SuperArticleReport(matched=matched, threshold=threshold)
    if matched:
        logger.debug("Advanced styling signatures found: %s", ", ".join(matched))
    return report


def detect_super_article(html: str) -> bool:
    """True iff at least two distinct advanced-styling signatures occur in `html`."""
    return analyze(html).is_super_article
