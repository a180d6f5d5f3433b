# src/mutflex_shell/model.py
import re
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# Arabic letters, latin lowercase, digits, whitespace and dashes survive.
_SLUG_STRIP = re.compile(r"[^\u0621-\u064Aa-z0-9\s-]")
_SLUG_SPACES = re.compile(r"\s+")
_SLUG_DASHES = re.compile(r"-+")


def generate_slug(title: str) -> str:
    """
    Builds a URL slug from an article title.
    e.g., 'Hello World!' -> 'hello-world', 'مرحبا بالعالم' -> 'مرحبا-بالعالم'
    """
    slug = _SLUG_STRIP.sub("", (title or "").lower())
    slug = _SLUG_SPACES.sub("-", slug.strip())
    slug = _SLUG_DASHES.sub("-", slug)
    return slug.strip("-")


class ArticleDraft(BaseModel):
    """The article being edited, as the admin form holds it."""
    title: str = ""
    slug: str = ""
    excerpt: str = ""
    content: str = ""
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    published: bool = False
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, tags: List[str]) -> List[str]:
        return [t.strip() for t in tags if t and t.strip()]

    def set_title(self, title: str) -> None:
        """A title change re-derives the slug unless one was set by hand."""
        previous_auto = generate_slug(self.title)
        self.title = title
        if not self.slug or self.slug == previous_auto:
            self.slug = generate_slug(title)

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.title.strip():
            missing.append("title")
        if not self.content.strip():
            missing.append("content")
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()
