# src/article_editor/model.py
from __future__ import annotations

import base64
import binascii
import re
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

WIDTH_OPTIONS = ("25%", "50%", "75%", "100%")
ALIGNMENTS = ("left", "center", "right")

_DATA_URI_PATTERN = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.IGNORECASE | re.DOTALL)


class SourceTab(str, Enum):
    EDIT = "edit"
    VISUAL = "visual"
    PREVIEW = "preview"


class EditorMode(str, Enum):
    WYSIWYG = "wysiwyg"
    SOURCE = "source"


class ModeState(str, Enum):
    """States of the mode controller. Exactly one surface is live per state."""
    WYSIWYG = "wysiwyg"
    SOURCE_EDIT = "source_edit"
    SOURCE_VISUAL = "source_visual"
    SOURCE_PREVIEW = "source_preview"
    SWITCH_WARNING_PENDING = "switch_warning_pending"

    @property
    def mode(self) -> EditorMode:
        return EditorMode.WYSIWYG if self is ModeState.WYSIWYG else EditorMode.SOURCE

    @property
    def tab(self) -> Optional[SourceTab]:
        return _STATE_TO_TAB.get(self)

    @classmethod
    def for_tab(cls, tab: SourceTab) -> "ModeState":
        return _TAB_TO_STATE[SourceTab(tab)]


_TAB_TO_STATE = {
    SourceTab.EDIT: ModeState.SOURCE_EDIT,
    SourceTab.VISUAL: ModeState.SOURCE_VISUAL,
    SourceTab.PREVIEW: ModeState.SOURCE_PREVIEW,
}
_STATE_TO_TAB = {state: tab for tab, state in _TAB_TO_STATE.items()}


class ImageFile(BaseModel):
    """An image picked from disk, the clipboard, or a drop event."""
    filename: str = "image"
    content_type: str = ""
    data: bytes = b""

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_data_uri(cls, uri: str, filename: str = "pasted-image") -> Optional["ImageFile"]:
        """
        Decodes a base64 `data:image/...` URI.
        Returns None when the URI is not a well-formed base64 image.
        """
        match = _DATA_URI_PATTERN.match((uri or "").strip())
        if not match:
            return None
        content_type, payload = match.groups()
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            return None
        ext = content_type.split("/", 1)[1].split("+", 1)[0]
        return cls(filename=f"{filename}.{ext}", content_type=content_type.lower(), data=data)


class ClipboardPayload(BaseModel):
    """What a paste event carries: files first, then html, then plain text."""
    files: List[ImageFile] = Field(default_factory=list)
    html: Optional[str] = None
    text: Optional[str] = None


class ImageAttributes(BaseModel):
    """
    The editable attribute set of an image, shared by both editing surfaces
    and the image properties dialog.
    """
    src: str = ""
    alt: str = ""
    title: Optional[str] = None
    caption: str = ""
    width: str = "100%"
    alignment: str = "center"
    loading: str = "lazy"
    decoding: str = "async"

    @field_validator("alignment", mode="before")
    @classmethod
    def _known_alignment(cls, value: str) -> str:
        aligned = str(value or "center").strip().lower()
        if aligned not in ALIGNMENTS:
            raise ValueError(f"alignment must be one of {', '.join(ALIGNMENTS)}, got '{value}'")
        return aligned


class Notification(BaseModel):
    title: str
    description: Optional[str] = None
    variant: str = "default"  # 'default' | 'destructive'
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"
