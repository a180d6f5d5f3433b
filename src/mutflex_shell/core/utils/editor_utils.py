# src/mutflex_shell/core/utils/editor_utils.py
import logging
import mimetypes
from pathlib import Path
from typing import Optional

from article_editor.controllers.rich_text_editor import RichTextEditor
from article_editor.controllers.wysiwyg_controller import StructuredEditor
from article_editor.model import ImageFile, ModeState
from mutflex_shell.core.context.shell_context import ShellContext

logger = logging.getLogger(__name__)


def require_editor(ctx: ShellContext) -> Optional[RichTextEditor]:
    """Returns the open editor, or prints a hint and returns None."""
    if ctx.editor is None:
        print("❌ No editor open. Use 'editor open' first.")
        return None
    return ctx.editor


def read_image_file(path_str: str) -> Optional[ImageFile]:
    """Reads a file from disk into an ImageFile, guessing its type from the name."""
    path = Path(path_str).expanduser()
    if not path.is_file():
        print(f"❌ File not found: {path}")
        return None
    content_type, _ = mimetypes.guess_type(path.name)
    return ImageFile(
        filename=path.name,
        content_type=content_type or "application/octet-stream",
        data=path.read_bytes(),
    )


def read_text_argument(args, stdin: Optional[str]) -> str:
    """Joins the arguments, falling back to piped stdin."""
    if args:
        return " ".join(args)
    return (stdin or "").rstrip("\n")


def require_wysiwyg(ctx: ShellContext) -> Optional[StructuredEditor]:
    """The structured editor, only while it is the live surface."""
    editor = require_editor(ctx)
    if editor is None:
        return None
    if editor.state is not ModeState.WYSIWYG:
        print(f"❌ Formatting needs the WYSIWYG surface (now {editor.state.value}). Use 'mode wysiwyg'.")
        return None
    return editor.editor
