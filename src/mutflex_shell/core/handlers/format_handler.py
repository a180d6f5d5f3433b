# src/mutflex_shell/core/handlers/format_handler.py
import logging
from functools import partial
from typing import Any, Dict, List, Optional

from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.loop_runner import call_on_main_loop
from mutflex_shell.core.utils.editor_utils import require_wysiwyg

logger = logging.getLogger(__name__)

MARK_COMMANDS = {
    "bold": "bold",
    "italic": "italic",
    "underline": "underline",
    "strike": "strike",
    "code": "code",
}

# Commands without arguments, mapped to the editor method they call.
BLOCK_COMMANDS = {
    "paragraph": "set_paragraph",
    "bullet": "toggle_bullet_list",
    "ordered": "toggle_ordered_list",
    "quote": "toggle_blockquote",
    "unlink": "unset_link",
    "undo": "undo",
    "redo": "redo",
}

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    **{name: None for name in MARK_COMMANDS},
    "select": None,
    "heading": {"1": None, "2": None, "3": None},
    "paragraph": None,
    "align": {"left": None, "center": None, "right": None, "justify": None},
    "bullet": None,
    "ordered": None,
    "quote": None,
    "link": None,
    "unlink": None,
    "undo": None,
    "redo": None,
}

format_help_text = """
FORMAT (WYSIWYG only):
  format select <block> [start] [end] Place the cursor/selection in a top-level block.
  format bold|italic|underline|strike|code
                                       Toggle a mark on the selection (or the whole block).
  format heading <1-3>                 Toggle a heading.
  format paragraph                     Turn the block into a paragraph.
  format align <left|center|right|justify>
  format bullet | ordered              Toggle a bullet or numbered list.
  format quote                         Toggle a blockquote.
  format link <href> | unlink          Set or remove a link.
  format undo | redo
""".strip()


def handle_format(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    if not args:
        print(format_help_text)
        return 0

    editor = require_wysiwyg(ctx)
    if editor is None:
        return 1

    command, rest = args[0], args[1:]

    if command == "select":
        try:
            numbers = [int(a) for a in rest]
            selection = editor.select_block(*numbers[:3])
        except (ValueError, TypeError, IndexError) as e:
            print(f"❌ Invalid selection: {e}")
            return 1
        print(f"Selection: block {selection.path} [{selection.start}:{selection.end}]")
        return 0

    if command in MARK_COMMANDS:
        action = partial(editor.toggle_mark, MARK_COMMANDS[command])
    elif command == "heading":
        if not rest or not rest[0].isdigit():
            print("Usage: format heading <1-3>")
            return 1
        action = partial(editor.toggle_heading, int(rest[0]))
    elif command == "align":
        if not rest:
            print("Usage: format align <left|center|right|justify>")
            return 1
        action = partial(editor.set_text_align, rest[0])
    elif command == "link":
        if not rest:
            print("Usage: format link <href>")
            return 1
        action = partial(editor.set_link, rest[0])
    elif command in BLOCK_COMMANDS:
        action = getattr(editor, BLOCK_COMMANDS[command])
    else:
        print(f"Unknown command: 'format {command}'.")
        return 1

    changed = call_on_main_loop(action)
    if not changed:
        print("Nothing changed.")
        return 1
    return 0
