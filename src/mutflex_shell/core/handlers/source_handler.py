# src/mutflex_shell/core/handlers/source_handler.py
import logging
from typing import Any, Dict, List, Optional

from article_editor.model import ModeState
from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.loop_runner import call_on_main_loop
from mutflex_shell.core.utils.editor_utils import read_text_argument, require_editor

logger = logging.getLogger(__name__)

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "set": None,
    "show": None,
    "input": None,
    "sync": None,
    "srcdoc": None,
}

source_help_text = """
SOURCE:
  source set <html>                    Replace the raw HTML (edit tab); reads stdin when piped.
  source show                          Print the HTML source buffer.
  source input <markup>                Simulate typing in the visual tab (debounced sync).
  source sync                          Sync the visual tab right away.
  source srcdoc                        Print the iframe document of the visual/preview tab.
""".strip()


def handle_source(args: List[str], ctx: ShellContext, stdin: Optional[str] = None) -> int:
    if not args:
        print(source_help_text)
        return 0

    editor = require_editor(ctx)
    if editor is None:
        return 1
    controller = editor.controller
    command, rest = args[0], args[1:]

    if command == "show":
        print(controller.current_html)
        return 0

    if command == "set":
        if controller.state is not ModeState.SOURCE_EDIT:
            print("❌ Raw HTML can only be set in the edit tab. Use 'mode source edit'.")
            return 1
        call_on_main_loop(controller.edit_source, read_text_argument(rest, stdin))
        return 0

    if command in ("input", "sync"):
        if controller.state is not ModeState.SOURCE_VISUAL:
            print("❌ The visual tab is not active. Use 'mode source visual'.")
            return 1
        if command == "sync":
            call_on_main_loop(controller.visual.sync_now)
            return 0
        markup = read_text_argument(rest, stdin) if (rest or stdin) else None
        call_on_main_loop(controller.visual.handle_input, markup)
        return 0

    if command == "srcdoc":
        if controller.state is ModeState.SOURCE_VISUAL:
            print(controller.visual.srcdoc)
            return 0
        if controller.state is ModeState.SOURCE_PREVIEW:
            print(controller.preview.srcdoc)
            return 0
        print("❌ No iframe is rendered in the current state.")
        return 1

    print(f"Unknown command: 'source {command}'.")
    return 1
