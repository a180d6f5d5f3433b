# src/mutflex_shell/core/handlers/mode_handler.py
import logging
from typing import Any, Dict, List, Optional

from article_editor.model import ModeState, SourceTab
from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.loop_runner import call_on_main_loop
from mutflex_shell.core.utils.editor_utils import require_editor

logger = logging.getLogger(__name__)

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "wysiwyg": None,
    "source": {"edit": None, "visual": None, "preview": None},
    "confirm": None,
    "cancel": None,
    "status": None,
}

mode_help_text = """
MODE:
  mode wysiwyg                         Return to the formatted editor.
  mode source [edit|visual|preview]    Switch to HTML source (default: edit).
  mode confirm                         Continue and lose advanced formatting.
  mode cancel                          Stay in source mode.
  mode status                          Show the current state.
""".strip()

WARNING_TEXT = (
    "⚠️  This article uses advanced styling that the formatted editor cannot keep.\n"
    "   'mode confirm' continues and loses that formatting; 'mode cancel' stays in source mode."
)


def handle_mode(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    editor = require_editor(ctx)
    if editor is None:
        return 1
    controller = editor.controller

    command = args[0] if args else "status"

    if command == "status":
        print(controller.state.value)
        return 0

    if command == "source":
        tab_name = args[1] if len(args) > 1 else SourceTab.EDIT.value
        try:
            tab = SourceTab(tab_name)
        except ValueError:
            print(f"❌ Unknown source tab '{tab_name}'. Use edit, visual or preview.")
            return 1
        state = call_on_main_loop(controller.switch_to_source, tab)
        print(f"Switched to {state.value}.")
        return 0

    if command == "wysiwyg":
        state = call_on_main_loop(controller.request_wysiwyg)
        if state is ModeState.SWITCH_WARNING_PENDING:
            print(WARNING_TEXT)
            return 0
        print(f"Switched to {state.value}.")
        return 0

    if command == "confirm":
        if not controller.warning_pending:
            print("Nothing to confirm.")
            return 1
        call_on_main_loop(controller.confirm_switch)
        print("Switched to wysiwyg; advanced formatting was dropped.")
        return 0

    if command == "cancel":
        if not controller.warning_pending:
            print("Nothing to cancel.")
            return 1
        state = call_on_main_loop(controller.cancel_switch)
        print(f"Staying in {state.value}.")
        return 0

    print(f"Unknown command: 'mode {command}'.")
    print(mode_help_text)
    return 1
