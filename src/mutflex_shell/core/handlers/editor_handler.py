# src/mutflex_shell/core/handlers/editor_handler.py
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from article_editor.model import ClipboardPayload
from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.loop_runner import call_on_main_loop, run_on_main_loop
from mutflex_shell.core.utils.editor_utils import (
    read_image_file,
    read_text_argument,
    require_editor,
    require_wysiwyg,
)

logger = logging.getLogger(__name__)

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "open": None,
    "show": None,
    "status": None,
    "import": None,
    "export": None,
    "type": None,
    "paste": None,
    "drop": None,
    "close": None,
}

editor_help_text = """
EDITOR:
  editor open [--file <path>] [html]   Open the editor on the draft (or the given HTML).
  editor show                          Print the current HTML.
  editor status                        Show mode, tab and advanced-styling flag.
  editor import <path>                 Replace the content from an HTML file.
  editor export <path>                 Write the current HTML to a file.
  editor type <text>                   Type text at the cursor (WYSIWYG).
  editor paste [--html H] [--text T] [--file IMG]
                                       Paste clipboard content into the live surface.
  editor drop <path>                   Drop an image file onto the live surface.
  editor close                         Close the editing session.
""".strip()


def handle_editor(args: List[str], ctx: ShellContext, stdin: Optional[str] = None) -> int:
    parser = argparse.ArgumentParser(prog="editor")
    subparsers = parser.add_subparsers(dest="subcommand")

    open_parser = subparsers.add_parser("open")
    open_parser.add_argument("--file", type=str, default=None)
    open_parser.add_argument("html", nargs="*")

    subparsers.add_parser("show")
    subparsers.add_parser("status")
    subparsers.add_parser("close")

    import_parser = subparsers.add_parser("import")
    import_parser.add_argument("path")

    export_parser = subparsers.add_parser("export")
    export_parser.add_argument("path")

    type_parser = subparsers.add_parser("type")
    type_parser.add_argument("text", nargs="*")

    paste_parser = subparsers.add_parser("paste")
    paste_parser.add_argument("--html", type=str, default=None)
    paste_parser.add_argument("--text", type=str, default=None)
    paste_parser.add_argument("--file", type=str, action="append", default=[])

    drop_parser = subparsers.add_parser("drop")
    drop_parser.add_argument("path")

    if not args:
        print(editor_help_text)
        return 0
    try:
        parsed = parser.parse_args(args)
    except SystemExit:
        return 1

    if parsed.subcommand == "open":
        return _handle_open(parsed, ctx, stdin)
    if parsed.subcommand == "close":
        ctx.close_editor()
        print("Editor closed.")
        return 0

    editor = require_editor(ctx)
    if editor is None:
        return 1

    if parsed.subcommand == "show":
        print(editor.value)
        return 0
    if parsed.subcommand == "status":
        return _handle_status(ctx)
    if parsed.subcommand == "import":
        return _handle_import(parsed.path, ctx)
    if parsed.subcommand == "export":
        Path(parsed.path).expanduser().write_text(editor.value, encoding="utf-8")
        print(f"✅ Exported {len(editor.value)} characters to {parsed.path}")
        return 0
    if parsed.subcommand == "type":
        structured = require_wysiwyg(ctx)
        if structured is None:
            return 1
        return 0 if call_on_main_loop(structured.insert_text, read_text_argument(parsed.text, stdin)) else 1
    if parsed.subcommand == "paste":
        return _handle_paste(parsed, ctx, stdin)
    if parsed.subcommand == "drop":
        file = read_image_file(parsed.path)
        if file is None:
            return 1
        return 0 if run_on_main_loop(editor.drop([file])) else 1
    return 1


def _handle_open(parsed: argparse.Namespace, ctx: ShellContext, stdin: Optional[str]) -> int:
    html: Optional[str] = None
    if parsed.file:
        path = Path(parsed.file).expanduser()
        if not path.is_file():
            print(f"❌ File not found: {path}")
            return 1
        html = path.read_text(encoding="utf-8")
    elif parsed.html or stdin:
        html = read_text_argument(parsed.html, stdin)

    editor = ctx.open_editor(html)
    print(f"📝 Editor opened in {editor.state.value} mode.")
    if editor.controller.super_article:
        print("⚠️  Advanced styling detected: opened in visual source mode to keep it intact.")
    return 0


def _handle_status(ctx: ShellContext) -> int:
    controller = ctx.editor.controller
    print(f"State:        {controller.state.value}")
    print(f"Mode:         {controller.mode.value}")
    print(f"Tab:          {controller.tab.value if controller.tab else '-'}")
    print(f"Super article: {controller.super_article} ({', '.join(controller.report.matched) or 'no signatures'})")
    print(f"Length:       {len(controller.current_html)} chars")
    if controller.dialog.is_open:
        print(f"Image dialog: open ({controller.dialog.attributes.src})")
    return 0


def _handle_import(path_str: str, ctx: ShellContext) -> int:
    path = Path(path_str).expanduser()
    if not path.is_file():
        print(f"❌ File not found: {path}")
        return 1
    html = path.read_text(encoding="utf-8")
    if call_on_main_loop(ctx.editor.controller.apply_external_value, html):
        ctx.draft.content = ctx.editor.value
        print(f"✅ Imported {len(html)} characters.")
        return 0
    print("Nothing imported: the editor is in source mode or the content is unchanged.")
    return 1


def _handle_paste(parsed: argparse.Namespace, ctx: ShellContext, stdin: Optional[str]) -> int:
    files = []
    for path in parsed.file:
        file = read_image_file(path)
        if file is None:
            return 1
        files.append(file)

    text = parsed.text
    if text is None and not files and parsed.html is None and stdin:
        text = stdin.rstrip("\n")

    payload = ClipboardPayload(files=files, html=parsed.html, text=text)
    handled = run_on_main_loop(ctx.editor.paste(payload))
    return 0 if handled else 1
