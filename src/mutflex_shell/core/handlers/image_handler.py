# src/mutflex_shell/core/handlers/image_handler.py
import logging
from typing import Any, Dict, List, Optional

from article_editor.model import ALIGNMENTS, WIDTH_OPTIONS, ModeState
from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.loop_runner import call_on_main_loop, run_on_main_loop
from mutflex_shell.core.utils.editor_utils import read_image_file, read_text_argument, require_editor

logger = logging.getLogger(__name__)

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "insert": None,
    "list": None,
    "open": None,
    "show": None,
    "alt": None,
    "caption": None,
    "width": {w: None for w in WIDTH_OPTIONS},
    "align": {a: None for a in ALIGNMENTS},
    "url": None,
    "replace": None,
    "save": None,
    "delete": None,
    "close": None,
}

image_help_text = """
IMAGE:
  image insert <path>                  Upload an image and insert it at the cursor (WYSIWYG).
  image list                           List the images of the live surface.
  image open <n|src>                   Open the properties dialog for image n, or by its URL.
  image show                           Show the fields of the open dialog.
  image alt <text> | caption <text>    Edit the alt text or caption.
  image width <25%|50%|75%|100%>       Edit the display width.
  image align <left|center|right>      Edit the alignment.
  image url <url> | replace <path>     Point at another URL, or upload a replacement.
  image save | delete | close          Apply, remove the image, or discard the edits.
""".strip()


def handle_image(args: List[str], ctx: ShellContext, stdin: Optional[str] = None) -> int:
    if not args:
        print(image_help_text)
        return 0

    editor = require_editor(ctx)
    if editor is None:
        return 1
    dialog = editor.dialog
    command, rest = args[0], args[1:]

    if command == "insert":
        if not rest:
            print("Usage: image insert <path>")
            return 1
        if editor.state is not ModeState.WYSIWYG:
            print("❌ Use 'editor paste --file' or 'editor drop' in the visual source tab.")
            return 1
        file = read_image_file(rest[0])
        if file is None:
            return 1
        return 0 if run_on_main_loop(editor.insert_image_file(file)) else 1

    if command == "list":
        return call_on_main_loop(_list_images, editor)

    if command == "open":
        return call_on_main_loop(_open_image, editor, rest)

    # Everything below edits the open dialog.
    if not dialog.is_open:
        print("❌ No image selected. Use 'image open <n>' first.")
        return 1

    try:
        if command == "show":
            for key, value in dialog.attributes.model_dump().items():
                print(f"  {key:<10} {value}")
            return 0
        if command == "alt":
            dialog.set_alt(read_text_argument(rest, stdin))
            return 0
        if command == "caption":
            dialog.set_caption(read_text_argument(rest, stdin))
            return 0
        if command == "width":
            dialog.set_width(rest[0] if rest else "")
            return 0
        if command == "align":
            dialog.set_alignment(rest[0] if rest else "")
            return 0
    except ValueError as e:
        print(f"❌ {e}")
        return 1

    if command == "url":
        return 0 if dialog.set_source_url(rest[0] if rest else "") else 1
    if command == "replace":
        file = read_image_file(rest[0]) if rest else None
        if file is None:
            return 1
        return 0 if run_on_main_loop(dialog.replace_source(file)) else 1
    if command == "save":
        return 0 if call_on_main_loop(dialog.save) else 1
    if command == "delete":
        return 0 if call_on_main_loop(dialog.delete) else 1
    if command == "close":
        call_on_main_loop(dialog.close)
        return 0

    print(f"Unknown command: 'image {command}'.")
    return 1


def _list_images(editor) -> int:
    if editor.state is ModeState.WYSIWYG:
        structured = editor.editor
        for index, path in enumerate(structured.image_paths()):
            attrs = structured.image_attributes(path)
            print(f"  [{index}] {attrs.src}  ({attrs.width}, {attrs.alignment})")
        return 0
    if editor.state is ModeState.SOURCE_VISUAL:
        for index, img in enumerate(editor.visual.document.images()):
            print(f"  [{index}] {img.get('src')}")
        return 0
    print("❌ Images can be listed in the WYSIWYG surface or the visual source tab.")
    return 1


def _open_image(editor, rest: List[str]) -> int:
    """Opens the dialog for image n of the live surface, or for the image with that src."""
    if not rest:
        print("Usage: image open <n|src>")
        return 1
    key = rest[0]
    index = int(key) if key.isdigit() else None

    if editor.state is ModeState.WYSIWYG:
        if index is None:
            attributes = editor.click_image(src=key)
        else:
            paths = editor.editor.image_paths()
            attributes = editor.click_image(path=paths[index]) if index < len(paths) else None
    elif editor.state is ModeState.SOURCE_VISUAL:
        if index is None:
            img = editor.visual.find_image(key)
        else:
            images = editor.visual.document.images()
            img = images[index] if index < len(images) else None
        attributes = editor.click_visual_element(img) if img is not None else None
    else:
        attributes = None

    if attributes is None:
        print(f"❌ Image {key} not found.")
        return 1
    print(f"🖼  Editing {attributes.src} ({attributes.width}, {attributes.alignment})")
    return 0
