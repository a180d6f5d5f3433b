# src/mutflex_shell/core/handlers/config_handler.py
import json
import logging
from typing import Any, Dict, List, Optional

from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "list": None,
    "get": None,
    "set": None,
    "reset": None,
}

config_help_text = """
CONFIG:
  config list                          Show the current configuration as JSON.
  config get <key>                     Show one value (e.g., editor.layout_direction).
  config set <key> <value>             Set a value for this session (e.g., editor.visual_edit.debounce_ms 500).
  config reset                         Reload the configuration from settings.json.
  Editor settings apply to editors opened afterwards.
""".strip()


def handle_config(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """Views and modifies the session configuration."""
    if not args:
        print(config_help_text)
        return 1

    command = args[0]

    if command == "list":
        print(json.dumps(config_manager.get_all(), indent=2, ensure_ascii=False))
        return 0

    if command == "get":
        if len(args) < 2:
            print("Usage: config get <key>")
            return 1
        value = config_manager.get_nested(args[1])
        if value is None:
            print(f"❌ No config value at '{args[1]}'.")
            return 1
        print(json.dumps(value, ensure_ascii=False) if isinstance(value, (dict, list)) else value)
        return 0

    if command == "set":
        if len(args) < 3:
            print("Usage: config set <key> <value>")
            return 1
        key_path = args[1]
        value = " ".join(args[2:])
        if value.startswith('"') and value.endswith('"'):
            value = value[1:-1]

        if not config_manager.set_nested(key_path, value):
            print(f"❌ Error: Failed to set config value for key '{key_path}'.")
            return 1
        new_value = config_manager.get_nested(key_path)
        print(f"✅ Config updated: {key_path} = {new_value} (type: {type(new_value).__name__})")
        if key_path.startswith("editor.") and ctx.editor is not None:
            print("   Reopen the editor ('editor open') to apply it.")
        return 0

    if command == "reset":
        config_manager.reset()
        print("✅ Configuration has been reset to the values from settings.json.")
        return 0

    print(f"Unknown command: 'config {command}'.")
    return 1
