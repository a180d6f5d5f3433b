# src/mutflex_shell/core/handlers/server_handler.py
import logging
from typing import Any, Dict, List, Optional

from article_editor.utils.launcher import find_free_port, launch_upload_server_detached
from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "start": None,
    "stop": None,
    "status": None,
}

server_help_text = """
SERVER:
  server start                         Start the local upload gateway in the background.
  server stop                          Stop it.
  server status                        Show whether it is running.
""".strip()


def handle_server(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    command = args[0] if args else "status"
    process = ctx.server_process
    running = process is not None and process.poll() is None

    if command == "status":
        print("🟢 Upload gateway running." if running else "⚪ Upload gateway not running.")
        return 0

    if command == "start":
        if running:
            print("Upload gateway is already running.")
            return 0
        port = find_free_port(int(config_manager.get_nested("server.port", 5000)), 10)
        if port is None:
            print("❌ Error: No free port found for the upload gateway.")
            return 1
        process = launch_upload_server_detached(port)
        if process is None:
            return 1
        ctx.server_process = process
        # Point the editor's uploads at the port we actually got.
        endpoint = f"http://127.0.0.1:{port}/api/admin/upload"
        config_manager.set_nested("editor.upload.endpoint", endpoint)
        if ctx.gateway is not None:
            ctx.gateway.endpoint = endpoint
        return 0

    if command == "stop":
        if not running:
            print("Upload gateway is not running.")
            return 1
        process.terminate()
        ctx.server_process = None
        print("Upload gateway stopped.")
        return 0

    print(f"Unknown command: 'server {command}'.")
    return 1
