# src/mutflex_shell/core/handlers/core/cls_handler.py
import os
import platform
from typing import List, Optional

from mutflex_shell.core.context.shell_context import ShellContext


def handle_cls(_args: List[str], _ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """Clears the terminal screen."""
    command = "cls" if "windows" in platform.system().lower() else "clear"
    return 0 if os.system(command) == 0 else 1
