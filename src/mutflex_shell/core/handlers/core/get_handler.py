# src/mutflex_shell/core/handlers/core/get_handler.py
from typing import List, Optional

from mutflex_shell.core import core as shell_core
from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.parser import GET_PATTERN


def handle_get(args: List[str], ctx: ShellContext, _stdin: Optional[str] = None) -> int:
    """Prints the value of a context variable: `get @{name}`."""
    if not args:
        print("Usage: get @{name}")
        return 1

    m = GET_PATTERN.match(args[0].strip())
    if not m:
        print(f"Invalid variable format: {args[0]}. Must be in the format @{{name}}.")
        return 1

    key = m.group(1)
    val = shell_core.XNGINE.resolve_var(key, ctx)
    if val is None:
        print(f"Error: Variable '@{{{key}}}' not found in context.")
        return 1
    print(val)
    return 0
