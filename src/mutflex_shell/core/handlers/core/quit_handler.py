# src/mutflex_shell/core/handlers/core/quit_handler.py
from mutflex_shell.core.context.shell_context import ShellContext


def handle_quit(_args, ctx: ShellContext, _stdin=None) -> int:
    """Closes the editing session and signals the shell to stop."""
    ctx.close_editor()
    return 130  # Special exit code for 'quit'
