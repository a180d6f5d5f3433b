from __future__ import annotations

import asyncio
import logging
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer
from prompt_toolkit.document import Document
from prompt_toolkit.history import FileHistory

from mutflex_shell.core.command_registry import COMMAND_HIERARCHY, register_all_commands
from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.core import execute_sequence, parse_command_line
from mutflex_shell.core.loop_runner import ensure_background_loop, run_on_main_loop
from mutflex_shell.core.managers.completion_manager import CompletionManager
from mutflex_shell.core.managers.config_manager import config_manager
from mutflex_shell.core.managers.draft_manager import DraftManager
from mutflex_shell.core.utils.configure_logging import configure_logger
from mutflex_shell.core.utils.path_utils import PathUtils

configure_logger(
    config_manager.get_nested("debug.level", "WARNING"),
    config_manager.get_nested("debug.modules"),
    config_manager.get_nested("debug.silenced"),
)
logger = logging.getLogger(__name__)


def _setup_windows_event_loop_if_needed() -> None:
    """Installs Windows compatible asyncio policy if possible."""
    if not sys.platform.startswith("win"):
        return
    try:
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
        logger.info("Using WindowsSelectorEventLoopPolicy for asyncio on Windows.")
    except AttributeError as exc:  # pragma: no cover
        logger.warning("Could not set WindowsSelectorEventLoopPolicy: %s", exc)


class PromptToolkitCompleter(Completer):
    """Adapts the CompletionManager to prompt_toolkit's Completer interface."""

    def __init__(self, manager: CompletionManager):
        self.manager = manager

    def get_completions(self, document: Document, complete_event):
        yield from self.manager.generate_completions(document)


def _shutdown(ctx: ShellContext) -> None:
    ctx.close_editor()
    if ctx.server_process is not None and ctx.server_process.poll() is None:
        ctx.server_process.terminate()
    if ctx.gateway is not None:
        run_on_main_loop(ctx.gateway.close())


def start_shell() -> None:
    """Starts the interactive REPL of the editor shell."""
    _setup_windows_event_loop_if_needed()
    register_all_commands()
    ensure_background_loop()
    logger.debug("Background asyncio event loop is running.")

    ctx = ShellContext(draft_manager=DraftManager())

    print("Welcome to the Mutflex Editor Shell (type 'help' for commands)")

    history_path = PathUtils.get_shell_history_file()
    history = FileHistory(str(history_path))

    completion_manager = CompletionManager(ctx, history, COMMAND_HIERARCHY)
    session = PromptSession(
        history=history,
        completer=PromptToolkitCompleter(completion_manager),
        complete_while_typing=True,
    )
    ctx.prompt_session = session
    logger.info("Shell startup; history file at: %s", history_path)

    try:
        while True:
            try:
                default_text = ctx.next_prompt_buffer or ""
                ctx.next_prompt_buffer = None
                prompt = f"Mutflex[{ctx.editor.state.value}]>> " if ctx.editor else "Mutflex>> "
                line = session.prompt(prompt, default=default_text).strip()
            except (EOFError, KeyboardInterrupt):
                break

            if not line:
                continue

            commands = parse_command_line(line)
            if not commands:
                continue

            if execute_sequence(commands, ctx) == 130:
                break
    finally:
        _shutdown(ctx)
        print("Bye!")


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for running the shell from the command line."""
    start_shell()
    return 0


if __name__ == "__main__":
    sys.exit(main())
