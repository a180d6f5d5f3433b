# src/mutflex_shell/core/managers/completion_manager.py
import logging
import re
from typing import Any, Dict, Iterable

from prompt_toolkit.completion import Completion
from prompt_toolkit.document import Document
from prompt_toolkit.history import History

from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)

# The last operator before the cursor starts a new command segment.
OPERATOR_PATTERN = re.compile(r"(\s+(?:&&|\|\||;|\|)\s+)")


class CompletionManager:
    """
    Produces completion suggestions for the current command segment:
    commands, their subcommands, @{variables} and the `!h` history trigger.
    """

    def __init__(self, shell_context: ShellContext, history: History, command_hierarchy: Dict[str, Any]):
        self.ctx = shell_context
        self.history = history
        self.command_hierarchy = command_hierarchy

    def generate_completions(self, document: Document) -> Iterable[Completion]:
        text_before_cursor = document.text_before_cursor

        if text_before_cursor.endswith('!h'):
            yield from self._history_completions()
            return

        segment_start = 0
        for match in OPERATOR_PATTERN.finditer(text_before_cursor):
            segment_start = match.end()

        segment = text_before_cursor[segment_start:]
        words = segment.lstrip().split()
        word = document.get_word_before_cursor(WORD=True)
        ends_with_space = segment.endswith(" ")

        if "@{" in segment and (word.startswith("@{") or document.char_before_cursor == '{'):
            yield from self._variable_completions(word)
            return

        if not words or (len(words) == 1 and not ends_with_space):
            yield from self._command_completions(word)
            return

        completing_second = (len(words) == 1 and ends_with_space) or (len(words) == 2 and not ends_with_space)
        if not completing_second:
            return

        entry = self.command_hierarchy.get(words[0])
        if isinstance(entry, dict):
            partial = words[1] if len(words) == 2 else ""
            for sub in sorted(entry):
                if sub.startswith(partial):
                    yield Completion(sub, start_position=-len(partial))

    def _command_completions(self, word: str) -> Iterable[Completion]:
        for command_name in sorted(self.command_hierarchy):
            if command_name.startswith(word):
                yield Completion(command_name, start_position=-len(word), display_meta="Command")

    def _history_completions(self) -> Iterable[Completion]:
        max_len = config_manager.get_nested("autocomplete.h_max_len", 5)
        recent, seen = [], set()
        for command in reversed(self.history.get_strings()):
            command = command.strip()
            if command and command != '!h' and command not in seen:
                seen.add(command)
                recent.append(command)
                if len(recent) >= max_len:
                    break
        for command in recent:
            yield Completion(command, start_position=-2, display_meta="Command History")

    def _variable_completions(self, word: str) -> Iterable[Completion]:
        prefix = word if word.startswith("@{") else ""
        for var_name in sorted(self.ctx._vars):
            suggestion = f"@{{{var_name}}}"
            if suggestion.startswith(prefix):
                yield Completion(suggestion, start_position=-len(prefix), display_meta="Context Variable")
