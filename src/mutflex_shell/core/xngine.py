# src/mutflex_shell/core/xngine.py
from __future__ import annotations

import inspect
import io
import logging
import re
from contextlib import redirect_stdout
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple

from mutflex_shell.core.context.shell_context import ShellContext


class ExecuteEngine:
    """
    Runs parsed command segments: operator handling (`;`, `&&`, `||`),
    pipelines (`|` feeds stdout to the next handler's stdin) and @{var}
    expansion.
    """

    def __init__(
            self,
            *,
            command_registry: Dict[str, Callable[..., int]],
            var_pattern: Pattern[str],
            maybe_expand_args: Callable[[str, List[Any], ShellContext], List[str]],
            post_refresh: Callable[[ShellContext], None],
            logger: Optional[logging.Logger] = None,
    ) -> None:
        self._commands = command_registry
        self._VAR_PATTERN = var_pattern
        self._maybe_expand_args = maybe_expand_args
        self._post_refresh = post_refresh
        self._log = logger or logging.getLogger(__name__)

    def expand_context_vars(self, text: str, ctx: ShellContext) -> str:
        """Performs @{var} expansion in the given text. Unknown names stay as typed."""
        def repl(m: re.Match) -> str:
            end = m.end()
            if end < len(text) and text[end] == '=':
                return m.group(0)
            val = self.resolve_var(m.group(1), ctx)
            return str(val) if val is not None else m.group(0)

        return self._VAR_PATTERN.sub(repl, text)

    def execute_sequence(
            self,
            commands: List[Tuple[str, List[str], Optional[str]]],
            context: Optional[ShellContext] = None
    ) -> int:
        """Executes a parsed command line and returns the last exit code (130 = quit)."""
        ctx = context or ShellContext()
        if not commands:
            return 0

        last_exit = 0
        i = 0
        n = len(commands)

        while i < n:
            name, raw_args, op = commands[i]

            # A skipped command takes its whole pipeline with it.
            if (op == "&&" and last_exit != 0) or (op == "||" and last_exit == 0):
                i += 1
                while i < n and commands[i][2] == "|":
                    i += 1
                continue

            segment: List[Tuple[str, List[str]]] = [(name, raw_args)]
            j = i + 1
            while j < n and commands[j][2] == "|":
                segment.append((commands[j][0], commands[j][1]))
                j += 1

            stdin: Optional[str] = None
            for k, (seg_name, seg_raw_args) in enumerate(segment):
                is_last = k == len(segment) - 1
                seg_args = self._maybe_expand_args(seg_name, seg_raw_args, ctx)
                handler = self._commands.get(seg_name)

                if handler is None:
                    print(f"command not found: {seg_name}")
                    last_exit = 127
                elif is_last:
                    last_exit = self._call_handler(handler, seg_args, ctx, stdin)
                else:
                    buf = io.StringIO()
                    with redirect_stdout(buf):
                        last_exit = self._call_handler(handler, seg_args, ctx, stdin)
                    stdin = buf.getvalue()

                self._post_refresh(ctx)
                if last_exit == 130:
                    return 130
                if last_exit != 0 and not is_last:
                    break

            i = j

        return last_exit

    def _call_handler(self, handler, args, ctx, stdin) -> int:
        try:
            if len(inspect.signature(handler).parameters) >= 3:
                return int(handler(args, ctx, stdin))
            return int(handler(args, ctx))
        except Exception as e:
            self._log.error("Command failed: %s", e, exc_info=True)
            print(f"❌ Error: {e}")
            return 1

    def resolve_var(self, name: str, ctx: ShellContext) -> Optional[Any]:
        """
        Resolves a context variable, supporting direct names and dotted paths
        into the draft or editor (e.g. 'draft.title', 'editor.state').
        """
        variables = getattr(ctx, "_vars", {})
        if name in variables:
            return variables[name]

        head, *rest = name.split(".")
        roots = {
            "draft": getattr(ctx, "draft", None),
            "editor": getattr(ctx, "editor", None),
            "ctx": ctx,
        }
        if head in roots and rest:
            return self._resolve_path(roots[head], rest)
        return None

    @staticmethod
    def _resolve_path(obj: Any, parts: List[str]) -> Optional[Any]:
        for part in parts:
            if obj is None:
                return None
            if isinstance(obj, dict):
                obj = obj.get(part)
            else:
                obj = getattr(obj, part, None)
        if hasattr(obj, "value") and not isinstance(obj, (str, int, float, bool)):
            obj = obj.value
        return obj
