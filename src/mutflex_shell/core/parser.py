# src/mutflex_shell/core/parser.py
from __future__ import annotations

import re
import shlex
from typing import List, Optional, Tuple

OPERATORS: set[str] = {"&&", "||", ";", "|"}
# @{name}
VAR_PATTERN = re.compile(r"@\{([^}]+)\}")
# @{name}=value
SET_PATTERN = re.compile(r"^@\{([^}=]+)\}=(.*)$")
# @{name} on its own
GET_PATTERN = re.compile(r"^@\{([A-Za-z_][\w\.]*)\}$")

CommandSegment = Tuple[str, List[str], Optional[str]]


def _tokenize(line: str) -> List[str]:
    try:
        return shlex.split(line, posix=True)
    except ValueError:
        # Unbalanced quotes: fall back to plain whitespace splitting.
        return line.split()


def parse_command_line(line: str) -> List[CommandSegment]:
    """
    Splits a shell line into command segments.

    Each segment is `(command, args, operator_before)`. The `@{var}=value`
    and `@{var}` shorthands become `set` and `get` commands.

    Args:
        line (str): The raw input string from the shell.

    Returns:
        List[CommandSegment]: The segments in input order.
    """
    text = (line or "").strip()
    if not text:
        return []

    segments: List[CommandSegment] = []
    name: Optional[str] = None
    args: List[str] = []
    operator: Optional[str] = None

    for token in _tokenize(text):
        if token in OPERATORS:
            if name is not None:
                segments.append((name, args, operator))
            name, args, operator = None, [], token
            continue

        if name is not None:
            args.append(token)
        elif SET_PATTERN.match(token):
            name, args = "set", [token]
        elif GET_PATTERN.fullmatch(token):
            name, args = "get", [token]
        else:
            name = token

    if name is not None:
        segments.append((name, args, operator))
    return segments
