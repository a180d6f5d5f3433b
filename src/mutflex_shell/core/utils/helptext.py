# src/mutflex_shell/core/utils/helptext.py
from mutflex_shell.core.command_registry import COMMAND_HELP_TEXTS

HEADER_HELP_TEXT = """
📝 Mutflex Editor Shell - Help

An interactive shell for writing articles with the rich-text editor.

---
OPERATORS
---
  A ; B               Execute B after A, regardless of the outcome.
  A && B              Execute B only if A was successful (exit code 0).
  A || B              Execute B only if A failed (exit code != 0).
  A | B               Pipe the output (stdout) of A as input (stdin) for B.

---
VARIABLES & SHORTHANDS
---
  Variables are accessed using @{name}, e.g., @{article.slug}.
  Dotted paths reach into the session: @{draft.title}, @{editor.state}.

  set @{name}=value   Create or overwrite a variable.
  Shorthand:          @{name}=value

  get @{name}         Display the value of a variable.
  Shorthand:          @{name}

  !h                  Trigger command history completion.

---
COMMANDS
---
GENERAL:
  help                Show this help text.
  quit                Exit the shell.
  cls                 Clear the screen.
  echo <text...>      Display the specified text.
""".strip()


def get_help_text() -> str:
    """Assembles the header and every discovered command help text."""
    parts = [HEADER_HELP_TEXT]
    for command_name in sorted(COMMAND_HELP_TEXTS):
        parts.append(COMMAND_HELP_TEXTS[command_name])
    return "\n\n".join(parts)
