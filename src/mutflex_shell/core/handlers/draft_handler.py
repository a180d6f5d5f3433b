# src/mutflex_shell/core/handlers/draft_handler.py
import logging
from typing import Any, Dict, List, Optional

from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.managers.draft_manager import DraftManager
from mutflex_shell.core.utils.editor_utils import read_text_argument
from mutflex_shell.model import ArticleDraft, generate_slug

logger = logging.getLogger(__name__)

COMMAND_HIERARCHY: Dict[str, Optional[Dict[str, Any]]] = {
    "new": None,
    "title": None,
    "slug": None,
    "excerpt": None,
    "show": None,
    "save": None,
    "load": None,
    "list": None,
}

draft_help_text = """
DRAFT:
  draft new                            Start an empty article.
  draft title <text>                   Set the title (the slug follows unless set by hand).
  draft slug [text]                    Set the slug, or regenerate it from the title.
  draft excerpt <text>                 Set the excerpt.
  draft show                           Show the draft fields.
  draft save                           Save the draft (title and content are required).
  draft load <slug> | list             Load a saved draft, or list them.
""".strip()


def _manager(ctx: ShellContext) -> DraftManager:
    if ctx.draft_manager is None:
        ctx.draft_manager = DraftManager()
    return ctx.draft_manager


def handle_draft(args: List[str], ctx: ShellContext, stdin: Optional[str] = None) -> int:
    if not args:
        print(draft_help_text)
        return 0

    command, rest = args[0], args[1:]
    draft = ctx.draft

    if command == "new":
        ctx.close_editor()
        ctx.set_draft(ArticleDraft())
        print("📄 New draft started.")
        return 0

    if command == "title":
        draft.set_title(read_text_argument(rest, stdin))
        ctx.export_draft_variables()
        print(f"Title: {draft.title}  (slug: {draft.slug})")
        return 0

    if command == "slug":
        draft.slug = generate_slug(" ".join(rest) if rest else draft.title)
        ctx.export_draft_variables()
        print(f"Slug: {draft.slug}")
        return 0

    if command == "excerpt":
        draft.excerpt = read_text_argument(rest, stdin)
        return 0

    if command == "show":
        print(f"Title:   {draft.title}")
        print(f"Slug:    {draft.slug}")
        print(f"Excerpt: {draft.excerpt}")
        print(f"Content: {len(draft.content)} chars")
        return 0

    if command == "save":
        try:
            path = _manager(ctx).save(draft)
        except ValueError as e:
            print(f"❌ {e}")
            return 1
        print(f"💾 Draft saved to {path}")
        return 0

    if command == "load":
        if not rest:
            print("Usage: draft load <slug>")
            return 1
        loaded = _manager(ctx).load(rest[0])
        if loaded is None:
            print(f"❌ No draft named '{rest[0]}'.")
            return 1
        ctx.set_draft(loaded)
        print(f"📄 Loaded '{loaded.title}'.")
        return 0

    if command == "list":
        slugs = _manager(ctx).list_slugs()
        if not slugs:
            print("  (no drafts)")
        for slug in slugs:
            print(f"  - {slug}")
        return 0

    print(f"Unknown command: 'draft {command}'.")
    return 1
