# tests/core/test_drafts.py
import pytest

from mutflex_shell.core.command_registry import register_all_commands
from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.core import execute_sequence
from mutflex_shell.core.managers.draft_manager import DraftManager
from mutflex_shell.core.parser import parse_command_line
from mutflex_shell.model import ArticleDraft, generate_slug


@pytest.mark.parametrize("title,slug", [
    ("Hello World!", "hello-world"),
    ("  Spaces   and -- dashes ", "spaces-and-dashes"),
    ("مرحبا بالعالم", "مرحبا-بالعالم"),
    ("!!!", ""),
])
def test_generate_slug(title, slug):
    assert generate_slug(title) == slug


def test_title_updates_slug_until_set_by_hand():
    """De slug volgt de titel, behalve als hij met de hand is aangepast."""
    draft = ArticleDraft()
    draft.set_title("First Title")
    assert draft.slug == "first-title"

    draft.set_title("Second Title")
    assert draft.slug == "second-title"

    draft.slug = "custom"
    draft.set_title("Third Title")
    assert draft.slug == "custom"


def test_tags_are_stripped():
    assert ArticleDraft(tags=[" news ", "", "  "]).tags == ["news"]


def test_missing_fields():
    draft = ArticleDraft(title="T")
    assert draft.missing_fields() == ["content"]
    assert not draft.is_complete


@pytest.fixture
def manager(tmp_path):
    return DraftManager(tmp_path)


def test_save_load_list_delete(manager):
    draft = ArticleDraft(content="<p>x</p>")
    draft.set_title("Mijn Artikel")

    path = manager.save(draft)
    assert path.name == "mijn-artikel.json"
    assert manager.list_slugs() == ["mijn-artikel"]

    loaded = manager.load("mijn-artikel")
    assert loaded.title == "Mijn Artikel"
    assert loaded.content == "<p>x</p>"

    assert manager.delete("mijn-artikel") is True
    assert manager.load("mijn-artikel") is None


def test_save_requires_title_and_content(manager):
    with pytest.raises(ValueError, match="title, content"):
        manager.save(ArticleDraft())


def test_invalid_file_loads_as_none(manager):
    (manager.drafts_dir / "broken.json").write_text("{not json")
    assert manager.load("broken") is None


# --- 'draft' command handler ---

@pytest.fixture(scope="module", autouse=True)
def registered_commands():
    register_all_commands()


@pytest.fixture
def ctx(manager, uploads):
    return ShellContext(draft_manager=manager, uploads=uploads)


def run(line, ctx):
    return execute_sequence(parse_command_line(line), ctx)


def test_draft_workflow(ctx, capsys):
    """Titel zetten, inhoud bewerken, opslaan en later weer laden."""
    assert run("draft title Hello World", ctx) == 0
    assert ctx.get("article.slug") == "hello-world"

    assert run("draft save", ctx) == 1
    assert "content" in capsys.readouterr().out

    run("editor open <p>body</p>", ctx)
    assert run("draft save", ctx) == 0

    assert run("draft new", ctx) == 0
    assert ctx.editor is None
    assert ctx.draft.title == ""

    assert run("draft load hello-world", ctx) == 0
    assert ctx.draft.content == "<p>body</p>"
    assert run("draft load nothing-here", ctx) == 1


def test_draft_load_updates_open_editor(ctx, manager):
    draft = ArticleDraft(title="Saved", content="<p>saved</p>")
    manager.save(draft)
    run("editor open <p>current</p>", ctx)

    assert run("draft load saved", ctx) == 0
    assert ctx.editor.value == "<p>saved</p>"


def test_draft_slug_regenerates(ctx):
    run("draft title Some Title", ctx)
    run("draft slug Handmatige Slug", ctx)
    assert ctx.draft.slug == "handmatige-slug"
    run("draft slug", ctx)
    assert ctx.draft.slug == "some-title"
