# tests/core/test_editor_handlers.py
import asyncio
import threading

import pytest

from article_editor.model import ModeState
from mutflex_shell.core.command_registry import register_all_commands
from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.core import execute_sequence
from mutflex_shell.core import loop_runner
from mutflex_shell.core.loop_runner import call_on_main_loop
from mutflex_shell.core.managers.draft_manager import DraftManager
from mutflex_shell.core.parser import parse_command_line

SUPER_HTML = '<div style="display: flex; box-shadow: 0 1px 3px #000"><p>Layout</p></div>'
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\0" * 128


@pytest.fixture(scope="module", autouse=True)
def registered_commands():
    """Registreert alle handlers eenmalig, zoals de shell bij het opstarten doet."""
    register_all_commands()


@pytest.fixture
def ctx(tmp_path, uploads):
    """Een ShellContext met een tijdelijke drafts-map en de nep-upload gateway."""
    return ShellContext(draft_manager=DraftManager(tmp_path / "drafts"), uploads=uploads)


@pytest.fixture
def run(ctx):
    """Voert een shell-regel uit en geeft de exit code terug."""

    def _run(line: str) -> int:
        return execute_sequence(parse_command_line(line), ctx)

    return _run


@pytest.fixture
def png_path(tmp_path):
    path = tmp_path / "photo.png"
    path.write_bytes(PNG_BYTES)
    return path


def test_commands_need_an_open_editor(run, capsys):
    assert run("mode source") == 1
    assert "No editor open" in capsys.readouterr().out


def test_source_edit_roundtrip_updates_draft(run, ctx):
    """Broncode aanpassen in de edit-tab komt via on_change in het concept terecht."""
    assert run("editor open <p>hello</p>") == 0
    assert ctx.editor.state is ModeState.WYSIWYG

    assert run("mode source edit") == 0
    assert run('source set "<p>changed</p>"') == 0
    assert ctx.draft.content == "<p>changed</p>"

    assert run("mode wysiwyg") == 0
    assert ctx.editor.editor.get_html() == "<p>changed</p>"
    assert ctx.get("editor.state") == "wysiwyg"


def test_source_set_outside_edit_tab_fails(run):
    run("editor open <p>hello</p>")
    assert run('source set "<p>x</p>"') == 1


def test_super_article_file_needs_confirmation(run, ctx, tmp_path, capsys):
    html_file = tmp_path / "article.html"
    html_file.write_text(SUPER_HTML, encoding="utf-8")

    assert run(f"editor open --file {html_file}") == 0
    assert ctx.editor.state is ModeState.SOURCE_VISUAL
    assert ctx.get("editor.super") == "true"

    capsys.readouterr()
    assert run("mode wysiwyg") == 0
    assert "advanced styling" in capsys.readouterr().out
    assert ctx.editor.state is ModeState.SWITCH_WARNING_PENDING

    assert run("mode confirm") == 0
    assert ctx.editor.state is ModeState.WYSIWYG
    assert ctx.draft.content == "<p>Layout</p>"


def test_confirm_without_warning_falls_through(run, capsys):
    run("editor open <p>x</p>")
    assert run("mode confirm || echo fallback") == 0
    assert "fallback" in capsys.readouterr().out


def test_image_insert_and_dialog(run, ctx, png_path):
    """Afbeelding uploaden, via het dialoog bewerken en opslaan."""
    run("editor open <p>hello</p>")

    assert run(f"image insert {png_path}") == 0
    assert "/uploads/img-1-1.png" in ctx.draft.content

    assert run("image open 0") == 0
    assert run("image alt A cat") == 0
    assert run("image width 50%") == 0
    assert run("image width 33%") == 1
    assert run("image save") == 0

    assert 'alt="A cat"' in ctx.draft.content
    assert 'style="width: 50%"' in ctx.draft.content
    assert run("image alt x") == 1  # dialog closed after save


def test_image_delete_in_visual_tab(run, ctx):
    run('editor open "<p>a</p><img src=\'/a.png\'>"')
    run("mode source visual")

    assert run("image open 0") == 0
    assert run("image delete") == 0
    assert "img" not in ctx.draft.content


def test_visual_input_and_sync(run, ctx):
    run("editor open <p>a</p>")
    run("mode source visual")

    assert run("source input <p>typed</p>") == 0
    assert run("source sync") == 0
    assert ctx.draft.content == "<p>typed</p>"


def test_paste_text_and_unsafe_html(run, ctx):
    run("editor open <p>hello</p>")
    assert run('editor paste --text " world"') == 0
    assert ctx.draft.content == "<p>hello world</p>"

    assert run('editor paste --html "<img src=\'javascript:alert(1)\'>"') == 1
    assert ctx.draft.content == "<p>hello world</p>"


def test_drop_rejects_non_image(run, ctx, tmp_path, capsys):
    notes = tmp_path / "notes.txt"
    notes.write_text("hi")
    run("editor open <p>hello</p>")

    run(f"editor drop {notes}")
    assert "Invalid image" in capsys.readouterr().out
    assert ctx.draft.content == "<p>hello</p>"


def test_format_commands(run, ctx):
    run("editor open <p>hello world</p>")
    assert run("format select 0 0 5") == 0
    assert run("format bold") == 0
    assert ctx.draft.content == "<p><strong>hello</strong> world</p>"

    assert run("format heading 2") == 0
    assert ctx.draft.content == "<h2><strong>hello</strong> world</h2>"

    assert run("format undo && format undo") == 0
    assert ctx.draft.content == "<p>hello world</p>"


def test_format_needs_wysiwyg(run):
    run("editor open <p>x</p>")
    run("mode source edit")
    assert run("format bold") == 1


def test_editor_export_and_import(run, ctx, tmp_path):
    run("editor open <p>one</p>")
    target = tmp_path / "out.html"
    assert run(f"editor export {target}") == 0
    assert target.read_text(encoding="utf-8") == "<p>one</p>"

    source = tmp_path / "in.html"
    source.write_text("<p>two</p>", encoding="utf-8")
    assert run(f"editor import {source}") == 0
    assert ctx.draft.content == "<p>two</p>"


def test_quit_closes_editor(run, ctx):
    run("editor open <p>x</p>")
    assert run("quit") == 130
    assert ctx.editor is None


def test_variables_via_shorthands(run, capsys):
    assert run("@{greeting}=hallo") == 0
    assert run("echo @{greeting} wereld") == 0
    assert run("@{greeting}") == 0
    out = capsys.readouterr().out
    assert "hallo wereld" in out
    assert out.strip().endswith("hallo")


# --- Achtergrond-loop ---

@pytest.fixture
def background_loop(monkeypatch):
    """Een draaiende event loop op een eigen thread, zoals de shell die opstart."""
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    monkeypatch.setattr(loop_runner, "_MAIN_LOOP", loop)
    yield loop, thread
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.close()


def test_call_on_main_loop_runs_on_the_loop_thread(background_loop):
    _, thread = background_loop
    assert call_on_main_loop(threading.get_ident) == thread.ident


def test_call_on_main_loop_inside_a_running_loop_calls_in_place():
    async def scenario():
        return call_on_main_loop(threading.get_ident)

    assert asyncio.run(scenario()) == threading.get_ident()


def test_mode_switch_flushes_visual_edit_on_the_loop_thread(background_loop, run, ctx):
    """De debounce-timer en de tab-wissel raken de editor vanaf dezelfde thread."""
    _, thread = background_loop
    run("editor open <p>a</p>")
    assert run("mode source visual") == 0

    controller = ctx.editor.controller
    forward = controller.on_change
    threads = []

    def spy(html):
        threads.append(threading.get_ident())
        forward(html)

    controller.on_change = spy

    assert run("source input <p>typed</p>") == 0
    assert run("mode source edit") == 0
    assert ctx.draft.content == "<p>typed</p>"
    assert threads == [thread.ident]

    assert run("editor close") == 0
    assert ctx.editor is None


def test_image_open_by_src(run, ctx, capsys):
    run('editor open "<p>a</p><img src=\'/a.png\'><img src=\'/b.png\'>"')
    assert run("image open /b.png") == 0
    assert ctx.editor.dialog.attributes.src == "/b.png"
    run("image close")

    run("mode source visual")
    assert run("image open /a.png") == 0
    assert ctx.editor.dialog.attributes.src == "/a.png"
    run("image close")

    assert run("image open /nope.png") == 1
    assert "Image /nope.png not found" in capsys.readouterr().out
