# tests/editor/test_wysiwyg_editor.py
import asyncio
import base64

import pytest

from article_editor.controllers.wysiwyg_controller import StructuredEditor, first_image_src
from article_editor.dom.builder import DocumentBuilder
from article_editor.errors import NodeNotFoundError
from article_editor.managers.upload_manager import ImageUploadManager
from article_editor.model import ClipboardPayload, ImageAttributes, ImageFile
from article_editor.utils.style_utils import LayoutDirection

CENTERED_FIGURE = ('<figure class="image-container" '
                   'style="text-align: center; margin-left: auto; margin-right: auto">')


@pytest.fixture
def make_editor(uploads, notifications):
    """Factory voor een rtl-editor met de nep-upload gateway."""

    def _make(html: str = "", **kwargs) -> StructuredEditor:
        kwargs.setdefault("uploads", uploads)
        kwargs.setdefault("notifications", notifications)
        return StructuredEditor(html, builder=DocumentBuilder(LayoutDirection("rtl")), **kwargs)

    return _make


def image_blocks(editor):
    return [b for b in editor.doc.blocks if b.type == "image"]


# --- Uploads & paste ---

def test_paste_png_appends_figure_after_paragraph(make_editor, png, notifications, gateway):
    """Een geplakte 2MB PNG wordt geüpload en als gecentreerde figure na de paragraaf geplaatst."""
    editor = make_editor("<p>hello</p>")
    consumed = asyncio.run(editor.handle_paste(ClipboardPayload(files=[png])))

    assert consumed is True
    assert editor.get_html() == (
        "<p>hello</p>" + CENTERED_FIGURE +
        '<img src="/uploads/img-1-1.png" alt="" loading="lazy" decoding="async" style="width: 100%"/>'
        "</figure>"
    )
    assert len(gateway.calls) == 1
    assert notifications.last.title == "Image uploaded"


def test_on_update_receives_serialization(uploads, notifications, png):
    """Na een upload krijgt on_update de nieuwe HTML."""
    seen = []
    editor = StructuredEditor("<p>x</p>", uploads=uploads, notifications=notifications,
                              on_update=seen.append, builder=DocumentBuilder(LayoutDirection("rtl")))
    asyncio.run(editor.insert_image_from_file(png))
    assert seen and seen[-1] == editor.get_html()
    assert "/uploads/img-1-1.png" in seen[-1]


def test_oversized_image_is_rejected(make_editor, notifications, gateway, png_factory):
    """Een bestand boven 10MB wordt niet geüpload en het document blijft gelijk."""
    editor = make_editor("<p>hello</p>")
    consumed = asyncio.run(editor.handle_paste(ClipboardPayload(files=[png_factory(11 * 1024 * 1024)])))

    assert consumed is True
    assert editor.get_html() == "<p>hello</p>"
    assert gateway.calls == []
    assert notifications.last.is_error
    assert notifications.last.title == "Invalid image"


def test_non_image_file_is_rejected(make_editor, notifications, gateway):
    """Een tekstbestand wordt nooit naar de gateway gestuurd."""
    editor = make_editor("<p>hello</p>")
    text_file = ImageFile(filename="notes.txt", content_type="text/plain", data=b"hi")
    asyncio.run(editor.handle_paste(ClipboardPayload(files=[text_file])))

    assert editor.get_html() == "<p>hello</p>"
    assert gateway.calls == []
    assert notifications.last.is_error


def test_gateway_failure_leaves_document_untouched(make_editor, notifications, png, gateway_factory):
    editor = make_editor("<p>hello</p>", uploads=ImageUploadManager(gateway_factory(fail=True)))
    asyncio.run(editor.handle_paste(ClipboardPayload(files=[png])))

    assert editor.get_html() == "<p>hello</p>"
    assert notifications.last.title == "Image upload failed"
    assert notifications.last.description == "Server error"


def test_second_upload_is_rejected_while_busy(make_editor, notifications, png_factory, gateway_factory):
    """Tijdens een lopende upload wordt een tweede upload geweigerd, niet in de wachtrij gezet."""
    held = gateway_factory(hold=True)
    editor = make_editor("<p>hello</p>", uploads=ImageUploadManager(held))

    async def scenario():
        first = asyncio.create_task(editor.handle_paste(ClipboardPayload(files=[png_factory(filename="a.png")])))
        await asyncio.sleep(0)
        assert editor.uploads.busy
        second = await editor.handle_paste(ClipboardPayload(files=[png_factory(filename="b.png")]))
        busy_notice = notifications.last
        held.release()
        await first
        return second, busy_notice

    second, busy_notice = asyncio.run(scenario())

    assert second is True
    assert busy_notice.title == "Please wait"
    assert [f.filename for f in held.calls] == ["a.png"]
    assert len(image_blocks(editor)) == 1
    assert not editor.uploads.busy


def test_upload_result_ignored_after_destroy(make_editor, png, gateway_factory):
    """Een upload die pas klaar is na het sluiten van de editor wijzigt niets meer."""
    held = gateway_factory(hold=True)
    editor = make_editor("<p>hello</p>", uploads=ImageUploadManager(held))

    async def scenario():
        task = asyncio.create_task(editor.insert_image_from_file(png))
        await asyncio.sleep(0)
        editor.destroy()
        held.release()
        return await task

    assert asyncio.run(scenario()) is False
    assert image_blocks(editor) == []


def test_paste_data_uri_image_is_uploaded(make_editor, gateway):
    """Een <img> met een base64 data-URI wordt gedecodeerd en geüpload."""
    payload = base64.b64encode(b"\x89PNG\r\n\x1a\n" + b"\0" * 32).decode()
    editor = make_editor("<p>hello</p>")
    html = f'<p>copied</p><img src="data:image/png;base64,{payload}">'

    assert asyncio.run(editor.handle_paste(ClipboardPayload(html=html))) is True
    assert len(gateway.calls) == 1
    assert gateway.calls[0].content_type == "image/png"
    assert image_blocks(editor)[0].attrs["src"] == "/uploads/img-1-1.png"


def test_paste_malformed_data_uri_falls_through(make_editor, gateway):
    editor = make_editor("<p>hello</p>")
    html = '<img src="data:image/png;base64,@@not-base64@@">'
    assert asyncio.run(editor.handle_paste(ClipboardPayload(html=html))) is False
    assert gateway.calls == []


def test_paste_remote_image_is_inserted_directly(make_editor, gateway):
    """Een absolute http(s)-afbeelding wordt zonder upload ingevoegd."""
    editor = make_editor("<p>hello</p>")
    html = '<img src="https://cdn.example.com/cat.jpg" alt="cat">'

    assert asyncio.run(editor.handle_paste(ClipboardPayload(html=html))) is True
    assert gateway.calls == []
    assert image_blocks(editor)[0].attrs["src"] == "https://cdn.example.com/cat.jpg"


def test_paste_plain_html_is_not_intercepted(make_editor):
    editor = make_editor("<p>hello</p>")
    assert asyncio.run(editor.handle_paste(ClipboardPayload(html="<p>text</p>"))) is False
    assert asyncio.run(editor.handle_paste(ClipboardPayload(text="text"))) is False


def test_drop_inserts_but_internal_move_does_not(make_editor, png, gateway):
    editor = make_editor("<p>hello</p>")
    assert asyncio.run(editor.handle_drop([png], moved=True)) is False
    assert gateway.calls == []
    assert asyncio.run(editor.handle_drop([png])) is True
    assert len(image_blocks(editor)) == 1


def test_first_image_src():
    assert first_image_src('<p>x</p><img src=" /a.png ">') == "/a.png"
    assert first_image_src("<p>x</p>") is None
    assert first_image_src('<img src="">') is None


# --- Image insertion position ---

def test_insert_image_splits_paragraph_at_caret(make_editor):
    """Een caret midden in tekst splitst de paragraaf rond de afbeelding."""
    editor = make_editor("<p>abcdef</p>")
    editor.select_block(0, 3)
    path = editor.insert_image("/x.png")

    assert path == (1,)
    assert [b.type for b in editor.doc.blocks] == ["paragraph", "image", "paragraph"]
    assert editor.doc.blocks[0].text_content == "abc"
    assert editor.doc.blocks[2].text_content == "def"
    assert editor.selection.kind == "node"


def test_insert_image_at_block_start_goes_before(make_editor):
    editor = make_editor("<p>abc</p>")
    editor.select_block(0, 0)
    assert editor.insert_image("/x.png") == (0,)
    assert [b.type for b in editor.doc.blocks] == ["image", "paragraph"]


def test_insert_image_replaces_empty_paragraph(make_editor):
    editor = make_editor("<p>abc</p><p></p>")
    editor.select_block(1)
    assert editor.insert_image("/x.png") == (1,)
    assert [b.type for b in editor.doc.blocks] == ["paragraph", "image"]


def test_insert_image_after_selected_image(make_editor):
    """Met een afbeelding geselecteerd komt de nieuwe afbeelding er direct na."""
    editor = make_editor("<p>abc</p>")
    first = editor.insert_image("/one.png")
    second = editor.insert_image("/two.png")

    assert second == (first[0] + 1,)
    assert [b.attrs.get("src") for b in image_blocks(editor)] == ["/one.png", "/two.png"]


def test_inserted_image_has_default_attributes(make_editor):
    editor = make_editor("<p>abc</p>")
    path = editor.insert_image("/x.png")
    attrs = editor.image_attributes(path)
    assert (attrs.alt, attrs.width, attrs.alignment) == ("", "100%", "center")


# --- Image accessors ---

def test_resolve_image_from_child_path_or_src(make_editor):
    editor = make_editor('<p>a</p><img src="/a.png"><img src="/b.png">')
    assert editor.resolve_image(path=(1,)) == (1,)
    assert editor.resolve_image(path=(1, 0)) == (1,)
    assert editor.resolve_image(src="/b.png") == (2,)
    assert editor.resolve_image(path=(0,), src="/missing.png") is None


def test_update_image_replaces_attributes(make_editor):
    """Alle attributen worden in één transactie vervangen."""
    editor = make_editor('<img src="/a.png">')
    editor.update_image((0,), ImageAttributes(src="/b.png", alt="B", width="50%",
                                              alignment="right", caption="Bee"))
    html = editor.get_html()
    assert 'src="/b.png"' in html
    assert 'alt="B"' in html
    assert 'style="width: 50%"' in html
    assert "text-align: right; margin-left: auto; margin-right: 0" in html
    assert "<figcaption>Bee</figcaption>" in html


def test_delete_image_removes_only_that_node(make_editor):
    editor = make_editor('<p>a</p><img src="/a.png"><p>b</p>')
    editor.delete_image((1,))
    assert editor.get_html() == "<p>a</p><p>b</p>"


def test_image_operations_on_missing_node_raise(make_editor):
    editor = make_editor("<p>a</p>")
    with pytest.raises(NodeNotFoundError):
        editor.update_image((0,), ImageAttributes(src="/x.png"))
    with pytest.raises(NodeNotFoundError):
        editor.delete_image((3,))


# --- Text & marks ---

def test_toggle_bold_on_range(make_editor):
    editor = make_editor("<p>hello world</p>")
    editor.select_block(0, 0, 5)

    assert editor.toggle_mark("bold")
    assert editor.get_html() == "<p><strong>hello</strong> world</p>"
    assert editor.is_active("bold")

    assert editor.toggle_mark("bold")
    assert editor.get_html() == "<p>hello world</p>"


def test_caret_mark_applies_to_whole_block(make_editor):
    editor = make_editor("<p>hello</p>")
    editor.toggle_mark("italic")
    assert editor.get_html() == "<p><em>hello</em></p>"


def test_set_and_unset_link(make_editor):
    editor = make_editor("<p>hello world</p>")
    editor.select_block(0, 6, 11)
    editor.set_link("https://example.com")
    assert editor.get_html() == (
        '<p>hello <a href="https://example.com" target="_blank" rel="noopener noreferrer nofollow" '
        'class="text-primary underline">world</a></p>'
    )
    editor.unset_link()
    assert editor.get_html() == "<p>hello world</p>"


def test_insert_text_at_caret(make_editor):
    editor = make_editor("<p>hello</p>")
    editor.insert_text(" there")
    assert editor.get_html() == "<p>hello there</p>"
    assert editor.selection.start == 11


def test_undo_and_redo(make_editor):
    editor = make_editor("<p>hello</p>")
    assert not editor.can_undo()
    editor.toggle_mark("bold")

    assert editor.undo()
    assert editor.get_html() == "<p>hello</p>"
    assert editor.can_redo()
    assert editor.redo()
    assert editor.get_html() == "<p><strong>hello</strong></p>"


def test_set_content_clears_history(make_editor):
    editor = make_editor("<p>hello</p>")
    editor.toggle_mark("bold")
    editor.set_content("<p>fresh</p>")
    assert not editor.can_undo()
    assert editor.get_html() == "<p>fresh</p>"


# --- Block commands ---

def test_toggle_heading(make_editor):
    editor = make_editor("<p>title</p>")
    editor.toggle_heading(2)
    assert editor.get_html() == "<h2>title</h2>"
    editor.toggle_heading(2)
    assert editor.get_html() == "<p>title</p>"
    assert not editor.toggle_heading(5)


def test_set_text_align(make_editor):
    editor = make_editor("<p>hello</p>")
    assert editor.set_text_align("center")
    assert editor.get_html() == '<p style="text-align: center">hello</p>'
    assert not editor.set_text_align("diagonal")


def test_toggle_lists(make_editor):
    """Inpakken, van type wisselen en weer uitpakken."""
    editor = make_editor("<p>item</p>")
    editor.toggle_bullet_list()
    assert editor.get_html() == "<ul><li><p>item</p></li></ul>"

    editor.toggle_ordered_list()
    assert editor.get_html() == "<ol><li><p>item</p></li></ol>"

    editor.toggle_ordered_list()
    assert editor.get_html() == "<p>item</p>"


def test_toggle_blockquote(make_editor):
    editor = make_editor("<p>quote</p>")
    editor.toggle_blockquote()
    assert editor.get_html() == "<blockquote><p>quote</p></blockquote>"
    editor.toggle_blockquote()
    assert editor.get_html() == "<p>quote</p>"


def test_insert_content_after_current_block(make_editor):
    editor = make_editor("<p>one</p>")
    assert editor.insert_content("<h2>two</h2>")
    assert editor.get_html() == "<p>one</p><h2>two</h2>"
    assert not editor.insert_content('<img src="javascript:alert(1)">')
