# tests/editor/test_services.py
import asyncio
import base64

import aiohttp
import pytest

from article_editor.errors import ImageValidationError, UploadBusyError, UploadError
from article_editor.managers.notification_manager import NotificationManager
from article_editor.managers.upload_manager import ImageUploadManager
from article_editor.model import ImageFile
from article_editor.services.image_validation_service import ImageValidationService
from article_editor.services.super_article_service import analyze, detect_super_article
from article_editor.services.upload_gateway_service import UploadGatewayService
from article_editor.utils.debounce import Debouncer


# --- Advanced styling detection ---

def test_two_signatures_make_a_super_article():
    html = ('<section style="background-image: linear-gradient(#fff, #000)">'
            '<div style="box-shadow: 0 0 4px #000">x</div></section>')
    assert detect_super_article(html) is True


def test_single_signature_is_not_enough():
    """Eén afgeronde hoek maakt nog geen super-artikel."""
    report = analyze('<img style="border-radius: 8px" src="/a.png">')
    assert report.matched == ["border_radius"]
    assert report.is_super_article is False


@pytest.mark.parametrize("html", [
    '<div style="display:flex"></div><div style="display: grid; grid-template-columns: 1fr 1fr"></div>',
    '<div style="display: inline-flex; border-radius: 12px"></div>',
])
def test_signature_pairs(html):
    assert detect_super_article(html) is True


def test_empty_and_plain_html():
    assert detect_super_article("") is False
    assert detect_super_article("<p>Plain <strong>text</strong></p>") is False


def test_threshold_is_configurable():
    assert analyze('<div style="display:flex"></div>', threshold=1).is_super_article is True


# --- Validation ---

def test_validation_accepts_any_image_type():
    validator = ImageValidationService(max_bytes=100)
    file = ImageFile(filename="a.svg", content_type="image/svg+xml", data=b"<svg/>")
    assert validator.validate(file) is file


@pytest.mark.parametrize("file", [
    ImageFile(filename="a.pdf", content_type="application/pdf", data=b"%PDF"),
    ImageFile(filename="a.png", content_type="image/png", data=b""),
    ImageFile(filename="big.png", content_type="image/png", data=b"x" * 101),
])
def test_validation_rejects(file):
    with pytest.raises(ImageValidationError):
        ImageValidationService(max_bytes=100).validate(file)


def test_ten_megabytes_is_the_default_limit(png_factory):
    validator = ImageValidationService()
    validator.validate(png_factory(10 * 1024 * 1024))
    with pytest.raises(ImageValidationError):
        validator.validate(png_factory(10 * 1024 * 1024 + 1))


def test_allowed_types_narrow_the_check():
    validator = ImageValidationService(allowed_types=["image/png"])
    with pytest.raises(ImageValidationError, match="PNG"):
        validator.validate(ImageFile(filename="a.gif", content_type="image/gif", data=b"GIF"))


@pytest.mark.parametrize("url,ok", [
    ("https://cdn.example.com/a.png", True),
    ("/uploads/a.png", True),
    ("//evil.example.com/a.png", False),
    ("javascript:alert(1)", False),
    ("", False),
])
def test_validate_url(url, ok):
    if ok:
        assert ImageValidationService.validate_url(url) == url
    else:
        with pytest.raises(ImageValidationError):
            ImageValidationService.validate_url(url)


def test_image_file_from_data_uri():
    raw = b"\x89PNG\r\n\x1a\nabc"
    file = ImageFile.from_data_uri("data:image/png;base64," + base64.b64encode(raw).decode())
    assert file.data == raw
    assert file.filename == "pasted-image.png"
    assert ImageFile.from_data_uri("data:text/plain;base64,aGk=") is None
    assert ImageFile.from_data_uri("data:image/png;base64,%%%") is None


# --- Upload manager ---

def test_upload_manager_rejects_while_in_flight(gateway_factory, png):
    held = gateway_factory(hold=True)
    manager = ImageUploadManager(held)

    async def scenario():
        first = asyncio.create_task(manager.upload(png))
        await asyncio.sleep(0)
        with pytest.raises(UploadBusyError):
            await manager.upload(png)
        held.release()
        return await first

    assert asyncio.run(scenario()) == "/uploads/img-1-1.png"
    assert len(held.calls) == 1
    assert not manager.busy


def test_upload_manager_releases_lock_after_failure(gateway_factory, png):
    manager = ImageUploadManager(gateway_factory(fail=True))
    with pytest.raises(UploadError):
        asyncio.run(manager.upload(png))
    assert not manager.busy


# --- Notifications ---

def test_notifications_listener_and_drain():
    seen = []
    manager = NotificationManager(listener=seen.append, limit=2)
    manager.success("one")
    manager.error("two", "details")
    manager.success("three")

    assert [n.title for n in manager.items] == ["two", "three"]
    assert manager.items[0].is_error
    assert len(seen) == 3
    assert [n.title for n in manager.drain()] == ["two", "three"]
    assert manager.last is None


# --- Debounce ---

def test_debouncer_coalesces_and_flushes():
    calls = []

    async def scenario():
        debouncer = Debouncer(0.02, lambda: calls.append("fired"))
        debouncer.trigger()
        debouncer.trigger()
        await asyncio.sleep(0.06)
        assert calls == ["fired"]

        debouncer.trigger()
        debouncer.cancel()
        await asyncio.sleep(0.04)
        assert calls == ["fired"]

        debouncer.trigger()
        debouncer.flush()
        assert not debouncer.pending

    asyncio.run(scenario())
    assert calls == ["fired", "fired"]


# --- Gateway client ---

class FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self._body = body

    async def json(self, content_type=None):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Minimale stand-in voor aiohttp.ClientSession.post()."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.closed = False
        self.posts = []

    def post(self, url, data=None):
        self.posts.append((url, data))
        if self.error:
            raise self.error
        return self.response


def test_gateway_returns_url(png):
    session = FakeSession(FakeResponse(200, {"url": "/uploads/img-9-9.png"}))
    service = UploadGatewayService(endpoint="http://upload.test/api/admin/upload", session=session)

    assert asyncio.run(service.upload(png)) == "/uploads/img-9-9.png"
    assert session.posts[0][0] == "http://upload.test/api/admin/upload"
    assert isinstance(session.posts[0][1], aiohttp.FormData)


@pytest.mark.parametrize("response,message", [
    (FakeResponse(413, {"message": "File too large"}), "File too large"),
    (FakeResponse(500, ValueError("not json")), "HTTP 500"),
    (FakeResponse(200, {}), "no URL"),
])
def test_gateway_errors(png, response, message):
    service = UploadGatewayService(endpoint="http://upload.test/u", session=FakeSession(response))
    with pytest.raises(UploadError, match=message):
        asyncio.run(service.upload(png))


def test_gateway_network_error(png):
    session = FakeSession(error=aiohttp.ClientConnectionError("refused"))
    service = UploadGatewayService(endpoint="http://upload.test/u", session=session)
    with pytest.raises(UploadError, match="refused"):
        asyncio.run(service.upload(png))
