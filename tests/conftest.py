# tests/conftest.py
import asyncio
from typing import List, Optional

import pytest

from article_editor.errors import UploadError
from article_editor.managers.notification_manager import NotificationManager
from article_editor.managers.upload_manager import ImageUploadManager
from article_editor.model import ImageFile

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


def make_png(size: int = 2 * 1024 * 1024, filename: str = "photo.png") -> ImageFile:
    """Een nep-PNG van precies `size` bytes."""
    return ImageFile(filename=filename, content_type="image/png",
                     data=PNG_HEADER + b"\0" * max(0, size - len(PNG_HEADER)))


class FakeGateway:
    """
    Een upload gateway zonder netwerk. Geeft een vaste URL terug, of faalt
    wanneer `fail` gezet is. Met `hold` blijft de upload hangen tot
    `release()` wordt aangeroepen.
    """

    def __init__(self, url: str = "/uploads/img-1-1.png", fail: bool = False, hold: bool = False):
        self.url = url
        self.fail = fail
        self.hold = hold
        self.calls: List[ImageFile] = []
        self._event: Optional[asyncio.Event] = None

    async def upload(self, file: ImageFile) -> str:
        self.calls.append(file)
        if self.hold:
            self._event = asyncio.Event()
            await self._event.wait()
        if self.fail:
            raise UploadError("Server error")
        return self.url

    def release(self) -> None:
        if self._event is not None:
            self._event.set()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def uploads(gateway):
    return ImageUploadManager(gateway)


@pytest.fixture
def notifications():
    return NotificationManager()


@pytest.fixture
def png():
    return make_png()


@pytest.fixture
def png_factory():
    return make_png


@pytest.fixture
def gateway_factory():
    """Maakt losse gateways aan, bijvoorbeeld een hangende of een falende."""
    return FakeGateway
