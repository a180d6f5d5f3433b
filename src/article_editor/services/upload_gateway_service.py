# src/article_editor/services/upload_gateway_service.py
import asyncio
import logging
from typing import Optional

import aiohttp

from mutflex_shell.core.managers.config_manager import config_manager
from article_editor.errors import UploadError
from article_editor.model import ImageFile

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://localhost:5000/api/admin/upload"


class UploadGatewayService:
    """
    Client for the upload gateway.
    Posts a single image as multipart field `image` and returns the durable
    URL from the `{url: ...}` response. Failures are never retried.
    """

    def __init__(self, endpoint: Optional[str] = None, timeout: Optional[int] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        self.endpoint = endpoint or config_manager.get_nested("editor.upload.endpoint", DEFAULT_ENDPOINT)
        self.timeout = int(timeout or config_manager.get_nested("editor.upload.timeout", 60))
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def initialize(self):
        if not self.session or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            self._owns_session = True
            logger.debug("UploadGatewayService: Session initialized.")

    async def close(self):
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            logger.debug("UploadGatewayService: Session closed.")

    async def upload(self, file: ImageFile) -> str:
        """
        Uploads the image and returns its URL.

        Raises:
            UploadError: on network errors, non-2xx answers or a body without `url`.
        """
        if not self.session or self.session.closed:
            await self.initialize()

        form = aiohttp.FormData()
        form.add_field("image", file.data, filename=file.filename, content_type=file.content_type)

        try:
            async with self.session.post(self.endpoint, data=form) as response:
                status = response.status
                try:
                    body = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError):
                    body = None
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Upload of '%s' failed: %s", file.filename, e)
            raise UploadError(f"Image upload failed: {e}") from e

        if not 200 <= status < 300:
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning("Upload gateway answered %s for '%s': %s", status, file.filename, message)
            raise UploadError(message or f"Image upload failed (HTTP {status}).")

        url = body.get("url") if isinstance(body, dict) else None
        if not url:
            raise UploadError("Upload gateway returned no URL.")

        logger.info("Uploaded '%s' (%d bytes) -> %s", file.filename, file.size, url)
        return url
