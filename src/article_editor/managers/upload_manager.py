# src/article_editor/managers/upload_manager.py
import logging
from typing import Optional, Protocol

from article_editor.errors import UploadBusyError
from article_editor.model import ImageFile
from article_editor.services.image_validation_service import ImageValidationService

logger = logging.getLogger(__name__)


class UploadGateway(Protocol):
    async def upload(self, file: ImageFile) -> str: ...


class ImageUploadManager:
    """
    Validates and uploads images on behalf of the editing surfaces.

    Only one upload may be in flight; a second request while one is pending
    is rejected with UploadBusyError instead of being queued, so two uploads
    never race to insert at a stale cursor.
    """

    def __init__(self, gateway: UploadGateway, validator: Optional[ImageValidationService] = None):
        self.gateway = gateway
        self.validator = validator or ImageValidationService()
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    def validate(self, file: ImageFile) -> ImageFile:
        return self.validator.validate(file)

    async def upload(self, file: ImageFile) -> str:
        """
        Validates then uploads `file`.

        Raises:
            UploadBusyError: another upload is still pending.
            ImageValidationError: wrong type or too large; nothing was sent.
            UploadError: the gateway failed.
        """
        if self._in_flight:
            raise UploadBusyError("Please wait for the current image upload to finish.")
        self.validator.validate(file)

        self._in_flight = True
        try:
            logger.debug("Uploading '%s' (%s, %d bytes).", file.filename, file.content_type, file.size)
            return await self.gateway.upload(file)
        finally:
            self._in_flight = False
