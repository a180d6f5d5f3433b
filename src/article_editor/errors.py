# src/article_editor/errors.py


class EditorError(Exception):
    """Base class for every recoverable failure raised inside the editor."""


class ImageValidationError(EditorError):
    """The selected file (or URL) is not an acceptable image."""


class UploadError(EditorError):
    """The upload gateway could not store the image."""


class UploadBusyError(EditorError):
    """Another upload is still in flight; the caller has to wait."""


class NodeNotFoundError(EditorError):
    """The image a dialog was opened for no longer exists where it was."""
