import logging

from flask import Blueprint, abort, current_app, jsonify, request, send_from_directory

from article_editor.errors import ImageValidationError
from article_editor.model import ImageFile

logger = logging.getLogger(__name__)

upload_router = Blueprint('upload_router', __name__)

# Uploaded names are unique, so a year of caching is safe.
CACHE_MAX_AGE = 31536000


def get_storage():
    """Retrieves the upload storage from the Flask application context."""
    storage = current_app.config.get('UPLOAD_STORAGE')
    if not storage:
        raise RuntimeError("UploadStorageManager is not set in app.config['UPLOAD_STORAGE']")
    return storage


@upload_router.route('/api/admin/upload', methods=['POST'])
def upload_image():
    """
    Accepts a single image in the multipart field `image`.
    Answers `{url}` on success.
    """
    storage = get_storage()

    uploaded = request.files.get('image')
    if uploaded is None or not uploaded.filename:
        return jsonify({"message": "No file uploaded"}), 400

    file = ImageFile(
        filename=uploaded.filename,
        content_type=(uploaded.mimetype or "").lower(),
        data=uploaded.read(),
    )
    if file.size > storage.max_bytes:
        logger.warning("Rejected upload '%s': %d bytes exceeds limit.", file.filename, file.size)
        return jsonify({"message": "File too large"}), 413

    try:
        url = storage.save(file)
    except ImageValidationError as e:
        return jsonify({"message": str(e)}), 400
    except OSError as e:
        logger.error("Failed to store upload '%s': %s", file.filename, e, exc_info=True)
        return jsonify({"message": "Failed to upload image"}), 500

    return jsonify({"url": url})


@upload_router.route('/uploads/<path:name>', methods=['GET'])
def serve_upload(name: str):
    storage = get_storage()
    if storage.resolve(name) is None:
        abort(404)
    response = send_from_directory(storage.upload_dir, name, max_age=CACHE_MAX_AGE)
    response.cache_control.public = True
    return response


@upload_router.app_errorhandler(413)
def payload_too_large(error):
    return jsonify({"message": "File too large"}), 413
