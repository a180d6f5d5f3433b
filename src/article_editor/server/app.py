"""
Mutflex Editor - Upload Gateway
Flask server storing editor image uploads and serving them back.
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from flask import Flask

from mutflex_shell.core.managers.config_manager import config_manager
from mutflex_shell.core.utils.configure_logging import configure_logger
from article_editor.managers.upload_storage_manager import UploadStorageManager
from article_editor.server.routers.editor_api_router import editor_api_router
from article_editor.server.routers.upload_router import upload_router

logger = logging.getLogger(__name__)

# Room for the multipart envelope around a maximum-size image.
MULTIPART_OVERHEAD = 1024 * 1024


def create_app(upload_dir: Optional[Path] = None, max_bytes: Optional[int] = None) -> Flask:
    """
    Application factory wiring the upload storage into the blueprints.
    """
    flask_app = Flask(__name__)

    storage = UploadStorageManager(upload_dir=upload_dir, max_bytes=max_bytes)

    flask_app.config['UPLOAD_STORAGE'] = storage
    flask_app.config['MAX_CONTENT_LENGTH'] = storage.max_bytes + MULTIPART_OVERHEAD

    flask_app.register_blueprint(upload_router)
    flask_app.register_blueprint(editor_api_router, url_prefix='/api/editor')

    return flask_app


def main():
    parser = argparse.ArgumentParser(description="Mutflex Editor Upload Gateway")
    parser.add_argument("--upload-dir", type=str, default=None, help="Directory uploads are stored in")
    parser.add_argument("--port", type=int, default=config_manager.get_nested("server.port", 5000),
                        help="Port to bind the server to")
    parser.add_argument("--host", type=str, default=config_manager.get_nested("server.host", "127.0.0.1"),
                        help="Host interface to bind to")
    args = parser.parse_args()

    configure_logger(general_level=config_manager.get_nested("debug.level", "INFO"))

    app = create_app(Path(args.upload_dir) if args.upload_dir else None)

    print("\n" + "=" * 50)
    print("📤  MUTFLEX UPLOAD GATEWAY")
    print("=" * 50)
    print(f"📡  Listening on: http://{args.host}:{args.port}")
    print(f"📁  Upload dir:   {app.config['UPLOAD_STORAGE'].upload_dir}")
    print("-" * 50)
    for rule in app.url_map.iter_rules():
        if "static" not in str(rule):
            print(f"   ✅ {rule}")
    print("-" * 50 + "\n")

    app.run(host=args.host, port=args.port, use_reloader=False)


if __name__ == '__main__':
    main()
