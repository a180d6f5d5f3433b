import logging

from flask import Blueprint, jsonify, request

from article_editor.controllers.preview_controller import PreviewRenderer
from article_editor.model import ModeState
from article_editor.services.super_article_service import analyze

logger = logging.getLogger(__name__)

editor_api_router = Blueprint('editor_api_router', __name__)


def _html_from_request():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict) or not isinstance(payload.get("html"), str):
        return None, payload
    return payload["html"], payload


@editor_api_router.route('/analyze', methods=['POST'])
def analyze_article():
    """Runs the advanced-styling check and reports the mode a fresh load would open in."""
    html, _ = _html_from_request()
    if html is None:
        return jsonify({"error": "Missing required field 'html'"}), 400

    report = analyze(html)
    initial = ModeState.SOURCE_VISUAL if report.is_super_article else ModeState.WYSIWYG
    return jsonify({
        "superArticle": report.is_super_article,
        "matched": report.matched,
        "threshold": report.threshold,
        "initialMode": initial.value,
    })


@editor_api_router.route('/preview', methods=['POST'])
def render_preview():
    """Builds the sandboxed iframe document for a piece of HTML."""
    html, payload = _html_from_request()
    if html is None:
        return jsonify({"error": "Missing required field 'html'"}), 400

    editable = bool(payload.get("editable", False))
    srcdoc = PreviewRenderer().render(html, editable=editable)
    return jsonify(PreviewRenderer.iframe_attributes(srcdoc))
