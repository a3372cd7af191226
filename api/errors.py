"""
api.errors - JSON error handlers for the API blueprint.
"""

import logging

from flask import current_app, jsonify

from api import api_bp
from import_engine.errors import FileTooLarge, ImportAborted

logger = logging.getLogger(__name__)


@api_bp.errorhandler(ImportAborted)
def api_import_aborted(e: ImportAborted):
    logger.warning("Import rejected: %s (%s)", e.message, e.detail or "-")
    return jsonify(e.to_dict()), 400


@api_bp.errorhandler(413)
def api_upload_too_large(_e):
    # Body refused by Werkzeug before any of it reached the importer
    return api_import_aborted(
        FileTooLarge(f"Limit is {current_app.config['IMPORT_MAX_BYTES']} bytes")
    )


@api_bp.errorhandler(429)
def api_rate_limited(e):
    logger.warning("Rate limit hit: %s", e.description)
    return jsonify({"message": "Rate limit exceeded"}), 429


@api_bp.errorhandler(404)
def api_not_found(_e):
    return jsonify({"message": "not found"}), 404


@api_bp.errorhandler(400)
def api_bad_request(_e):
    return jsonify({"message": "bad request"}), 400


@api_bp.errorhandler(500)
def api_server_error(_e):
    return jsonify({"message": "internal server error"}), 500
