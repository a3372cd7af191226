"""
api.routes_import - /api/v1/inventory/import endpoint.

Accepts one CSV file as a multipart upload and streams it through the
import pipeline.  Query parameters:

    mode    insert (default) | upsert
    dryRun  true (default)   | false
"""

import logging

from flask import current_app, jsonify, request

from api import api_bp
from db import session_scope
from import_engine import NoFileAttached, run_import
from import_engine.report import MODE_INSERT, MODE_UPSERT
from services.product_repository import ProductRepository
from services.rate_limit import caller_key, import_rate_limit, limiter

logger = logging.getLogger(__name__)


def parse_mode(value) -> str:
    return MODE_UPSERT if (value or "").strip().lower() == MODE_UPSERT else MODE_INSERT


def parse_dry_run(value) -> bool:
    if value is None:
        return True
    return value.strip().lower() == "true"


@api_bp.route("/inventory/import", methods=["POST"])
@limiter.limit(import_rate_limit)
def api_import_csv():
    """
    POST /api/v1/inventory/import?mode=insert|upsert&dryRun=true|false

    Multipart: the first file part is imported, whatever its field name.
    """
    mode = parse_mode(request.args.get("mode"))
    dry_run = parse_dry_run(request.args.get("dryRun"))

    upload = next(iter(request.files.values()), None)
    if upload is None:
        raise NoFileAttached()

    with session_scope() as session:
        summary = run_import(
            upload.stream, ProductRepository(session),
            mode=mode, dry_run=dry_run,
            batch_size=current_app.config.get("IMPORT_BATCH_SIZE"),
            max_bytes=current_app.config.get("IMPORT_MAX_BYTES"),
        )

    caller = caller_key()
    logger.info(
        "[inventory.import] caller=%s file=%s mode=%s dry_run=%s total=%d "
        "created=%d updated=%d skipped=%d errors=%d duration_ms=%d",
        caller, upload.filename, summary.mode, summary.dry_run, summary.total,
        summary.created, summary.updated, summary.skipped,
        len(summary.errors), summary.duration_ms,
    )
    return jsonify(summary.to_dict())
