#!/usr/bin/env python3
"""
StockDB - Inventory backend
===========================

Single-command run:  python main.py

See config.py for all environment-variable tunables.
"""

import logging

from flask import Flask, jsonify

import config
from db import init_db, session_scope
from api import api_bp
from services.product_repository import ProductRepository
from services.rate_limit import limiter


def create_app(db_url: str | None = None, rate_limit: str | None = None) -> Flask:
    """Flask application factory."""

    app = Flask(__name__)
    app.config.update(
        IMPORT_BATCH_SIZE=config.IMPORT_BATCH_SIZE,
        IMPORT_MAX_BYTES=config.IMPORT_MAX_BYTES,
        MAX_CONTENT_LENGTH=config.MAX_CONTENT_LENGTH,
        IMPORT_RATE_LIMIT=rate_limit or config.IMPORT_RATE_LIMIT,
    )

    # ── Initialise database ─────────────────────────────────────────
    init_db(db_url or config.DB_URL)

    # ── Import rate limiting (per caller) ───────────────────────────
    limiter.init_app(app)

    # ── Register blueprints ─────────────────────────────────────────
    app.register_blueprint(api_bp)

    # ── Error handlers ──────────────────────────────────────────────
    @app.errorhandler(404)
    def _404(e):
        return jsonify({"message": "not found"}), 404

    @app.errorhandler(500)
    def _500(e):
        return jsonify({"message": "internal server error"}), 500

    return app


def _seed_if_empty():
    """Auto-import seed CSV when the products table is empty."""
    from import_engine import ImportAborted, run_import

    with session_scope() as session:
        repo = ProductRepository(session)
        count = repo.count()
        if count > 0:
            print(f"\n  Database has {count} products.")
            return

        if not config.CSV_SEED_PATH.exists():
            print(f"\n  No seed CSV at {config.CSV_SEED_PATH} - starting empty.")
            return

        print(f"\n  Database empty → auto-importing {config.CSV_SEED_PATH.name} …")
        try:
            with open(config.CSV_SEED_PATH, "rb") as fh:
                summary = run_import(fh, repo, dry_run=False)
        except ImportAborted as exc:
            print(f"  Seed import failed: {exc.message} ({exc.detail or '-'})")
            return

    print(f"  Done: {summary.created} created, "
          f"{summary.skipped} skipped / {summary.total} rows")
    if summary.errors:
        print(f"  First errors (max 10):")
        for err in summary.errors[:10]:
            print(f"    Row {err.row}: [{err.code}] {err.message}")


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 56)
    print("  StockDB - Inventory backend")
    print("=" * 56)

    app = create_app()
    print(f"  Database: {config.DB_URL}")
    _seed_if_empty()

    print(f"\n  http://{config.HOST}:{config.PORT}")
    print(f"  Import: POST /api/v1/inventory/import?mode=insert|upsert&dryRun=true|false")
    print("=" * 56)

    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()
