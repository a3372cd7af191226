"""
StockDB - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.
"""

from __future__ import annotations
import os
from pathlib import Path


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR      = Path(__file__).resolve().parent
CSV_SEED_PATH = Path(os.environ.get("STOCKDB_CSV_SEED", BASE_DIR / "seed_products.csv"))

# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("STOCKDB_DB", f"sqlite:///{BASE_DIR / 'stockdb.sqlite'}")

# ── Server ─────────────────────────────────────────────────────────────
HOST      = os.environ.get("STOCKDB_HOST", "0.0.0.0")
PORT      = int(os.environ.get("STOCKDB_PORT", "3000"))
DEBUG     = os.environ.get("STOCKDB_DEBUG", "0") == "1"
LOG_LEVEL = os.environ.get("STOCKDB_LOG_LEVEL", "INFO").upper()

# ── CSV import ─────────────────────────────────────────────────────────
IMPORT_BATCH_SIZE  = int(os.environ.get("STOCKDB_IMPORT_BATCH_SIZE", "500"))
IMPORT_MAX_BYTES   = int(os.environ.get("STOCKDB_IMPORT_MAX_BYTES", str(5 * 1024 * 1024)))
IMPORT_CHUNK_SIZE  = 64 * 1024

# Request bodies above this are refused before parsing (multipart framing
# on top of the file itself)
MAX_CONTENT_LENGTH = IMPORT_MAX_BYTES + 64 * 1024

# Per-caller limit on import requests, in Flask-Limiter notation
IMPORT_RATE_LIMIT  = os.environ.get("STOCKDB_IMPORT_RATE_LIMIT", "30 per minute")
