"""
services - Persistence and request-guard helpers sitting between API and DB.
"""

from services.product_repository import ProductRepository         # noqa: F401
from services.rate_limit import caller_key, limiter                # noqa: F401
