"""
db - Database layer.

Public API:
    init_db()       → create engine + tables
    get_session()   → new Session
    session_scope() → session that is always closed
    Product         → ORM model
"""

from db.engine import init_db, get_session, session_scope   # noqa: F401
from db.models import Base, Product                 # noqa: F401
