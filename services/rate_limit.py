"""
services.rate_limit - Per-caller request limiting for the import endpoint.

A single Flask-Limiter instance, bound to each app in create_app().  The
limit string is read from app.config["IMPORT_RATE_LIMIT"] per request, so
tests and deployments can tune it without touching the route.
"""

from flask import current_app, g, request
from flask_limiter import Limiter


def caller_key() -> str:
    # Set by the authentication layer in front of the API, when present
    user_id = g.get("user_id")
    if user_id is not None:
        return f"user:{user_id}"
    return f"addr:{request.remote_addr}"


def import_rate_limit() -> str:
    return current_app.config["IMPORT_RATE_LIMIT"]


limiter = Limiter(key_func=caller_key, default_limits=[], storage_uri="memory://")
