"""Authentication helpers for Wikimark endpoints."""

from __future__ import annotations

import hmac
import logging

from flask import abort, g, request

logger = logging.getLogger(__name__)


def check_auth() -> None:
    """Validate the bearer token provided in the request headers."""

    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        logger.warning("Rejected request to %s without bearer token", request.path)
        abort(403, description="Forbidden: Missing or invalid Authorization header")

    token = auth_header.split("Bearer ")[-1].strip()
    if not hmac.compare_digest(token.encode(), g.config["shared_secret"].encode()):
        logger.warning("Rejected request to %s with invalid bearer token", request.path)
        abort(403, description="Forbidden: Invalid bearer token")
