"""Request guards for the data access API.

The API is protected by a shared bearer token (``api-token`` in the
configuration, or /run/secrets/json_dap_api_token, or JSON_DAP_API_TOKEN).
When no token is configured the guard lets every request through.
"""
from __future__ import annotations
import hashlib
import hmac
import logging
from functools import wraps

from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)


def _unauthorized(message: str):
    return jsonify({"error": "Unauthorized", "message": message}), 401


def _token_hash(token: str) -> str:
    """SHA256 prefix of a token, safe for logs."""
    return hashlib.sha256(token.encode()).hexdigest()[:12]


def require_api_token(fn):
    """
    Decorator requiring ``Authorization: Bearer <api-token>`` when a token is configured.
    
    Tokens are compared with hmac.compare_digest and never logged in clear.
    
    Example:
        @bp.route("/attributes/<path:subject>")
        @require_api_token
        def get_attributes(subject):
            ...
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        cfg = current_app.config.get("APP_CONFIG")
        expected_token = cfg.api_token if cfg else ""
        if not expected_token:
            return fn(*args, **kwargs)
        
        auth_header = request.headers.get("Authorization", "")
        if not auth_header:
            logger.warning("Data access request missing Authorization header | path=%s", request.path)
            return _unauthorized("Authorization header required. Use 'Authorization: Bearer <token>'")
        
        if not auth_header.startswith("Bearer "):
            logger.warning("Data access request with invalid Authorization format | path=%s", request.path)
            return _unauthorized("Invalid Authorization header format. Expected 'Bearer <token>'")
        
        token = auth_header[7:]
        if not token or not hmac.compare_digest(token, expected_token):
            logger.warning("Data access request with invalid token | token_hash=%s | path=%s",
                           _token_hash(token), request.path)
            return _unauthorized("Invalid API token")
        
        return fn(*args, **kwargs)
    
    return wrapper
