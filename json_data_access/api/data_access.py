"""Data access endpoints: the provider operations exposed to a host over HTTP.

Routes:
    GET  /attributes/<subject>        attribute lookup for a bare subject
    POST /attributes                  attribute lookup with known attributes
    POST /credentials/verify          password verification
    PUT  /credentials/password        password update (fire-and-forget)
    GET  /credentials/capabilities    whether the backend verifies passwords
"""
from __future__ import annotations
import logging
from typing import Any

from flask import Blueprint, abort, current_app, jsonify, request

from json_data_access.api.decorators import require_api_token
from json_data_access.core.attributes import AccountAttributes, SubjectAttributes
from json_data_access.core.plugin import JsonDataAccessPlugin

bp = Blueprint("data_access", __name__)

JSON_MAX_SIZE_BYTES = 65536  # 64 KB

logger = logging.getLogger(__name__)


def _plugin() -> JsonDataAccessPlugin:
    return current_app.extensions["json_data_access"]


def _json_body() -> dict[str, Any]:
    """Parse the request body as a JSON object or abort with 400."""
    if request.content_length and request.content_length > JSON_MAX_SIZE_BYTES:
        abort(400, description="Request body too large")
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="Request body must be a JSON object")
    return payload


def _required_string(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        abort(400, description=f"'{key}' must be a non-empty string")
    return value


def _attribute_response(subject: str, table):
    return jsonify({"subject": subject, "attributes": list(table.rows)})


@bp.route("/attributes/<path:subject>", methods=["GET"])
@require_api_token
def get_attributes(subject: str):
    table = _plugin().attribute_provider.get_attributes(subject)
    return _attribute_response(subject, table)


@bp.route("/attributes", methods=["POST"])
@require_api_token
def lookup_attributes():
    """Attribute lookup where the host supplies the subject's known attributes."""
    payload = _json_body()
    subject = _required_string(payload, "subject")
    known = payload.get("attributes") or {}
    if not isinstance(known, dict):
        abort(400, description="'attributes' must be a JSON object")
    
    table = _plugin().attribute_provider.get_attributes(SubjectAttributes.of(subject, known))
    return _attribute_response(subject, table)


@bp.route("/credentials/verify", methods=["POST"])
@require_api_token
def verify_password():
    payload = _json_body()
    username = _required_string(payload, "username")
    password = payload.get("password")
    if not isinstance(password, str):
        abort(400, description="'password' must be a string")
    
    result = _plugin().credential_provider.verify_password(username, password)
    if result is None:
        logger.info("Password verification yielded no attributes for %s", username)
        return jsonify({"error": "Unauthorized", "message": "Authentication failed"}), 401
    return jsonify(result.to_dict())


@bp.route("/credentials/password", methods=["PUT"])
@require_api_token
def update_password():
    """Forward a password update; the backend outcome is only visible in logs."""
    payload = _json_body()
    username = _required_string(payload, "username")
    password = payload.get("password")
    if password is not None and not isinstance(password, str):
        abort(400, description="'password' must be a string")
    
    _plugin().credential_provider.update_password(AccountAttributes(username=username, password=password))
    return jsonify({"status": "accepted"}), 202


@bp.route("/credentials/capabilities", methods=["GET"])
@require_api_token
def capabilities():
    provider = _plugin().credential_provider
    return jsonify({"custom_query_verifies_password": provider.custom_query_verifies_password()})
