"""Pytest shared fixtures."""
import json
import pathlib
import sys
from typing import Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from json_data_access.config import build_config
from json_data_access.core.client import RequestDescriptor, ResponseOutcome


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from reaching a real JSON backend.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _stub_request(method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")

    monkeypatch.setattr(requests, "request", _stub_request)


# ─────────────────────────────────────────────────────────────────────────────
# Backend Responses
# ─────────────────────────────────────────────────────────────────────────────
def make_response(
    status_code: int = 200,
    body=None,
    content_type: Optional[str] = "application/json",
    headers: tuple = (),
) -> ResponseOutcome:
    """Build a ResponseOutcome; dict/list bodies are JSON-encoded."""
    if body is None:
        raw = b""
    elif isinstance(body, (dict, list)):
        raw = json.dumps(body).encode("utf-8")
    elif isinstance(body, str):
        raw = body.encode("utf-8")
    else:
        raw = body
    all_headers = tuple(headers)
    if content_type is not None:
        all_headers = (("Content-Type", content_type),) + all_headers
    return ResponseOutcome(status_code=status_code, headers=all_headers, body=raw)


class RecordingClient:
    """Transport double: records descriptors and replays queued responses."""

    def __init__(self, *responses: ResponseOutcome):
        self.responses = list(responses)
        self.requests: list[RequestDescriptor] = []

    def queue(self, response: ResponseOutcome) -> None:
        self.responses.append(response)

    def execute(self, request: RequestDescriptor) -> ResponseOutcome:
        self.requests.append(request)
        if not self.responses:
            return make_response(404, {"error": "not found"})
        return self.responses.pop(0)

    @property
    def last_request(self) -> RequestDescriptor:
        return self.requests[-1]


@pytest.fixture()
def recording_client():
    return RecordingClient()


@pytest.fixture()
def app_config():
    """Factory building a validated AppConfig from a raw mapping."""
    def _make(raw=None, **overrides):
        return build_config(raw or {}, **overrides)
    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a running JSON backend)"
    )
