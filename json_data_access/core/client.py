"""Blocking HTTP transport towards the JSON backend.

The providers only build RequestDescriptor objects and read ResponseOutcome
objects; WebServiceClient is the single place that talks to ``requests``.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional

import requests

REQUEST_TIMEOUT = 5
APPLICATION_JSON = "application/json"
APPLICATION_WWW_FORM_URLENCODED = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class RequestDescriptor:
    """Fully specified outbound request, built fresh for every call."""
    method: str
    path: str
    query: tuple[tuple[str, str], ...] = ()
    headers: tuple[tuple[str, str], ...] = ()
    body: Optional[bytes] = None
    content_type: Optional[str] = None
    accept: str = APPLICATION_JSON

    def header_dict(self) -> dict[str, str]:
        """Headers with repeated names folded into one comma-separated value."""
        result: dict[str, str] = {}
        for name, value in self.headers:
            result[name] = f"{result[name]}, {value}" if name in result else value
        return result


@dataclass(frozen=True)
class ResponseOutcome:
    """Read-only view of the backend's reply."""
    status_code: int
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes = b""
    encoding: str = "utf-8"

    def header_values(self, name: str) -> list[str]:
        """Return all values of a header, matching the name case-insensitively."""
        wanted = name.lower()
        return [value for key, value in self.headers if key.lower() == wanted]

    @property
    def text(self) -> str:
        return self.body.decode(self.encoding or "utf-8", errors="replace")

    @classmethod
    def from_requests(cls, resp: requests.Response) -> "ResponseOutcome":
        # requests assumes ISO-8859-1 for text/* without a charset; JSON is UTF-8 then
        content_type = resp.headers.get("Content-Type", "")
        declared = "charset=" in content_type.lower()
        return cls(
            status_code=resp.status_code,
            headers=tuple(resp.headers.items()),
            body=resp.content or b"",
            encoding=(resp.encoding if declared else None) or "utf-8",
        )


class WebServiceClient:
    """HTTP client for the configured JSON web service.
    
    Connection handling, TLS and timeouts are left to ``requests``. There is no
    retry or caching: one descriptor means one HTTP call, and transport errors
    (``requests.RequestException``) reach the caller unchanged.
    
    Usage:
        client = WebServiceClient("http://backend:8080")
        outcome = client.execute(RequestDescriptor(method="GET", path="/users/alice"))
    """
    
    def __init__(self, base_url: Optional[str] = None, timeout: float = REQUEST_TIMEOUT, verify_tls: bool = True):
        """Initialize the client.
        
        Args:
            base_url: Web service base URL (defaults to JSON_DAP_BASE_URL env var)
            timeout: Per-request timeout in seconds
            verify_tls: Verify the server certificate for https URLs
        """
        self.base_url = (base_url or os.environ.get("JSON_DAP_BASE_URL", "http://localhost:8080")).rstrip("/")
        self.timeout = timeout
        self.verify_tls = verify_tls
    
    def url_for(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"
    
    def execute(self, request: RequestDescriptor) -> ResponseOutcome:
        """Issue the request and wait for the response.
        
        Args:
            request: Descriptor built by one of the providers
            
        Returns:
            ResponseOutcome of the backend
            
        Raises:
            requests.RequestException: On connection failure or timeout
        """
        headers = request.header_dict()
        headers["Accept"] = request.accept
        if request.content_type:
            headers["Content-Type"] = request.content_type
        
        resp = requests.request(
            request.method,
            self.url_for(request.path),
            params=list(request.query) or None,
            headers=headers,
            data=request.body,
            timeout=self.timeout,
            verify=self.verify_tls,
        )
        return ResponseOutcome.from_requests(resp)
