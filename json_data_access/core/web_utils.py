"""Encoding helpers and the response validator shared by both providers."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional
from urllib.parse import quote_plus

from .client import APPLICATION_JSON, ResponseOutcome

logger = logging.getLogger(__name__)


class ContentTypeCheck(Enum):
    """Diagnostic classification of the response Content-Type."""
    JSON = "json"
    MISSING = "missing"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ResponseCheck:
    """Outcome of validating a response before JSON parsing.
    
    Only ``successful`` decides whether the body is parsed; ``content_type``
    is kept for diagnostics.
    """
    successful: bool
    content_type: ContentTypeCheck


def url_encode(value: str) -> str:
    """Percent-encode a value as UTF-8 form data (space becomes '+')."""
    return quote_plus(value, encoding="utf-8")


def url_encoded_form_data(form_parameters: Mapping[str, str]) -> str:
    """Join parameters as ``k=v&k2=v2`` with both sides url-encoded."""
    return "&".join(
        f"{url_encode(name)}={url_encode(value)}" for name, value in form_parameters.items()
    )


def is_json(content_type: str) -> bool:
    """Check whether a (possibly comma-separated) Content-Type value contains application/json.
    
    Example:
        >>> is_json("text/plain, application/json; charset=utf-8")
        True
    """
    tokens = {part.split(";", 1)[0].strip() for part in content_type.split(",")}
    return APPLICATION_JSON in tokens


def has_success_status_code(response: ResponseOutcome) -> bool:
    return 200 <= response.status_code < 300


def check_content_type(response: ResponseOutcome, log: Optional[logging.Logger] = None) -> ContentTypeCheck:
    log = log or logger
    content_types = response.header_values("Content-Type")
    
    if not content_types:
        log.debug("JSON data-source did not provide a Content-Type header, "
                  "will attempt to parse the response as JSON.")
        return ContentTypeCheck.MISSING
    
    if any(is_json(content_type) for content_type in content_types):
        return ContentTypeCheck.JSON
    
    log.debug("JSON data-source provided an unexpected Content-Type: '%s', "
              "will attempt to parse the response as JSON", ", ".join(content_types))
    return ContentTypeCheck.UNEXPECTED


def check_json_response(response: ResponseOutcome, log: Optional[logging.Logger] = None) -> ResponseCheck:
    """Classify a response as acceptable for JSON parsing.
    
    Args:
        response: Backend response
        log: Diagnostics sink (defaults to this module's logger)
        
    Returns:
        ResponseCheck; successful iff the status code is 2xx
    """
    content_type = check_content_type(response, log)
    return ResponseCheck(successful=has_success_status_code(response), content_type=content_type)


def is_successful_json_response(response: ResponseOutcome, log: Optional[logging.Logger] = None) -> bool:
    return check_json_response(response, log).successful
