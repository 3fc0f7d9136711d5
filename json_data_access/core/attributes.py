"""Attribute containers and the JSON response translator."""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional

from .client import ResponseOutcome
from .web_utils import check_json_response

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = (str, int, float, bool)


def is_primitive(value: Any) -> bool:
    """True for scalar attribute values (None, lists and objects are not primitive)."""
    return isinstance(value, PRIMITIVE_TYPES)


def stringify(value: Any) -> str:
    """Render a primitive value the way it appears in JSON (``true``, not ``True``)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class SubjectAttributes:
    """A subject together with the attributes already known about it."""
    subject: str
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, subject: str, attributes: Optional[Mapping[str, Any]] = None) -> "SubjectAttributes":
        return cls(subject=subject, attributes=dict(attributes or {}))

    def __contains__(self, name: str) -> bool:
        return name in self.attributes

    def get(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        return {"subject": self.subject, **self.attributes}


@dataclass(frozen=True)
class AuthenticationAttributes:
    """Result of a successful password verification."""
    subject_attributes: SubjectAttributes
    context_attributes: Mapping[str, Any] = field(default_factory=dict)

    @property
    def subject(self) -> str:
        return self.subject_attributes.subject

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "subject_attributes": dict(self.subject_attributes.attributes),
            "context_attributes": dict(self.context_attributes),
        }


@dataclass(frozen=True)
class AccountAttributes:
    """Account data handed over by the host when a password changes."""
    username: str
    password: Optional[str] = None
    attributes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AttributeTable:
    """Rows of attributes returned by an attribute lookup (zero or one row here)."""
    rows: tuple[dict[str, Any], ...] = ()

    @classmethod
    def empty(cls) -> "AttributeTable":
        return cls()

    @classmethod
    def of(cls, rows) -> "AttributeTable":
        return cls(rows=tuple(dict(row) for row in rows))

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.rows)


def attributes_from_json(body: str) -> dict[str, Any]:
    """Parse a JSON object into attributes, keeping nested values structured.
    
    Raises:
        ValueError: If the body is not valid JSON or not a JSON object
    """
    parsed = json.loads(body)
    if not isinstance(parsed, dict):
        raise ValueError(f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


def read_attributes(response: ResponseOutcome, log: Optional[logging.Logger] = None) -> Optional[dict[str, Any]]:
    """Translate a backend response into attributes.
    
    Backend inconsistencies never raise; they are logged and yield None.
    
    Args:
        response: Backend response
        log: Diagnostics sink (defaults to this module's logger)
        
    Returns:
        Top-level JSON entries, or None when the response carries no usable attributes
    """
    log = log or logger
    response_body = response.text
    
    if not check_json_response(response, log).successful:
        # Debug level only, the backend did not report success
        if response_body:
            log.debug("Response from JSON data-source:\n%s", response_body)
        else:
            log.debug("No response body from JSON data-source.")
        return None
    
    if not response_body:
        log.warning("Received JSON response without response body. The JSON server answer is inconsistent?")
        return None
    
    log.debug("Processing JSON response from successful response")
    try:
        return attributes_from_json(response_body)
    except ValueError as e:
        log.warning("Could not parse JSON response from server due to '%s': %s", e, response_body)
        return None
