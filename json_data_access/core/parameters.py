"""Outgoing parameter mappings for attribute lookups.

A mapping is either an attribute lookup (send the value of one of the
subject's known attributes) or a static value. Both variants expose the same
``resolve`` call, so callers never branch on the variant.

Usage:
    mapping = parameter_mapping_from_config({"parameter-name": "mail"})
    value = mapping.resolve(subject_attributes)   # None when not resolvable
"""
from __future__ import annotations
import base64
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from .attributes import SubjectAttributes, is_primitive, stringify
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ProvideAs(str, Enum):
    """Where the subject and mapped parameters are placed in the request."""
    QUERY_PARAMETER = "query-parameter"
    HEADER_PARAMETER = "header-parameter"


@dataclass(frozen=True)
class AttributeLookupMapping:
    """Send the value of a known subject attribute."""
    parameter_name: str
    attribute_name: str

    def resolve(self, subject_attributes: SubjectAttributes, log: Optional[logging.Logger] = None) -> Optional[str]:
        log = log or logger
        if self.attribute_name not in subject_attributes:
            log.debug("Could not map attribute %s. Attribute not found.", self.attribute_name)
            return None
        
        value = subject_attributes.get(self.attribute_name)
        if not is_primitive(value):
            log.debug("Could not map attribute %s. Attribute value is not primitive.", self.attribute_name)
            return None
        
        mapped = stringify(value)
        log.debug("Mapping parameter %s to %s.", self.parameter_name, mapped)
        return mapped


@dataclass(frozen=True)
class StaticMapping:
    """Always send the same configured value."""
    parameter_name: str
    value: str

    def resolve(self, subject_attributes: SubjectAttributes, log: Optional[logging.Logger] = None) -> str:
        return self.value


ParameterMapping = Union[AttributeLookupMapping, StaticMapping]


def parameter_mapping_from_config(raw: Mapping[str, Any]) -> ParameterMapping:
    """Build a mapping from one ``parameter-mapping`` configuration entry.
    
    Without a ``value`` section the attribute named like the parameter is used.
    
    Args:
        raw: Entry with ``parameter-name`` and optional ``value`` one-of
            (``use-value-of-attribute`` or ``static-value``)
        
    Returns:
        AttributeLookupMapping or StaticMapping
        
    Raises:
        ConfigurationError: If the name is missing or the value one-of is not set exactly once
    """
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"parameter-mapping entries must be mappings, got {type(raw).__name__}")
    
    name = raw.get("parameter-name")
    if not name:
        raise ConfigurationError("parameter-mapping entry is missing 'parameter-name'")
    name = str(name)
    
    if raw.get("value") is None:
        return AttributeLookupMapping(parameter_name=name, attribute_name=name)
    
    value = raw["value"]
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"parameter-mapping '{name}': 'value' must be a mapping")
    
    attribute = value.get("use-value-of-attribute")
    static = value.get("static-value")
    if attribute is not None and static is not None:
        raise ConfigurationError(
            f"parameter-mapping '{name}': set only one of 'use-value-of-attribute' or 'static-value'"
        )
    if attribute is not None:
        return AttributeLookupMapping(parameter_name=name, attribute_name=str(attribute))
    if static is not None:
        return StaticMapping(parameter_name=name, value=str(static))
    
    raise ConfigurationError(
        f"parameter-mapping '{name}': 'value' needs one of 'use-value-of-attribute' or 'static-value'"
    )


def _base64_utf8(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def _identity(value: str) -> str:
    return value


def encoder_for(provide_as: ProvideAs) -> Callable[[str], str]:
    """Value encoder for a placement.
    
    Header values are UTF-8/base64 encoded. Query values stay raw text,
    percent-encoding them is the transport's job.
    """
    if provide_as is ProvideAs.HEADER_PARAMETER:
        return _base64_utf8
    if provide_as is ProvideAs.QUERY_PARAMETER:
        return _identity
    raise ValueError(f"Unknown provide-as value: {provide_as!r}")


def resolve_parameters(
    subject_attributes: SubjectAttributes,
    username_parameter: str,
    mappings: Iterable[ParameterMapping],
    provide_as: ProvideAs,
    log: Optional[logging.Logger] = None,
) -> dict[str, str]:
    """Resolve the subject and all mappings into encoded parameters for one placement.
    
    Args:
        subject_attributes: Subject and its known attributes (lookup context)
        username_parameter: Name of the parameter carrying the subject
        mappings: Configured parameter mappings
        provide_as: Target placement, decides the value encoding
        log: Diagnostics sink
        
    Returns:
        Parameter name -> encoded value; unresolvable mappings are omitted
    """
    encode = encoder_for(provide_as)
    result = {username_parameter: encode(subject_attributes.subject)}
    
    for mapping in mappings:
        mapped_value = mapping.resolve(subject_attributes, log)
        if mapped_value is not None:
            result[mapping.parameter_name] = encode(mapped_value)
    
    return result
