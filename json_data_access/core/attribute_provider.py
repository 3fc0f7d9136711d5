"""Attribute lookups against the JSON backend."""
from __future__ import annotations
import logging
from typing import Optional, Union

from json_data_access.config.settings import (
    SUBJECT_PLACEHOLDER,
    AttributesConfig,
    ParameterSubject,
    UrlPathSubject,
)

from .attributes import AttributeTable, SubjectAttributes, read_attributes
from .client import RequestDescriptor, ResponseOutcome, WebServiceClient
from .exceptions import ConfigurationError
from .parameters import ProvideAs, resolve_parameters
from .web_utils import url_encode

logger = logging.getLogger(__name__)


class JsonAttributeDataAccessProvider:
    """Fetch a subject's attributes with a GET request to the JSON backend.
    
    Holds only immutable configuration, so one instance can serve concurrent callers.
    
    Usage:
        provider = JsonAttributeDataAccessProvider(cfg.attributes, WebServiceClient(base_url))
        table = provider.get_attributes("alice")
    """
    
    def __init__(
        self,
        configuration: AttributesConfig,
        client: WebServiceClient,
        log: Optional[logging.Logger] = None,
    ):
        """Initialize the provider.
        
        Args:
            configuration: Attribute lookup settings
            client: Transport towards the JSON web service
            log: Diagnostics sink (defaults to this module's logger)
        """
        self.configuration = configuration
        self.client = client
        self.log = log or logger
    
    def get_attributes(self, subject: Union[str, SubjectAttributes]) -> AttributeTable:
        """Look up attributes for a subject.
        
        Args:
            subject: Bare subject, or subject with known attributes used by parameter mappings
            
        Returns:
            Table with one row on success, empty table otherwise
        """
        if isinstance(subject, str):
            subject = SubjectAttributes.of(subject)
        
        response = self.client.execute(self.build_request(subject))
        attributes = self.get_attributes_from(response)
        
        if attributes is None:
            return AttributeTable.empty()
        return AttributeTable.of([attributes])
    
    def build_request(self, subject_attributes: SubjectAttributes) -> RequestDescriptor:
        query_parameters = self.create_query_parameters(subject_attributes)
        header_parameters = self.create_header_parameters(subject_attributes)
        return RequestDescriptor(
            method="GET",
            path=self.create_request_path(subject_attributes.subject),
            query=tuple(query_parameters.items()),
            headers=tuple(header_parameters.items()),
        )
    
    def get_attributes_from(self, response: ResponseOutcome) -> Optional[dict]:
        return read_attributes(response, self.log)
    
    def create_request_path(self, subject: str) -> str:
        """Return the request path for a subject.
        
        A url-path provision substitutes ``:subject`` with the url-encoded subject;
        a parameter provision uses its path unchanged.
        """
        provide_subject = self.configuration.provide_subject
        if isinstance(provide_subject, UrlPathSubject):
            return provide_subject.url_path.replace(SUBJECT_PLACEHOLDER, url_encode(subject))
        if isinstance(provide_subject, ParameterSubject):
            return provide_subject.url_path
        raise ConfigurationError(f"Unsupported provide-subject configuration: {provide_subject!r}")
    
    def create_query_parameters(self, subject_attributes: SubjectAttributes) -> dict[str, str]:
        return self._create_parameters(subject_attributes, ProvideAs.QUERY_PARAMETER)
    
    def create_header_parameters(self, subject_attributes: SubjectAttributes) -> dict[str, str]:
        return self._create_parameters(subject_attributes, ProvideAs.HEADER_PARAMETER)
    
    def _create_parameters(self, subject_attributes: SubjectAttributes, provide_as: ProvideAs) -> dict[str, str]:
        provide_subject = self.configuration.provide_subject
        
        # Parameters are only sent in parameter mode, and only in its configured placement
        if not isinstance(provide_subject, ParameterSubject) or provide_subject.provide_as is not provide_as:
            return {}
        
        return resolve_parameters(
            subject_attributes,
            provide_subject.username_parameter,
            self.configuration.parameter_mappings,
            provide_as,
            self.log,
        )
