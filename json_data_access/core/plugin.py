"""Plugin descriptor: wires configuration, transport and both providers together."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from json_data_access.config.settings import AppConfig

from .attribute_provider import JsonAttributeDataAccessProvider
from .client import WebServiceClient
from .credential_provider import JsonCredentialDataAccessProvider

PLUGIN_IMPLEMENTATION_TYPE = "json"


@dataclass(frozen=True)
class JsonDataAccessPlugin:
    """One configured data source exposing a credential and an attribute provider."""
    config: AppConfig
    client: WebServiceClient
    credential_provider: JsonCredentialDataAccessProvider
    attribute_provider: JsonAttributeDataAccessProvider

    @property
    def implementation_type(self) -> str:
        return PLUGIN_IMPLEMENTATION_TYPE


def create_plugin(
    config: AppConfig,
    client: Optional[WebServiceClient] = None,
    log: Optional[logging.Logger] = None,
) -> JsonDataAccessPlugin:
    """Create both providers for a configuration, sharing one transport.
    
    Args:
        config: Validated application configuration
        client: Transport override (defaults to one built from config.web_service)
        log: Diagnostics sink passed to both providers
        
    Returns:
        JsonDataAccessPlugin
    """
    if client is None:
        client = WebServiceClient(
            config.web_service.base_url,
            timeout=config.web_service.timeout,
            verify_tls=config.web_service.verify_tls,
        )
    
    logging.getLogger(__name__).debug(
        "Instantiating JSON data-source plugin with ID=%s", config.plugin_id
    )
    return JsonDataAccessPlugin(
        config=config,
        client=client,
        credential_provider=JsonCredentialDataAccessProvider(config.credential_access, client, log),
        attribute_provider=JsonAttributeDataAccessProvider(config.attributes, client, log),
    )
