"""Configuration module for the JSON data access provider."""
from .settings import (
    AppConfig,
    AttributesConfig,
    CredentialAccessConfig,
    ParameterSubject,
    SubmitAs,
    UrlPathSubject,
    WebServiceConfig,
    build_config,
    load_settings,
)

__all__ = [
    "AppConfig",
    "AttributesConfig",
    "CredentialAccessConfig",
    "ParameterSubject",
    "SubmitAs",
    "UrlPathSubject",
    "WebServiceConfig",
    "build_config",
    "load_settings",
]
