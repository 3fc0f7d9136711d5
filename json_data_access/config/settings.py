"""Settings loader: YAML configuration file, environment overrides and Docker secrets.

Example configuration (keys mirror the plugin configuration tree):

    id: json-backend
    web-service:
      base-url: http://backend:8080
      timeout: 5
    credential-access:
      backend-verifies-password: true
      submit-as: post-as-json
      url-path: /credentials/:subject
    attributes:
      provide-subject:
        parameter:
          url-path: /users
          username-parameter: user
          provide-as: query-parameter
      parameter-mappings:
        - parameter-name: tenant
          value:
            static-value: acme
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from json_data_access.core.exceptions import ConfigurationError
from json_data_access.core.parameters import ParameterMapping, ProvideAs, parameter_mapping_from_config

SUBJECT_PLACEHOLDER = ":subject"
PASSWORD_PLACEHOLDER = ":password"

logger = logging.getLogger(__name__)


class SubmitAs(str, Enum):
    """HTTP method and encoding used to send credentials."""
    POST_AS_JSON = "post-as-json"
    POST_AS_URLENCODED_FORMDATA = "post-as-urlencoded-formdata"
    GET_AS_QUERYSTRING = "get-as-querystring"


@dataclass(frozen=True)
class WebServiceConfig:
    base_url: str = "http://localhost:8080"
    timeout: float = 5
    verify_tls: bool = True


@dataclass(frozen=True)
class CredentialAccessConfig:
    """Credential verification/update settings."""
    backend_verifies_password: bool = False
    submit_as: SubmitAs = SubmitAs.POST_AS_JSON
    username_parameter: str = "username"
    password_parameter: str = "password"
    url_path: str = "/"


@dataclass(frozen=True)
class UrlPathSubject:
    """Subject substituted into the ``:subject`` placeholder of the path."""
    url_path: str = "/users/:subject"


@dataclass(frozen=True)
class ParameterSubject:
    """Subject sent as a query or header parameter, path used as-is."""
    username_parameter: str
    url_path: str = "/users"
    provide_as: ProvideAs = ProvideAs.HEADER_PARAMETER


ProvideSubject = Union[UrlPathSubject, ParameterSubject]


@dataclass(frozen=True)
class AttributesConfig:
    """Attribute lookup settings."""
    provide_subject: ProvideSubject = field(default_factory=UrlPathSubject)
    parameter_mappings: tuple[ParameterMapping, ...] = ()


@dataclass(frozen=True)
class AppConfig:
    """Application configuration container."""
    plugin_id: str = "json"
    web_service: WebServiceConfig = field(default_factory=WebServiceConfig)
    credential_access: CredentialAccessConfig = field(default_factory=CredentialAccessConfig)
    attributes: AttributesConfig = field(default_factory=AttributesConfig)
    
    # Host HTTP surface
    api_token: str = ""
    log_level: str = "INFO"

    @property
    def password_in_url_path(self) -> bool:
        """True when the real password ends up in the credential request URL."""
        return PASSWORD_PLACEHOLDER in self.credential_access.url_path


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).
    
    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)
    
    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback
    
    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name
    
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}")
    
    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            print(f"[settings] ✓ Loaded {env_var} from environment (fallback)")
            return secret_value
    
    return None


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def _enum(enum_type, value: Any, key: str):
    try:
        return enum_type(str(value).lower().replace("_", "-"))
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ConfigurationError(f"Unknown value for {key}: {value!r} (expected one of: {allowed})") from None


def _bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in {"true", "false"}:
        return value.lower() == "true"
    raise ConfigurationError(f"'{key}' must be a boolean, got {value!r}")


def _required(raw: Mapping[str, Any], key: str, section: str) -> str:
    value = raw.get(key)
    if value is None or value == "":
        raise ConfigurationError(f"'{section}' is missing required '{key}'")
    return str(value)


def _build_web_service(raw: Mapping[str, Any]) -> WebServiceConfig:
    defaults = WebServiceConfig()
    try:
        timeout = float(raw.get("timeout", defaults.timeout))
    except (TypeError, ValueError):
        raise ConfigurationError(f"'web-service.timeout' must be a number, got {raw.get('timeout')!r}") from None
    return WebServiceConfig(
        base_url=str(raw.get("base-url", defaults.base_url)).rstrip("/"),
        timeout=timeout,
        verify_tls=_bool(raw.get("verify-tls", defaults.verify_tls), "web-service.verify-tls"),
    )


def _build_credential_access(raw: Mapping[str, Any]) -> CredentialAccessConfig:
    defaults = CredentialAccessConfig()
    return CredentialAccessConfig(
        backend_verifies_password=_bool(
            raw.get("backend-verifies-password", defaults.backend_verifies_password),
            "credential-access.backend-verifies-password",
        ),
        submit_as=_enum(SubmitAs, raw.get("submit-as", defaults.submit_as.value), "credential-access.submit-as"),
        username_parameter=str(raw.get("username-parameter", defaults.username_parameter)),
        password_parameter=str(raw.get("password-parameter", defaults.password_parameter)),
        url_path=str(raw.get("url-path", defaults.url_path)),
    )


def _build_provide_subject(raw: Optional[Mapping[str, Any]]) -> ProvideSubject:
    """Resolve the provide-subject one-of; an absent or empty section selects the url-path default."""
    if raw is None:
        return UrlPathSubject()
    if not isinstance(raw, Mapping):
        raise ConfigurationError("'attributes.provide-subject' must be a mapping")
    
    url_path = raw.get("url-path")
    parameter = raw.get("parameter")
    if url_path is None and parameter is None:
        # url-path carries a default, so an empty section still selects it
        return UrlPathSubject()
    if url_path is not None and parameter is not None:
        raise ConfigurationError("'attributes.provide-subject' must set only one of 'url-path' or 'parameter'")
    
    if url_path is not None:
        return UrlPathSubject(url_path=str(url_path))
    
    if not isinstance(parameter, Mapping):
        raise ConfigurationError("'attributes.provide-subject.parameter' must be a mapping")
    return ParameterSubject(
        username_parameter=_required(parameter, "username-parameter", "attributes.provide-subject.parameter"),
        url_path=str(parameter.get("url-path", "/users")),
        provide_as=_enum(
            ProvideAs,
            parameter.get("provide-as", ProvideAs.HEADER_PARAMETER.value),
            "attributes.provide-subject.parameter.provide-as",
        ),
    )
    

def _build_attributes(raw: Mapping[str, Any]) -> AttributesConfig:
    mappings_raw = raw.get("parameter-mappings") or []
    if not isinstance(mappings_raw, list):
        raise ConfigurationError("'attributes.parameter-mappings' must be a list")
    return AttributesConfig(
        provide_subject=_build_provide_subject(raw.get("provide-subject")),
        parameter_mappings=tuple(parameter_mapping_from_config(entry) for entry in mappings_raw),
    )


def build_config(raw: Optional[Mapping[str, Any]] = None, **overrides: Any) -> AppConfig:
    """Convert a raw configuration mapping into a validated AppConfig.
    
    Args:
        raw: Parsed configuration (kebab-case keys), None for all defaults
        **overrides: AppConfig fields replacing the parsed values (api_token, log_level, ...)
        
    Returns:
        Immutable AppConfig
        
    Raises:
        ConfigurationError: On one-of violations, unknown enum values or malformed sections
    """
    raw = raw or {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Configuration root must be a mapping, got {type(raw).__name__}")
    
    values: dict[str, Any] = dict(
        plugin_id=str(raw.get("id", "json")),
        web_service=_build_web_service(_section(raw, "web-service")),
        credential_access=_build_credential_access(_section(raw, "credential-access")),
        attributes=_build_attributes(_section(raw, "attributes")),
        api_token=str(raw.get("api-token", "")),
        log_level=str(raw.get("log-level", "INFO")).upper(),
    )
    values.update(overrides)
    cfg = AppConfig(**values)
    
    if cfg.password_in_url_path and not cfg.credential_access.backend_verifies_password:
        logger.warning(
            "credential-access url-path contains %s while backend-verifies-password is false: "
            "the password is still substituted into the request URL",
            PASSWORD_PLACEHOLDER,
        )
    return cfg


def _read_config_file(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            return yaml.safe_load(handle) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e


def load_settings(path: str | Path | None = None) -> AppConfig:
    """Load settings from a YAML file, environment overrides and /run/secrets.
    
    Args:
        path: Configuration file (defaults to JSON_DAP_CONFIG env var, no file means defaults)
        
    Returns:
        Validated AppConfig
        
    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    path = path or os.environ.get("JSON_DAP_CONFIG")
    raw: dict[str, Any] = dict(_read_config_file(Path(path))) if path else {}
    
    # Environment overrides for deployment-specific values
    web_service = dict(_section(raw, "web-service"))
    if os.environ.get("JSON_DAP_BASE_URL"):
        web_service["base-url"] = os.environ["JSON_DAP_BASE_URL"]
    if os.environ.get("JSON_DAP_TIMEOUT"):
        web_service["timeout"] = os.environ["JSON_DAP_TIMEOUT"]
    raw["web-service"] = web_service
    
    if os.environ.get("JSON_DAP_LOG_LEVEL"):
        raw["log-level"] = os.environ["JSON_DAP_LOG_LEVEL"]
    
    api_token = _load_secret_from_file("json_dap_api_token", "JSON_DAP_API_TOKEN")
    if api_token:
        raw["api-token"] = api_token
    
    return build_config(raw)
