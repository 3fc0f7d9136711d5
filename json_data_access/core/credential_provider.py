"""Password verification and password updates against the JSON backend."""
from __future__ import annotations
import json
import logging
from typing import Optional

from json_data_access.config.settings import (
    PASSWORD_PLACEHOLDER,
    SUBJECT_PLACEHOLDER,
    CredentialAccessConfig,
    SubmitAs,
)

from .attributes import AccountAttributes, AuthenticationAttributes, SubjectAttributes, read_attributes
from .client import (
    APPLICATION_JSON,
    APPLICATION_WWW_FORM_URLENCODED,
    RequestDescriptor,
    ResponseOutcome,
    WebServiceClient,
)
from .exceptions import ConfigurationError
from .web_utils import is_successful_json_response, url_encode, url_encoded_form_data

logger = logging.getLogger(__name__)


class JsonCredentialDataAccessProvider:
    """Verify and update passwords through the JSON backend.
    
    Features:
    - Submission as JSON body, form body or query string (credential-access.submit-as)
    - Password withheld from the parameters when the backend does not verify it
    - Password updates as a JSON PUT, reported through logs only
    
    Usage:
        provider = JsonCredentialDataAccessProvider(cfg.credential_access, WebServiceClient(base_url))
        result = provider.verify_password("alice", "secret")
    """
    
    def __init__(
        self,
        configuration: CredentialAccessConfig,
        client: WebServiceClient,
        log: Optional[logging.Logger] = None,
    ):
        """Initialize the provider.
        
        Args:
            configuration: Credential access settings
            client: Transport towards the JSON web service
            log: Diagnostics sink (defaults to this module's logger)
        """
        self.configuration = configuration
        self.client = client
        self.log = log or logger
    
    def custom_query_verifies_password(self) -> bool:
        """Whether the backend checks the password (otherwise the host must)."""
        return self.configuration.backend_verifies_password
    
    def verify_password(self, username: str, password: str) -> Optional[AuthenticationAttributes]:
        """Ask the backend about a username/password pair.
        
        Args:
            username: Subject to authenticate
            password: Password presented by the user
            
        Returns:
            Authentication attributes built from the backend answer, or None
            (the host treats None as failed authentication)
        """
        response = self.client.execute(self.build_verify_password_request(username, password))
        self.log.debug("JSON data-source responds with status: %s", response.status_code)
        return self.get_authentication_attributes_from(response, username)
    
    def update_password(self, account: AccountAttributes) -> None:
        """Send a new password to the backend with a JSON PUT.
        
        Nothing is returned; the outcome is only logged.
        
        Args:
            account: Account carrying username and the new password
        """
        subject_id = account.username
        if account.password is None:
            self.log.warning("Cannot update account password, missing password value")
            return
        
        response = self.client.execute(self.build_update_password_request(subject_id, account.password))
        
        if is_successful_json_response(response, self.log):
            self.log.debug("The update password request for %s reported success.", subject_id)
            return
        
        self.log.info(
            "The update password request for %s reported failure (HTTP response %s)",
            subject_id, response.status_code,
        )
        response_body = response.text
        if response_body:
            self.log.debug("Message returned in response body:\n%s", response_body)
        else:
            self.log.debug("No message returned in response body.")
    
    def build_verify_password_request(self, username: str, password: str) -> RequestDescriptor:
        """Build the verification request for the configured submission mode."""
        path = self.create_request_path(username, password)
        
        if self.configuration.backend_verifies_password:
            parameters = self.create_request_parameters(username, password)
        else:
            # Don't send the password when the backend is not doing anything with it
            parameters = self.create_request_parameters(username, None)
        
        submit_as = self.configuration.submit_as
        if submit_as is SubmitAs.POST_AS_JSON:
            return RequestDescriptor(
                method="POST",
                path=path,
                body=json.dumps(parameters, separators=(",", ":")).encode("utf-8"),
                content_type=APPLICATION_JSON,
            )
        if submit_as is SubmitAs.POST_AS_URLENCODED_FORMDATA:
            return RequestDescriptor(
                method="POST",
                path=path,
                body=url_encoded_form_data(parameters).encode("iso-8859-1"),
                content_type=APPLICATION_WWW_FORM_URLENCODED,
            )
        if submit_as is SubmitAs.GET_AS_QUERYSTRING:
            return RequestDescriptor(method="GET", path=path, query=tuple(parameters.items()))
        raise ConfigurationError(f"unknown value for submit-as: {submit_as!r}")
    
    def build_update_password_request(self, username: str, password: str) -> RequestDescriptor:
        """Build the password update request: always PUT with a JSON body."""
        return RequestDescriptor(
            method="PUT",
            path=self.create_request_path(username, password),
            body=json.dumps(self.create_request_parameters(username, password), separators=(",", ":")).encode("utf-8"),
            content_type=APPLICATION_JSON,
        )
    
    def get_authentication_attributes_from(
        self, response: ResponseOutcome, username: str
    ) -> Optional[AuthenticationAttributes]:
        attributes = read_attributes(response, self.log)
        if attributes is None:
            return None
        # All returned JSON attributes are categorized as subject attributes
        return AuthenticationAttributes(subject_attributes=SubjectAttributes.of(username, attributes))
    
    def create_request_path(self, subject: str, password: Optional[str]) -> str:
        """Substitute ``:subject`` and ``:password`` in the configured url-path.
        
        The password placeholder is filled even when the backend does not verify
        passwords; a None password leaves it empty.
        """
        return (
            self.configuration.url_path
            .replace(SUBJECT_PLACEHOLDER, url_encode(subject))
            .replace(PASSWORD_PLACEHOLDER, url_encode(password or ""))
        )
    
    def create_request_parameters(self, subject_id: str, password: Optional[str]) -> dict[str, str]:
        parameters = {self.configuration.username_parameter: subject_id}
        if password is not None:
            parameters[self.configuration.password_parameter] = password
        return parameters
