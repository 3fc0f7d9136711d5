"""Tests for the attribute lookup flow."""
import base64
import logging
from unittest.mock import Mock

import pytest

from json_data_access.config import AttributesConfig, ParameterSubject, UrlPathSubject
from json_data_access.core.attribute_provider import JsonAttributeDataAccessProvider
from json_data_access.core.attributes import SubjectAttributes
from json_data_access.core.parameters import AttributeLookupMapping, ProvideAs, StaticMapping
from tests.conftest import RecordingClient, make_response


def make_provider(client=None, provide_subject=None, mappings=(), log=None):
    configuration = AttributesConfig(
        provide_subject=provide_subject or UrlPathSubject(),
        parameter_mappings=tuple(mappings),
    )
    return JsonAttributeDataAccessProvider(configuration, client or RecordingClient(), log)


class TestCreateRequestPath:
    def test_default_path_substitutes_subject(self):
        assert make_provider().create_request_path("alice") == "/users/alice"

    def test_subject_is_url_encoded(self):
        provider = make_provider(provide_subject=UrlPathSubject("/accounts/:subject/profile"))
        assert provider.create_request_path("alice smith/ö") == "/accounts/alice+smith%2F%C3%B6/profile"

    def test_every_placeholder_occurrence_is_replaced(self):
        provider = make_provider(provide_subject=UrlPathSubject("/:subject/x/:subject"))
        assert provider.create_request_path("bob") == "/bob/x/bob"

    def test_parameter_mode_uses_path_unchanged(self):
        provider = make_provider(provide_subject=ParameterSubject("user", url_path="/lookup/:subject"))
        assert provider.create_request_path("alice") == "/lookup/:subject"


class TestParameters:
    mappings = (StaticMapping("tenant", "acme"), AttributeLookupMapping("email", "mail"))

    def test_url_path_mode_sends_no_parameters(self):
        provider = make_provider(mappings=self.mappings)
        subject = SubjectAttributes.of("alice", {"mail": "a@example.com"})
        assert provider.create_query_parameters(subject) == {}
        assert provider.create_header_parameters(subject) == {}

    def test_query_mode(self):
        provider = make_provider(
            provide_subject=ParameterSubject("user", provide_as=ProvideAs.QUERY_PARAMETER),
            mappings=self.mappings,
        )
        subject = SubjectAttributes.of("alice", {"mail": "a@example.com"})
        assert provider.create_query_parameters(subject) == {"user": "alice", "tenant": "acme", "email": "a@example.com"}
        assert provider.create_header_parameters(subject) == {}

    def test_header_mode(self):
        provider = make_provider(
            provide_subject=ParameterSubject("X-User", provide_as=ProvideAs.HEADER_PARAMETER),
            mappings=self.mappings,
        )
        subject = SubjectAttributes.of("alice")
        headers = provider.create_header_parameters(subject)
        assert provider.create_query_parameters(subject) == {}
        assert headers == {
            "X-User": base64.b64encode(b"alice").decode(),
            "tenant": base64.b64encode(b"acme").decode(),
        }


class TestGetAttributes:
    def test_success_returns_single_row(self):
        client = RecordingClient(make_response(200, {"name": "Alice", "groups": ["admins"]}))
        table = make_provider(client).get_attributes("alice")

        assert list(table) == [{"name": "Alice", "groups": ["admins"]}]
        request = client.last_request
        assert request.method == "GET"
        assert request.path == "/users/alice"
        assert request.accept == "application/json"
        assert request.body is None

    def test_known_attributes_feed_mappings(self):
        client = RecordingClient(make_response(200, {"ok": True}))
        provider = make_provider(
            client,
            provide_subject=ParameterSubject("user", url_path="/users", provide_as=ProvideAs.QUERY_PARAMETER),
            mappings=[AttributeLookupMapping("email", "mail")],
        )
        provider.get_attributes(SubjectAttributes.of("alice", {"mail": "a@example.com"}))

        request = client.last_request
        assert request.path == "/users"
        assert dict(request.query) == {"user": "alice", "email": "a@example.com"}
        assert request.headers == ()

    def test_bare_subject_uses_empty_context(self):
        client = RecordingClient(make_response(200, {"ok": True}))
        provider = make_provider(
            client,
            provide_subject=ParameterSubject("user", provide_as=ProvideAs.QUERY_PARAMETER),
            mappings=[AttributeLookupMapping("email", "mail")],
        )
        provider.get_attributes("alice")
        assert dict(client.last_request.query) == {"user": "alice"}

    @pytest.mark.parametrize("status", [301, 400, 404, 500])
    def test_non_success_is_empty(self, status):
        client = RecordingClient(make_response(status, {"error": "not found"}))
        assert make_provider(client).get_attributes("alice").is_empty

    def test_text_plain_is_still_parsed(self):
        client = RecordingClient(make_response(200, '{"role": "admin"}', content_type="text/plain"))
        assert list(make_provider(client).get_attributes("alice")) == [{"role": "admin"}]

    def test_empty_body_is_empty_result_with_warning(self):
        log = Mock(spec=logging.Logger)
        client = RecordingClient(make_response(200))
        assert make_provider(client, log=log).get_attributes("alice").is_empty
        log.warning.assert_called_once()

    def test_malformed_json_is_empty_result(self):
        client = RecordingClient(make_response(200, "<html>oops</html>"))
        assert make_provider(client).get_attributes("alice").is_empty

    def test_repeated_calls_are_identical(self):
        client = RecordingClient(make_response(200, {"a": 1}), make_response(200, {"a": 1}))
        provider = make_provider(client)
        assert list(provider.get_attributes("alice")) == list(provider.get_attributes("alice"))
        assert client.requests[0] == client.requests[1]

    def test_transport_errors_propagate(self):
        client = Mock()
        client.execute.side_effect = ConnectionError("backend down")
        with pytest.raises(ConnectionError):
            make_provider(client).get_attributes("alice")
