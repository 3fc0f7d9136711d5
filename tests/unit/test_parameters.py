"""Tests for parameter mappings and their resolution."""
import base64

import pytest

from json_data_access.core.attributes import SubjectAttributes
from json_data_access.core.exceptions import ConfigurationError
from json_data_access.core.parameters import (
    AttributeLookupMapping,
    ProvideAs,
    StaticMapping,
    encoder_for,
    parameter_mapping_from_config,
    resolve_parameters,
)


class TestParameterMappingFromConfig:
    def test_without_value_looks_up_same_name(self):
        mapping = parameter_mapping_from_config({"parameter-name": "mail"})
        assert mapping == AttributeLookupMapping(parameter_name="mail", attribute_name="mail")

    def test_use_value_of_attribute(self):
        mapping = parameter_mapping_from_config(
            {"parameter-name": "email", "value": {"use-value-of-attribute": "mail"}}
        )
        assert mapping == AttributeLookupMapping(parameter_name="email", attribute_name="mail")

    def test_static_value(self):
        mapping = parameter_mapping_from_config({"parameter-name": "tenant", "value": {"static-value": "acme"}})
        assert mapping == StaticMapping(parameter_name="tenant", value="acme")

    @pytest.mark.parametrize(
        "raw, message",
        [
            ({"parameter-name": "x", "value": {}}, "needs one of"),
            ({"parameter-name": "x", "value": {"static-value": "a", "use-value-of-attribute": "b"}}, "only one of"),
            ({"value": {"static-value": "a"}}, "missing 'parameter-name'"),
            ({"parameter-name": "x", "value": "static"}, "must be a mapping"),
            ("tenant", "must be mappings"),
        ],
    )
    def test_invalid_entries(self, raw, message):
        with pytest.raises(ConfigurationError, match=message):
            parameter_mapping_from_config(raw)


class TestResolve:
    def test_static_ignores_context(self):
        mapping = StaticMapping("tenant", "acme")
        assert mapping.resolve(SubjectAttributes.of("alice")) == "acme"
        assert mapping.resolve(SubjectAttributes.of("bob", {"tenant": "other"})) == "acme"

    @pytest.mark.parametrize("value, expected", [("a@b.c", "a@b.c"), (7, "7"), (True, "true"), (2.5, "2.5")])
    def test_lookup_primitive(self, value, expected):
        mapping = AttributeLookupMapping("email", "mail")
        assert mapping.resolve(SubjectAttributes.of("alice", {"mail": value})) == expected

    @pytest.mark.parametrize("attributes", [{}, {"mail": ["a", "b"]}, {"mail": {"primary": "a"}}, {"mail": None}])
    def test_lookup_absent_or_structured(self, attributes):
        mapping = AttributeLookupMapping("email", "mail")
        assert mapping.resolve(SubjectAttributes.of("alice", attributes)) is None


def test_header_encoder_is_utf8_base64():
    assert encoder_for(ProvideAs.HEADER_PARAMETER)("jörg") == base64.b64encode("jörg".encode("utf-8")).decode()


def test_query_encoder_is_identity():
    assert encoder_for(ProvideAs.QUERY_PARAMETER)("a b&c") == "a b&c"


class TestResolveParameters:
    mappings = (
        StaticMapping("tenant", "acme"),
        AttributeLookupMapping("email", "mail"),
        AttributeLookupMapping("phone", "phone"),
    )

    def test_query_placement(self):
        subject = SubjectAttributes.of("alice", {"mail": "alice@example.com"})
        params = resolve_parameters(subject, "user", self.mappings, ProvideAs.QUERY_PARAMETER)
        assert params == {"user": "alice", "tenant": "acme", "email": "alice@example.com"}

    def test_header_placement_encodes_every_value(self):
        subject = SubjectAttributes.of("alice", {"mail": "alice@example.com"})
        params = resolve_parameters(subject, "X-User", self.mappings, ProvideAs.HEADER_PARAMETER)
        assert {name: base64.b64decode(value).decode() for name, value in params.items()} == {
            "X-User": "alice",
            "tenant": "acme",
            "email": "alice@example.com",
        }

    def test_absent_mapping_is_omitted_not_blank(self):
        params = resolve_parameters(SubjectAttributes.of("alice"), "user", self.mappings, ProvideAs.QUERY_PARAMETER)
        assert "email" not in params
        assert "phone" not in params
