from json_data_access.core.client import WebServiceClient
from json_data_access.core.plugin import PLUGIN_IMPLEMENTATION_TYPE, create_plugin
from tests.conftest import RecordingClient, make_response


def test_create_plugin_builds_client_from_config(app_config):
    cfg = app_config({"web-service": {"base-url": "http://hr:9000", "timeout": 7, "verify-tls": False}})
    plugin = create_plugin(cfg)

    assert plugin.implementation_type == PLUGIN_IMPLEMENTATION_TYPE == "json"
    assert isinstance(plugin.client, WebServiceClient)
    assert plugin.client.base_url == "http://hr:9000"
    assert plugin.client.timeout == 7
    assert plugin.client.verify_tls is False
    assert plugin.credential_provider.client is plugin.client
    assert plugin.attribute_provider.client is plugin.client


def test_create_plugin_wires_configuration(app_config):
    cfg = app_config({"credential-access": {"backend-verifies-password": True}})
    client = RecordingClient(make_response(200, {"role": "admin"}))
    plugin = create_plugin(cfg, client=client)

    assert plugin.credential_provider.custom_query_verifies_password() is True
    assert list(plugin.attribute_provider.get_attributes("alice")) == [{"role": "admin"}]
    assert client.last_request.path == "/users/alice"
