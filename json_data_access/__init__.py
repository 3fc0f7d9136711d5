"""JSON Data Access Provider package.

Delegates password verification and attribute lookups to a REST/JSON backend.

To use the providers directly:
    from json_data_access.config import load_settings
    from json_data_access.core.plugin import create_plugin

    plugin = create_plugin(load_settings("config.yaml"))
    plugin.attribute_provider.get_attributes("alice")

To serve them over HTTP:
    from json_data_access.flask_app import create_app
"""
# Note: flask_app is not imported here so the providers and CLI scripts
# can be used without Flask
