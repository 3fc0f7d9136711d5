"""Core request construction and response interpretation.

Pure Python, independent of the Flask host surface.

Module Structure:
    - client.py              : RequestDescriptor, ResponseOutcome, WebServiceClient (requests)
    - web_utils.py           : URL/form encoding, Content-Type and status validation
    - attributes.py          : Attribute containers and JSON response translation
    - parameters.py          : Parameter mappings (attribute lookup / static value)
    - attribute_provider.py  : Attribute lookup flow
    - credential_provider.py : Password verification and update flows
    - plugin.py              : Wiring of configuration, transport and providers
    - exceptions.py          : Typed exceptions

Usage Pattern:
    Modules are NOT auto-imported here; configuration types live in
    json_data_access.config and import from this package.
    
        from json_data_access.core.plugin import create_plugin
        from json_data_access.core.attributes import SubjectAttributes
"""
