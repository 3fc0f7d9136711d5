"""Exceptions raised by the JSON data access providers."""


class JsonDataAccessError(Exception):
    """Base exception for all JSON data access operations."""
    pass


class ConfigurationError(JsonDataAccessError):
    """Configuration could not be resolved (missing one-of choice, unknown enum value, ...).

    Raised while loading configuration, never per request.
    """
    pass

