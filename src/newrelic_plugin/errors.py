"""Exceptions raised by the metrics plugin."""


class PluginError(Exception):
    """Base class for plugin errors."""


class PreconditionError(PluginError, ValueError):
    """Required request fields are missing; raised before any network call."""


class TransportError(PluginError):
    """The HTTP client could not complete the exchange."""
