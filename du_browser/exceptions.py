"""Errors raised at the boundary between report building and the client."""


class DuBrowserError(Exception):
    """Base class for du-browser errors."""


class EncodingError(DuBrowserError):
    """A report could not be rendered or serialized."""


class TransportWriteError(DuBrowserError):
    """A response fragment could not be delivered to the client."""
