"""Exception hierarchy for the Ephany client.

Every failure raised by the client derives from :class:`EphanyError`, so
callers can catch the whole family at once or branch on the specific kind.
Underlying causes (``requests`` or JSON errors) are kept on ``__cause__``.

:class:`OperationCancelled` is not an :class:`EphanyError`; ``except
EphanyError`` does not catch it.
"""
from __future__ import annotations

from typing import Optional


class EphanyError(Exception):
    """Base class for all client failures."""


class ConfigurationError(EphanyError, ValueError):
    """Missing or blank base URL / credential, or use of a closed client."""


class InvalidArgumentError(EphanyError, ValueError):
    """An argument was rejected before any request was sent."""


class AuthenticationError(EphanyError):
    """The server answered 401 or 403."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class RequestError(EphanyError):
    """The server answered with a non-success status other than 401/403."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ParseError(EphanyError):
    """The response body is not JSON or does not have the expected shape."""


class ConnectivityError(EphanyError):
    """Transport-level failure: DNS, refused connection, timeout, broken stream."""


class OperationCancelled(Exception):
    """The caller's cancellation signal was set while the operation ran."""
