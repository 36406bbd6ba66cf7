"""Connection settings for :class:`ephany_tools.api.EphanyClient`."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .config import DEFAULT_TIMEOUT
from .exceptions import ConfigurationError


class AuthScheme(str, Enum):
    """How the credential is attached to each request."""

    API_KEY = "api_key"  # X-Api-Key: <key>
    USER_TOKEN = "user_token"  # Authorization: Token <token>


@dataclass(frozen=True)
class ClientOptions:
    """Base URL, credential and timeout for one client.

    ``base_url`` is normalized to end with a single ``/`` so endpoint paths
    can be appended directly. Blank values fail here rather than on the first
    request.
    """

    base_url: str
    api_key: str
    scheme: AuthScheme = AuthScheme.API_KEY
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.base_url or not str(self.base_url).strip():
            raise ConfigurationError("A base URL is required.")
        if not self.api_key or not str(self.api_key).strip():
            raise ConfigurationError("Authentication credential (API key or user token) is required.")
        base = str(self.base_url).strip().rstrip("/") + "/"
        object.__setattr__(self, "base_url", base)
