"""Ephany-Tools: light-weight Python client for the Ephany asset catalog

Usage
-----
>>> import ephany_tools as et
>>> opts = et.ClientOptions("https://ephany.example.com/api", "MY_KEY")
>>> with et.EphanyClient(opts) as client:
...     page = client.get_asset_page(page=1, page_size=20)
...     revit = client.get_revit_assets()
...     client.download_file(revit[0].revit_family_file, "AVN-1.rfa")

This package wraps the Ephany REST API and provides:
- Single-page listing, full-collection crawl and keyword search of assets
- A filtered view of assets carrying a Revit family (RFA) file
- Streaming file downloads that never leave a truncated file behind
- CSV export and bulk downloads via ``CatalogService``

Authentication
--------------
The credential is sent either as ``X-Api-Key`` (``AuthScheme.API_KEY``) or as
``Authorization: Token ...`` (``AuthScheme.USER_TOKEN``); the caller picks.
The command line (``python -m ephany_tools``) reads ``EPHANY_BASE_URL``,
``EPHANY_API_KEY`` and ``EPHANY_AUTH_SCHEME``; the client itself reads no
environment variables.
- Dependencies: requests, pandas, tqdm.
"""

from .api import EphanyClient
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectivityError,
    EphanyError,
    InvalidArgumentError,
    OperationCancelled,
    ParseError,
    RequestError,
)
from .models import Asset, AssetFile, AssetFileCategory, Category, Manufacturer, PagedResult
from .options import AuthScheme, ClientOptions
from .services.catalog import CatalogService

__all__ = [
    "EphanyClient",
    "ClientOptions",
    "AuthScheme",
    "CatalogService",
    "Asset",
    "AssetFile",
    "AssetFileCategory",
    "Category",
    "Manufacturer",
    "PagedResult",
    "EphanyError",
    "ConfigurationError",
    "InvalidArgumentError",
    "AuthenticationError",
    "RequestError",
    "ParseError",
    "ConnectivityError",
    "OperationCancelled",
]
