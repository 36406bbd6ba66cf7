"""Ports (interfaces) for Ephany-Tools.

The catalog service depends on :class:`AssetCatalogPort` rather than on the
HTTP client directly, so it can be driven by fakes in tests.
"""
from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from .models import Asset, AssetFile, PagedResult


@dataclass(frozen=True)
class DownloadResult:
    """Represents a completed download on disk."""

    path: str
    filename: str
    asset_id: Optional[int] = None


class AssetCatalogPort(ABC):
    """Abstract access to the Ephany asset collection.

    ``cancel`` is any object with an ``is_set()`` method (usually a
    ``threading.Event``).
    """

    @abstractmethod
    def get_asset_page(self, page: int = 1, page_size: int = 20, *, cancel=None) -> PagedResult[Asset]:
        """Fetch one page of assets."""

    @abstractmethod
    def get_all_assets(self, *, cancel=None, progress: bool = False) -> List[Asset]:
        """Crawl every page and return all assets in server order."""

    @abstractmethod
    def get_revit_assets(self, *, cancel=None) -> List[Asset]:
        """Crawl every page and keep only assets with a Revit family file."""

    @abstractmethod
    def search_assets(self, keyword: str, page: int = 1, page_size: int = 20, *, cancel=None) -> PagedResult[Asset]:
        """Fetch one page of assets matching ``keyword``."""

    @abstractmethod
    def download_file(self, file: AssetFile, destination: Union[str, os.PathLike], *, cancel=None) -> Path:
        """Stream ``file`` to ``destination`` and return the written path."""
