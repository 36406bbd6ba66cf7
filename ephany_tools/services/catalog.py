"""Use-cases for exporting the Ephany catalog and bulk-downloading its files."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Set
from urllib.parse import urlparse

import pandas as pd
from tqdm import tqdm

from ..config import CATEGORY_EXTENSIONS
from ..exceptions import EphanyError
from ..models import Asset, AssetFile, AssetFileCategory
from ..ports import AssetCatalogPort, DownloadResult
from ..utils import ensure_dir, flatten_assets, to_csv

log = logging.getLogger("ephany_tools")


def local_filename(asset: Asset, file: AssetFile, *, with_id: bool = False) -> str:
    """``<type_id><ext>``, e.g. ``AVN-1.rfa``; falls back to the asset id.

    ``with_id`` appends the asset id (``AVN-1_42.rfa``).
    """
    stem = (asset.type_id or "").strip() or str(asset.id)
    if with_id:
        stem = f"{stem}_{asset.id}"
    stem = stem.replace("/", "_").replace("\\", "_")
    ext = CATEGORY_EXTENSIONS.get(file.category.value)
    if ext is None:
        ext = PurePosixPath(urlparse(file.url or "").path).suffix
    return f"{stem}{ext}"


@dataclass
class CatalogService:
    """Service that orchestrates catalog listings, exports and downloads."""

    client: AssetCatalogPort

    def assets_frame(self, assets: Iterable[Asset]) -> pd.DataFrame:
        return flatten_assets(assets)

    def list_assets_frame(self, *, revit_only: bool = False, cancel=None) -> pd.DataFrame:
        """Crawl the catalog and return one row per asset."""
        if revit_only:
            assets = self.client.get_revit_assets(cancel=cancel)
        else:
            assets = self.client.get_all_assets(cancel=cancel)
        return self.assets_frame(assets)

    def export_csv(self, path: os.PathLike | str, *, revit_only: bool = False, cancel=None) -> Path:
        return to_csv(self.list_assets_frame(revit_only=revit_only, cancel=cancel), path)

    def download_files(
        self,
        assets: Iterable[Asset],
        output_dir: os.PathLike | str,
        *,
        category: AssetFileCategory = AssetFileCategory.REVIT_FAMILY,
        cancel=None,
        progress: bool = True,
    ) -> List[DownloadResult]:
        """Download the first file of ``category`` for each asset into ``output_dir``.

        Assets without such a file are skipped. A failed file is logged and
        the batch continues; cancellation stops the whole batch.
        """
        out_dir = ensure_dir(output_dir)
        todo = [(a, a.first_file(category)) for a in assets]
        todo = [(a, f) for a, f in todo if f is not None]

        results: List[DownloadResult] = []
        failed: List[str] = []
        used: Set[str] = set()
        for asset, file in tqdm(todo, desc=f"Downloading {category.name.lower()} files", disable=not progress):
            name = local_filename(asset, file)
            if name in used:
                unique = local_filename(asset, file, with_id=True)
                log.warning(f"{name} is already taken in this batch; saving asset {asset.id} as {unique}")
                name = unique
            used.add(name)
            target = out_dir / name
            try:
                path = self.client.download_file(file, target, cancel=cancel)
            except EphanyError as e:
                log.error(f"[fail] {target.name}: {e}")
                failed.append(target.name)
                continue
            results.append(DownloadResult(path=str(path), filename=path.name, asset_id=asset.id))
        if failed:
            log.warning(f"{len(failed)} file(s) failed to download: {failed[:5]}{'...' if len(failed) > 5 else ''}")
        return results

    def download_revit_families(self, output_dir: os.PathLike | str, *, cancel=None, progress: bool = True) -> List[DownloadResult]:
        """Crawl the Revit-ready assets and download each one's family file."""
        assets = self.client.get_revit_assets(cancel=cancel)
        return self.download_files(assets, output_dir, cancel=cancel, progress=progress)

    def download_asset_file(
        self,
        asset: Asset,
        output_dir: os.PathLike | str,
        *,
        category: AssetFileCategory = AssetFileCategory.REVIT_FAMILY,
        cancel=None,
    ) -> Optional[DownloadResult]:
        """Download one asset's file of ``category``; ``None`` if it has none."""
        file = asset.first_file(category)
        if file is None:
            return None
        target = ensure_dir(output_dir) / local_filename(asset, file)
        path = self.client.download_file(file, target, cancel=cancel)
        return DownloadResult(path=str(path), filename=path.name, asset_id=asset.id)
