from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import pandas as pd

from .config import API_KEY_ENV, ASSET_SUMMARY_COLUMNS, AUTH_SCHEME_ENV, BASE_URL_ENV, DEFAULT_TIMEOUT
from .exceptions import ConfigurationError
from .models import Asset
from .options import AuthScheme, ClientOptions

logger = logging.getLogger("ephany_tools")


def ensure_dir(path: os.PathLike | str) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def parse_scheme(value: Optional[str]) -> AuthScheme:
    """Map ``api_key``/``user_token`` (also ``key``/``token``) to an AuthScheme."""
    if not value:
        return AuthScheme.API_KEY
    v = value.strip().lower().replace("-", "_")
    if v in ("token", "user_token", "usertoken"):
        return AuthScheme.USER_TOKEN
    if v in ("key", "api_key", "apikey"):
        return AuthScheme.API_KEY
    raise ConfigurationError(f"Unknown auth scheme {value!r}; use 'api_key' or 'user_token'.")


def read_env_options(
    environ: Optional[Mapping[str, str]] = None,
    *,
    scheme: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> ClientOptions:
    """Build ClientOptions from the environment (CLI use only)."""
    env = os.environ if environ is None else environ
    base_url = env.get(BASE_URL_ENV)
    api_key = env.get(API_KEY_ENV)
    if not base_url or not api_key:
        raise ConfigurationError(f"Please set the {BASE_URL_ENV} and {API_KEY_ENV} environment variables.")
    chosen = parse_scheme(scheme or env.get(AUTH_SCHEME_ENV))
    logger.info("Using %s from env var %s (%s)", base_url, BASE_URL_ENV, chosen.value)
    return ClientOptions(base_url=base_url, api_key=api_key, scheme=chosen, timeout=timeout)


def to_csv(df: pd.DataFrame, path: os.PathLike | str) -> Path:
    path = Path(path)
    df.to_csv(path, index=False)
    logger.info("Wrote %s (%d rows, %d cols)", path, df.shape[0], df.shape[1])
    return path


def asset_row(asset: Asset) -> Dict[str, Any]:
    # One flat record per asset; custom fields become "custom_fields.<key>" columns
    row: Dict[str, Any] = {
        "id": asset.id,
        "type_id": asset.type_id,
        "name": asset.name,
        "model": asset.model,
        "manufacturer_name": asset.manufacturer_name,
        "category_name": asset.category_name,
        "overall_height": float(asset.overall_height) if asset.overall_height is not None else None,
        "overall_width": float(asset.overall_width) if asset.overall_width is not None else None,
        "overall_depth": float(asset.overall_depth) if asset.overall_depth is not None else None,
        "file_count": len(asset.files),
        "has_revit_family": asset.has_revit_family,
        "url": asset.url,
    }
    for key, value in asset.custom_fields.items():
        row[f"custom_fields.{key}"] = value
    return row


def flatten_assets(assets: Iterable[Asset]) -> pd.DataFrame:
    rows = [asset_row(a) for a in assets]
    if not rows:
        return pd.DataFrame(columns=ASSET_SUMMARY_COLUMNS)
    return pd.json_normalize(rows, sep=".")


def truncate(value: Optional[str], max_length: int) -> str:
    if not value:
        return ""
    return value if len(value) <= max_length else value[: max_length - 3] + "..."
