from __future__ import annotations
import os

# Collection path, relative to the (slash-terminated) base URL
ASSETS_ENDPOINT: str = "assets/"

DEFAULT_TIMEOUT: float = 100.0
DEFAULT_PAGE_SIZE: int = 20
# Larger page size for full crawls to keep the number of round trips down
CRAWL_PAGE_SIZE: int = 50
DOWNLOAD_CHUNK_SIZE: int = 1024 * 1024

# Where the CLI looks for connection settings by default
BASE_URL_ENV: str = os.environ.get("EPHANY_BASE_URL_ENV", "EPHANY_BASE_URL")
API_KEY_ENV: str = os.environ.get("EPHANY_API_KEY_ENV", "EPHANY_API_KEY")
AUTH_SCHEME_ENV: str = os.environ.get("EPHANY_AUTH_SCHEME_ENV", "EPHANY_AUTH_SCHEME")

# Local file extension per file category code; anything else keeps the URL suffix
CATEGORY_EXTENSIONS = {
    "RFA": ".rfa",
    "PDS": ".pdf",
    "DWG": ".dwg",
}

# Summary columns used for tables and CSV exports
ASSET_SUMMARY_COLUMNS = [
    "id",
    "type_id",
    "name",
    "model",
    "manufacturer_name",
    "category_name",
    "overall_height",
    "overall_width",
    "overall_depth",
    "file_count",
    "has_revit_family",
    "url",
]

# Console table layout: (column, header, width)
TABLE_COLUMNS = [
    ("name", "Name", 35),
    ("type_id", "Type ID", 10),
    ("manufacturer_name", "Manufacturer", 15),
    ("rfa", "RFA", 10),
]
