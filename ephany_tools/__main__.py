from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import List, Optional, Sequence

import pandas as pd

from .api import EphanyClient
from .config import DEFAULT_PAGE_SIZE, DEFAULT_TIMEOUT, TABLE_COLUMNS
from .exceptions import EphanyError, OperationCancelled
from .models import Asset, AssetFileCategory, PagedResult
from .services.catalog import CatalogService
from .utils import read_env_options, to_csv, truncate

CATEGORY_CHOICES = {
    "rfa": AssetFileCategory.REVIT_FAMILY,
    "pds": AssetFileCategory.CUT_SHEET,
    "dwg": AssetFileCategory.CAD_FILE,
    "etc": AssetFileCategory.OTHER,
}


def render_table(assets: Sequence[Asset], show_row_numbers: bool = False) -> str:
    """Fixed-width asset table (name, type id, manufacturer, RFA flag)."""
    if not assets:
        return "No assets found."
    rows = []
    for a in assets:
        values = {
            "name": a.name,
            "type_id": a.type_id,
            "manufacturer_name": a.manufacturer_name or "N/A",
            "rfa": "[YES]" if a.has_revit_family else "[NO]",
        }
        rows.append({header: truncate(values[col], width).ljust(width) for col, header, width in TABLE_COLUMNS})
    df = pd.DataFrame(rows, columns=[header for _, header, _ in TABLE_COLUMNS])
    if show_row_numbers:
        df.index = pd.RangeIndex(1, len(df) + 1, name="#")
    return df.to_string(index=show_row_numbers, justify="left")


def _print_page(result: PagedResult[Asset], as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
        return
    print(render_table(result.items))
    print(f"Total Assets: {result.total_count} | Showing {len(result.items)} on page {result.page_number}.")


def _print_assets(assets: List[Asset], as_json: bool, show_row_numbers: bool = False) -> None:
    if as_json:
        print(json.dumps([a.to_dict() for a in assets], indent=2))
        return
    print(render_table(assets, show_row_numbers))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ephany-tools",
        description="Ephany-Tools: browse, search and download assets from an Ephany catalog",
    )
    p.add_argument("--scheme", default=None, help="api_key (default) or user_token; overrides EPHANY_AUTH_SCHEME")
    p.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Request timeout in seconds")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    page = sub.add_parser("page", help="Show one page of assets")
    page.add_argument("--page", type=int, default=1)
    page.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE)
    page.add_argument("--json", action="store_true", help="Print the raw page as JSON")

    all_ = sub.add_parser("all", help="Crawl every page")
    all_.add_argument("--csv", default=None, help="Also write the assets to this CSV file")
    all_.add_argument("--json", action="store_true")

    revit = sub.add_parser("revit", help="Only assets with a Revit family (RFA) file")
    revit.add_argument("--row", type=int, default=None, help="Download the RFA of this table row")
    revit.add_argument("--out", default=".", help="Directory for downloaded files")
    revit.add_argument("--json", action="store_true")

    search = sub.add_parser("search", help="Keyword search (one page)")
    search.add_argument("keyword")
    search.add_argument("--page", type=int, default=1)
    search.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE)
    search.add_argument("--json", action="store_true")

    download = sub.add_parser("download", help="Download one file category for every asset")
    download.add_argument("--out", required=True, help="Output directory")
    download.add_argument("--category", choices=sorted(CATEGORY_CHOICES), default="rfa")
    return p


def run(args: argparse.Namespace, client: EphanyClient) -> int:
    service = CatalogService(client=client)

    if args.command == "page":
        _print_page(client.get_asset_page(page=args.page, page_size=args.page_size), args.json)

    elif args.command == "all":
        assets = client.get_all_assets(progress=not args.json)
        _print_assets(assets, args.json)
        if args.csv:
            to_csv(service.assets_frame(assets), args.csv)
        if not args.json:
            print(f"Total Assets retrieved: {len(assets)}")

    elif args.command == "revit":
        assets = client.get_revit_assets()
        _print_assets(assets, args.json, show_row_numbers=True)
        if not args.json:
            print(f"Found {len(assets)} assets with RFA files.")
        if args.row is not None:
            if not 1 <= args.row <= len(assets):
                print(f"[error] Row must be between 1 and {len(assets)}.", file=sys.stderr)
                return 2
            result = service.download_asset_file(assets[args.row - 1], args.out)
            print(f"Downloaded to: {result.path}")

    elif args.command == "search":
        if not args.json:
            print(f"Searching for '{args.keyword}'...")
        result = client.search_assets(args.keyword, page=args.page, page_size=args.page_size)
        _print_page(result, args.json)

    elif args.command == "download":
        category = CATEGORY_CHOICES[args.category]
        assets = client.get_all_assets(progress=True)
        results = service.download_files(assets, args.out, category=category)
        print(f"Downloaded {len(results)} file(s) to {args.out}")

    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="[%(levelname)s] %(message)s")

    try:
        options = read_env_options(scheme=args.scheme, timeout=args.timeout)
        with EphanyClient(options) as client:
            return run(args, client)
    except (OperationCancelled, KeyboardInterrupt):
        print("\n[cancelled]", file=sys.stderr)
        return 130
    except EphanyError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
