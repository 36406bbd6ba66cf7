from __future__ import annotations
import logging
import math
import os
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import requests
from tqdm import tqdm

from .config import ASSETS_ENDPOINT, CRAWL_PAGE_SIZE, DEFAULT_PAGE_SIZE, DOWNLOAD_CHUNK_SIZE
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectivityError,
    InvalidArgumentError,
    OperationCancelled,
    ParseError,
    RequestError,
)
from .models import Asset, AssetFile, PagedResult
from .options import AuthScheme, ClientOptions
from .ports import AssetCatalogPort

log = logging.getLogger("ephany_tools")


def _check_cancelled(cancel) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelled("Operation cancelled by caller.")


def _validate_page(page: int, page_size: int) -> None:
    if page < 1:
        raise InvalidArgumentError(f"page must be greater than 0 (got {page})")
    if page_size < 1:
        raise InvalidArgumentError(f"page_size must be greater than 0 (got {page_size})")


def _auth_headers(options: ClientOptions) -> Dict[str, str]:
    """Headers carrying the credential for the configured scheme.

    The scheme is taken as given and never guessed from the credential.
    Unknown schemes fall back to the API key header.
    """
    headers = {"Accept": "application/json"}
    if options.scheme == AuthScheme.USER_TOKEN:
        headers["Authorization"] = f"Token {options.api_key}"
    else:
        if options.scheme != AuthScheme.API_KEY:
            log.warning("Unknown auth scheme %r; sending the credential as X-Api-Key", options.scheme)
        headers["X-Api-Key"] = options.api_key
    return headers


def _remove_partial(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    else:
        log.info("Removed partial download %s", path)


class EphanyClient(AssetCatalogPort):
    """Thin wrapper over the Ephany asset REST API.

    Holds one ``requests.Session`` for its whole life. Call :meth:`close`
    (or use the client as a context manager) when finished.

    Every operation takes an optional ``cancel`` signal (anything with
    ``is_set()``, normally a ``threading.Event``). It is checked before each
    request, after each response and between download chunks; once set the
    operation raises :class:`OperationCancelled`.

    Calls on one instance are expected to be sequential.
    """

    def __init__(self, options: ClientOptions, session: Optional[requests.Session] = None):
        if options is None:
            raise ConfigurationError("Client options are required.")
        self.options = options
        self.base_url = options.base_url
        self.timeout = options.timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(_auth_headers(options))
        self._closed = False

    # ------------------------- Lifecycle ---------------------------------
    def close(self) -> None:
        """Release the underlying connection pool. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self.session.close()

    def __enter__(self) -> "EphanyClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise ConfigurationError("The client has been closed.")

    # ------------------------- Core HTTP helpers -------------------------
    def _send_get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        stream: bool = False,
        cancel=None,
        bad_url=ConfigurationError,
    ):
        self._ensure_open()
        _check_cancelled(cancel)
        try:
            r = self.session.get(url, params=params, timeout=self.timeout, stream=stream)
        except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema) as e:
            raise bad_url(f"Invalid URL {url!r}: {e}") from e
        except requests.RequestException as e:
            raise ConnectivityError(f"Network error connecting to Ephany API ({url}): {e}") from e
        if cancel is not None and cancel.is_set():
            r.close()
            raise OperationCancelled("Operation cancelled by caller.")
        return r

    @staticmethod
    def _raise_for_status(r) -> None:
        status = r.status_code
        if status in (401, 403):
            r.close()
            raise AuthenticationError(
                "Authentication failed. Your API key or user token is invalid or expired.",
                status_code=status,
                url=r.url,
            )
        if not 200 <= status < 300:
            reason = getattr(r, "reason", None)
            r.close()
            label = f"HTTP {status} {reason}" if reason else f"HTTP {status}"
            raise RequestError(f"{label} for {r.url}", status_code=status, url=r.url)

    def _get_json(self, endpoint: str, params: Dict[str, Any], *, cancel=None) -> Any:
        url = f"{self.base_url}{endpoint.lstrip('/')}"
        log.debug("GET %s params=%s", url, params)
        r = self._send_get(url, params=params, cancel=cancel)
        self._raise_for_status(r)
        try:
            return r.json()
        except ValueError as e:
            raise ParseError(f"Failed to parse the response from {url} as JSON.") from e

    # ------------------------- Listing & search --------------------------
    def _fetch_page(self, params: Dict[str, Any], page: int, page_size: int, *, cancel=None) -> PagedResult[Asset]:
        data = self._get_json(ASSETS_ENDPOINT, params, cancel=cancel)
        try:
            return PagedResult.from_dict(data, Asset.from_dict, page_number=page, page_size=page_size)
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise ParseError(f"Unexpected asset page shape for page {page}: {e}") from e

    def get_asset_page(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE, *, cancel=None) -> PagedResult[Asset]:
        """Fetch one page of assets.

        The returned page's ``page_number``/``page_size`` are the requested
        values, whatever the body says. A missing ``results`` list comes back
        as an empty list.
        """
        _validate_page(page, page_size)
        return self._fetch_page({"page": page, "pageSize": page_size}, page, page_size, cancel=cancel)

    def search_assets(
        self, keyword: str, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE, *, cancel=None
    ) -> PagedResult[Asset]:
        """Fetch one page of assets matching ``keyword``.

        A blank keyword is an ordinary :meth:`get_asset_page` call. Later
        pages of a search are fetched by calling again with a higher ``page``.
        """
        if keyword is None or not keyword.strip():
            return self.get_asset_page(page, page_size, cancel=cancel)
        _validate_page(page, page_size)
        params = {"search": keyword, "page": page, "pageSize": page_size}
        return self._fetch_page(params, page, page_size, cancel=cancel)

    def iter_asset_pages(self, page_size: int = CRAWL_PAGE_SIZE, *, cancel=None) -> Iterator[PagedResult[Asset]]:
        """Yield every page in order, following ``next`` links.

        Stops only when a page comes back without a ``next`` link. There is no
        page cap; bound a misbehaving server with ``cancel``.
        """
        page = 1
        while True:
            result = self.get_asset_page(page, page_size, cancel=cancel)
            yield result
            if not result.next_page_url:
                return
            page += 1

    def get_all_assets(self, *, cancel=None, progress: bool = False) -> List[Asset]:
        """Return *all* assets across every page, in server order.

        Any page failure aborts the crawl; nothing partial is returned.
        """
        all_assets: List[Asset] = []
        bar = tqdm(desc="Crawling assets", unit="page", disable=not progress)
        try:
            for result in self.iter_asset_pages(CRAWL_PAGE_SIZE, cancel=cancel):
                all_assets.extend(result.items)
                if bar.total is None and result.total_count:
                    bar.total = math.ceil(result.total_count / CRAWL_PAGE_SIZE)
                    bar.refresh()
                bar.update(1)
        finally:
            bar.close()
        log.info("Crawled %d assets", len(all_assets))
        return all_assets

    def get_revit_assets(self, *, cancel=None) -> List[Asset]:
        """Crawl the collection and keep assets that carry a Revit family file."""
        return [a for a in self.get_all_assets(cancel=cancel) if a.has_revit_family]

    # -------------------------- Downloads --------------------------------
    def download_file(
        self,
        file: AssetFile,
        destination: Union[str, os.PathLike],
        *,
        cancel=None,
        chunk_size: int = DOWNLOAD_CHUNK_SIZE,
    ) -> Path:
        """Stream-download ``file`` to ``destination``.

        The status is checked before the destination is opened. An existing
        file is overwritten; the parent directory must already exist. If the
        transfer fails or is cancelled part way, the partial file is removed
        before the error propagates.
        """
        if file is None or not file.url:
            raise InvalidArgumentError("Invalid file or URL provided.")
        target = Path(destination)
        with self._send_get(file.url, stream=True, cancel=cancel, bad_url=InvalidArgumentError) as r:
            self._raise_for_status(r)
            f = open(target, "wb")
            completed = False
            try:
                with f:
                    for chunk in r.iter_content(chunk_size=chunk_size):
                        _check_cancelled(cancel)
                        if chunk:
                            f.write(chunk)
                completed = True
            except requests.RequestException as e:
                raise ConnectivityError(f"Download of {file.url} failed mid-stream: {e}") from e
            finally:
                if not completed:
                    _remove_partial(target)
        log.info("Downloaded %s -> %s", file.url, target)
        return target
