import json
from typing import Any, Callable, Iterable, List, Optional

import pytest

from ephany_tools.api import EphanyClient
from ephany_tools.options import AuthScheme, ClientOptions

BASE_URL = "https://ephany.test/api"


class FakeResponse:
    """Just enough of requests.Response for the client."""

    def __init__(
        self,
        status_code: int = 200,
        body: Any = None,
        *,
        text: Optional[str] = None,
        chunks: Optional[Iterable[bytes]] = None,
        url: str = "",
    ):
        self.status_code = status_code
        self.reason = {200: "OK", 401: "Unauthorized", 403: "Forbidden", 404: "Not Found", 500: "Server Error"}.get(
            status_code, ""
        )
        self.url = url
        self._text = text if text is not None else json.dumps(body)
        self._chunks = chunks
        self.closed = False

    def json(self):
        return json.loads(self._text)

    def iter_content(self, chunk_size: int = 1):
        if self._chunks is not None:
            yield from self._chunks
        else:
            yield self._text.encode()

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakeSession:
    """Replays queued responses and records every GET."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.headers = {}
        self.calls: List[dict] = []
        self.responses = list(responses or [])
        self.closed = 0
        self.on_get: Optional[Callable[[dict], None]] = None

    def queue(self, *responses):
        self.responses.extend(responses)

    def get(self, url, params=None, timeout=None, stream=False):
        call = {
            "url": url,
            "params": dict(params) if params else None,
            "timeout": timeout,
            "stream": stream,
            "headers": dict(self.headers),
        }
        self.calls.append(call)
        if self.on_get is not None:
            self.on_get(call)
        if not self.responses:
            raise AssertionError(f"unexpected request to {url}")
        nxt = self.responses.pop(0)
        if isinstance(nxt, BaseException):
            raise nxt
        if callable(nxt):
            nxt = nxt(call)
        nxt.url = nxt.url or url
        return nxt

    def close(self):
        self.closed += 1


def asset_json(asset_id: int, *, files=(), **extra) -> dict:
    data = {
        "id": asset_id,
        "type_id": f"AVN-{asset_id}",
        "manufacturer": {"id": 7, "name": "Avantco", "url": "https://avantco.example", "logo": None},
        "manufacturer_name": "Avantco",
        "category": {"id": 3, "name": "Refrigerators"},
        "category_name": "Refrigerators",
        "model": f"M{asset_id}",
        "name": f"Asset {asset_id}",
        "description": "",
        "url": f"https://avantco.example/p/{asset_id}",
        "catalog_img": None,
        "overall_height": 1830.5,
        "overall_width": None,
        "overall_depth": 700,
        "custom_fields": {"door_type": "glass", "door_quantity": 2},
        "files": list(files) if files is not None else None,
        "_display_units": {"length": "mm"},
    }
    data.update(extra)
    return data


def file_json(file_id: int, category: str = "RFA", url: Optional[str] = None) -> dict:
    return {
        "id": file_id,
        "file": url or f"https://media.ephany.test/files/{file_id}.bin",
        "category": category,
        "category_display": {"RFA": "Revit Family", "PDS": "Cut Sheet", "DWG": "CAD File"}.get(category, "Other"),
        "uploaded_at": "2024-05-01T12:30:00Z",
    }


def page_json(items, *, count: Optional[int] = None, next_url: Optional[str] = None, previous: Optional[str] = None):
    return {
        "count": len(items) if count is None else count,
        "results": list(items),
        "next": next_url,
        "previous": previous,
    }


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    c = EphanyClient(ClientOptions(BASE_URL, "secret-key", AuthScheme.API_KEY), session=session)
    yield c
    c.close()
