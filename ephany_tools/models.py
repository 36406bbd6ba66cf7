"""Value objects decoded from the Ephany asset API.

Each class mirrors one JSON object of the API and is built with
``from_dict``. ``to_dict`` re-encodes the wire shape; derived properties and
the client-stamped page number/size are never encoded.
"""
from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Tuple, TypeVar, Union

JsonValue = Union[str, int, float, bool, None, List[Any], Dict[str, Any]]

T = TypeVar("T")


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _opt_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    # str() first so floats keep their printed value (0.1 -> Decimal("0.1"))
    return Decimal(str(value))


def _opt_datetime(value: Any) -> Optional[_dt.datetime]:
    if not value:
        return None
    if isinstance(value, _dt.datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return _dt.datetime.fromisoformat(text)


def _decimal_out(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"Expected a JSON object for {what}, got {type(value).__name__}")
    return value


def _opt_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not value:
        return {}
    return _require_mapping(value, what)


class AssetFileCategory(Enum):
    """Closed set of file categories; values are the API's short codes."""

    CUT_SHEET = "PDS"
    CAD_FILE = "DWG"
    REVIT_FAMILY = "RFA"
    OTHER = "ETC"

    @classmethod
    def from_code(cls, code: Optional[str]) -> "AssetFileCategory":
        """Decode a short code; unknown or missing codes become ``OTHER``."""
        if code is None:
            return cls.OTHER
        try:
            return cls(str(code).strip().upper())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class AssetFile:
    """A file attached to an asset (cut sheet, CAD drawing, Revit family...)."""

    id: int
    url: Optional[str]
    category: AssetFileCategory = AssetFileCategory.OTHER
    category_display: Optional[str] = None
    uploaded_at: Optional[_dt.datetime] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssetFile":
        data = _require_mapping(data, "a file")
        return cls(
            id=int(data["id"]),
            url=_opt_str(data.get("file")),
            category=AssetFileCategory.from_code(data.get("category")),
            category_display=_opt_str(data.get("category_display")),
            uploaded_at=_opt_datetime(data.get("uploaded_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "file": self.url,
            "category": self.category.value,
            "category_display": self.category_display,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }


@dataclass(frozen=True)
class Manufacturer:
    id: int
    name: Optional[str] = None
    url: Optional[str] = None
    logo_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Manufacturer":
        data = _require_mapping(data, "a manufacturer")
        return cls(
            id=int(data["id"]),
            name=_opt_str(data.get("name")),
            url=_opt_str(data.get("url")),
            logo_url=_opt_str(data.get("logo")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "url": self.url, "logo": self.logo_url}


@dataclass(frozen=True)
class Category:
    id: int
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Category":
        data = _require_mapping(data, "a category")
        return cls(id=int(data["id"]), name=_opt_str(data.get("name")))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Asset:
    """A catalog entry with its specifications and attached files.

    Dimensions are in the units given by ``display_units`` (usually
    ``{"length": "mm"}``). ``custom_fields`` depends on the asset type and is
    kept as raw JSON values.
    """

    id: int
    type_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    model: Optional[str] = None
    manufacturer: Optional[Manufacturer] = None
    manufacturer_name: Optional[str] = None
    category: Optional[Category] = None
    category_name: Optional[str] = None
    url: Optional[str] = None
    catalog_img: Optional[str] = None
    overall_height: Optional[Decimal] = None
    overall_width: Optional[Decimal] = None
    overall_depth: Optional[Decimal] = None
    custom_fields: Dict[str, JsonValue] = field(default_factory=dict)
    display_units: Dict[str, str] = field(default_factory=dict)
    files: Tuple[AssetFile, ...] = ()

    # Derived views; computed from ``files`` on every access

    def first_file(self, category: AssetFileCategory) -> Optional[AssetFile]:
        return next((f for f in self.files if f.category is category), None)

    @property
    def revit_family_file(self) -> Optional[AssetFile]:
        return self.first_file(AssetFileCategory.REVIT_FAMILY)

    @property
    def cut_sheet_file(self) -> Optional[AssetFile]:
        return self.first_file(AssetFileCategory.CUT_SHEET)

    @property
    def has_revit_family(self) -> bool:
        return self.revit_family_file is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Asset":
        data = _require_mapping(data, "an asset")
        manufacturer = data.get("manufacturer")
        category = data.get("category")
        files = data.get("files") or []
        if not isinstance(files, list):
            raise TypeError(f"Expected 'files' to be a list, got {type(files).__name__}")
        return cls(
            id=int(data["id"]),
            type_id=_opt_str(data.get("type_id")),
            name=_opt_str(data.get("name")),
            description=_opt_str(data.get("description")),
            model=_opt_str(data.get("model")),
            manufacturer=Manufacturer.from_dict(manufacturer) if manufacturer else None,
            manufacturer_name=_opt_str(data.get("manufacturer_name")),
            category=Category.from_dict(category) if category else None,
            category_name=_opt_str(data.get("category_name")),
            url=_opt_str(data.get("url")),
            catalog_img=_opt_str(data.get("catalog_img")),
            overall_height=_opt_decimal(data.get("overall_height")),
            overall_width=_opt_decimal(data.get("overall_width")),
            overall_depth=_opt_decimal(data.get("overall_depth")),
            custom_fields=dict(_opt_mapping(data.get("custom_fields"), "custom_fields")),
            display_units={str(k): str(v) for k, v in _opt_mapping(data.get("_display_units"), "_display_units").items()},
            files=tuple(AssetFile.from_dict(f) for f in files),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type_id": self.type_id,
            "manufacturer": self.manufacturer.to_dict() if self.manufacturer else None,
            "manufacturer_name": self.manufacturer_name,
            "category": self.category.to_dict() if self.category else None,
            "category_name": self.category_name,
            "model": self.model,
            "name": self.name,
            "description": self.description,
            "url": self.url,
            "catalog_img": self.catalog_img,
            "overall_height": _decimal_out(self.overall_height),
            "overall_width": _decimal_out(self.overall_width),
            "overall_depth": _decimal_out(self.overall_depth),
            "custom_fields": dict(self.custom_fields),
            "files": [f.to_dict() for f in self.files],
            "_display_units": dict(self.display_units),
        }


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    """One page of a paginated listing.

    ``page_number`` and ``page_size`` are filled in by the client from the
    request that produced the page; the server does not send them.
    """

    total_count: int = 0
    items: List[T] = field(default_factory=list)
    next_page_url: Optional[str] = None
    previous_page_url: Optional[str] = None
    page_number: int = 1
    page_size: int = 0

    @property
    def has_next(self) -> bool:
        return bool(self.next_page_url)

    @property
    def has_previous(self) -> bool:
        return bool(self.previous_page_url)

    @classmethod
    def from_dict(
        cls,
        data: Optional[Mapping[str, Any]],
        item_factory: Callable[[Mapping[str, Any]], T],
        *,
        page_number: int = 1,
        page_size: int = 0,
    ) -> "PagedResult[T]":
        """Decode a ``{"count", "results", "next", "previous"}`` body.

        A ``None`` body, a missing/null ``results`` and empty links are all
        normalized (empty list, ``None`` links).
        """
        if data is None:
            return cls(page_number=page_number, page_size=page_size)
        if not isinstance(data, Mapping):
            raise TypeError(f"Expected a JSON object for a page, got {type(data).__name__}")
        results = data.get("results") or []
        if not isinstance(results, list):
            raise TypeError(f"Expected 'results' to be a list, got {type(results).__name__}")
        return cls(
            total_count=int(data.get("count") or 0),
            items=[item_factory(item) for item in results],
            next_page_url=_opt_str(data.get("next")) or None,
            previous_page_url=_opt_str(data.get("previous")) or None,
            page_number=page_number,
            page_size=page_size,
        )

    def to_dict(self, item_encoder: Optional[Callable[[T], Any]] = None) -> Dict[str, Any]:
        encode = item_encoder or (lambda item: item.to_dict())  # type: ignore[attr-defined]
        return {
            "count": self.total_count,
            "results": [encode(item) for item in self.items],
            "next": self.next_page_url,
            "previous": self.previous_page_url,
        }
