# attributes.py
"""
The fixed product attribute schema, plus write-time sanitization and
display formatting by value kind.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import HttpUrl, TypeAdapter, ValidationError

from errors import UnknownAttribute


class AttributeName(str, Enum):
    INTERNAL_SKU = "internal_sku"
    VENDOR_NAME = "vendor_name"
    VENDOR_SKU = "vendor_sku"
    TYPE = "type"
    CONFIGURATION = "configuration"
    DETAIL = "detail"
    KEYWORDS_RAW = "keywords_raw"
    KEYWORDS = "keywords"
    ALTERNATE_VENDOR_NAME = "alternate_vendor_name"
    ALTERNATE_VENDOR_SKU = "alternate_vendor_sku"
    LAUNCH_DATE = "launch_date"
    PRODUCT_URL = "product_url"
    PRODUCT_OWNER = "product_owner"


class AttributeKind(str, Enum):
    TEXT = "text"
    LONG_TEXT = "long_text"
    URL = "url"
    DATE = "date"
    USER = "user"


@dataclass(frozen=True)
class AttributeSpec:
    name: AttributeName
    label: str
    kind: AttributeKind = AttributeKind.TEXT


ATTRIBUTE_SCHEMA: Tuple[AttributeSpec, ...] = (
    AttributeSpec(AttributeName.INTERNAL_SKU, "Internal SKU"),
    AttributeSpec(AttributeName.VENDOR_NAME, "Vendor Name"),
    AttributeSpec(AttributeName.VENDOR_SKU, "Vendor SKU"),
    AttributeSpec(AttributeName.TYPE, "Type"),
    AttributeSpec(AttributeName.CONFIGURATION, "Configuration", AttributeKind.LONG_TEXT),
    AttributeSpec(AttributeName.DETAIL, "Detail", AttributeKind.LONG_TEXT),
    AttributeSpec(AttributeName.KEYWORDS_RAW, "Keywords (raw text)", AttributeKind.LONG_TEXT),
    AttributeSpec(AttributeName.KEYWORDS, "Keywords"),
    AttributeSpec(AttributeName.ALTERNATE_VENDOR_NAME, "Alternate Vendor Name"),
    AttributeSpec(AttributeName.ALTERNATE_VENDOR_SKU, "Alternate Vendor SKU"),
    AttributeSpec(AttributeName.LAUNCH_DATE, "Launch Date", AttributeKind.DATE),
    AttributeSpec(AttributeName.PRODUCT_URL, "Product URL", AttributeKind.URL),
    AttributeSpec(AttributeName.PRODUCT_OWNER, "Product Owner", AttributeKind.USER),
)

_BY_NAME: Dict[str, AttributeSpec] = {spec.name.value: spec for spec in ATTRIBUTE_SCHEMA}

# Columns shown in list rows, in display order.
LIST_ATTRIBUTES: Tuple[AttributeName, ...] = (
    AttributeName.INTERNAL_SKU,
    AttributeName.VENDOR_NAME,
    AttributeName.VENDOR_SKU,
    AttributeName.TYPE,
    AttributeName.CONFIGURATION,
    AttributeName.DETAIL,
    AttributeName.ALTERNATE_VENDOR_NAME,
    AttributeName.ALTERNATE_VENDOR_SKU,
    AttributeName.LAUNCH_DATE,
    AttributeName.PRODUCT_OWNER,
)


def get_spec(name) -> AttributeSpec:
    """Look up an attribute by name or enum member; raises UnknownAttribute."""
    key = name.value if isinstance(name, AttributeName) else str(name)
    try:
        return _BY_NAME[key]
    except KeyError:
        raise UnknownAttribute(key) from None


def is_known(name: str) -> bool:
    return name in _BY_NAME


# ---------------------------------------------------------------------------
# Sanitization (write side)
# ---------------------------------------------------------------------------

_TAG_RE = re.compile(r"<[^>]*>")
_SPACE_RE = re.compile(r"\s+")
_URL_ADAPTER = TypeAdapter(HttpUrl)


def _strip_tags(value: str) -> str:
    return _TAG_RE.sub("", value)


def sanitize_text(value: str) -> str:
    return _SPACE_RE.sub(" ", _strip_tags(value)).strip()


def sanitize_long_text(value: str) -> str:
    lines = _strip_tags(value).replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return "\n".join(line.strip() for line in lines).strip()


def sanitize_url(value: str) -> str:
    candidate = value.strip()
    if not candidate:
        return ""
    try:
        _URL_ADAPTER.validate_python(candidate)
    except ValidationError:
        return ""
    return candidate


def sanitize_value(name, value: Optional[str]) -> Optional[str]:
    """
    Cleans a raw form value for storage according to the attribute's kind.

    None means "remove the attribute" and is returned unchanged.
    """
    spec = get_spec(name)
    if value is None:
        return None
    value = str(value)
    if spec.kind is AttributeKind.URL:
        return sanitize_url(value)
    if spec.kind is AttributeKind.LONG_TEXT:
        return sanitize_long_text(value)
    return sanitize_text(value)


# ---------------------------------------------------------------------------
# Display formatting (details view)
# ---------------------------------------------------------------------------

_DATE_INPUT_FORMATS = ("%Y%m%d", "%d/%m/%Y", "%m/%d/%Y")


def parse_date(value: str) -> Optional[datetime]:
    text = (value or "").strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def is_valid_url(value: str) -> bool:
    return bool(value) and sanitize_url(value) == value.strip()


__all__ = [
    "AttributeName",
    "AttributeKind",
    "AttributeSpec",
    "ATTRIBUTE_SCHEMA",
    "LIST_ATTRIBUTES",
    "get_spec",
    "is_known",
    "sanitize_value",
    "parse_date",
    "is_valid_url",
]
