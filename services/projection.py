# services/projection.py
"""
Read-only transforms from stored products to display-ready records.

Absent values are exposed as None, present values (including "") as strings;
picking a placeholder glyph for None is left to whoever renders the row.
"""

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from attributes import (
    ATTRIBUTE_SCHEMA,
    LIST_ATTRIBUTES,
    AttributeKind,
    AttributeName,
    is_valid_url,
    parse_date,
)
from config import settings
from errors import MalformedRecord
from services.filters import parse_id
from services.store import CatalogStore

logger = logging.getLogger(__name__)

OWNER = AttributeName.PRODUCT_OWNER.value


class Row(BaseModel):
    id: int
    slug: Optional[str] = None
    title: Optional[str] = None
    locator: Optional[str] = None
    categories: Optional[str] = None
    attributes: Dict[str, Optional[str]] = Field(default_factory=dict)


class FieldValue(BaseModel):
    name: str
    label: str
    kind: str
    raw: Optional[str] = None
    display: Optional[str] = None
    present: bool = False
    is_link: bool = False


class ProductDetail(BaseModel):
    id: int
    slug: Optional[str] = None
    title: Optional[str] = None
    status: Optional[str] = None
    locator: Optional[str] = None
    categories: Optional[str] = None
    fields: List[FieldValue] = Field(default_factory=list)


def resolve_owner(store: CatalogStore, raw: Optional[str]) -> Optional[str]:
    """Numeric owners are user IDs; anything else is shown as stored."""
    if raw is None:
        return None
    user_id = parse_id(raw)
    if user_id is None:
        return raw
    name = store.resolve_user(user_id)
    return name if name else raw


def _join_categories(store: CatalogStore, product_id: int) -> Optional[str]:
    names = store.categories_of(product_id)
    return ", ".join(names) if names else None


def project(store: CatalogStore, product_id: int) -> Row:
    """
    Flat list row for one product. Never raises for a broken record: a
    vanished product yields a row of empty markers.
    """
    names = [a.value for a in LIST_ATTRIBUTES]
    try:
        record = store.record(product_id)
    except MalformedRecord as e:
        logger.info("Projecting empty row: %s", e)
        return Row(id=product_id, attributes={name: None for name in names})

    present = store.attributes_of(product_id, names)
    attributes = {name: present.get(name) for name in names}
    attributes[OWNER] = resolve_owner(store, attributes.get(OWNER))

    return Row(
        id=record.id,
        slug=record.slug,
        title=record.title,
        locator=store.locator(record),
        categories=_join_categories(store, product_id),
        attributes=attributes,
    )


def project_page(store: CatalogStore, ids: List[int]) -> List[Row]:
    return [project(store, pid) for pid in ids]


def _format_field(store: CatalogStore, kind: AttributeKind, raw: str):
    if kind is AttributeKind.USER:
        return resolve_owner(store, raw), False
    if kind is AttributeKind.URL:
        return raw, is_valid_url(raw)
    if kind is AttributeKind.DATE:
        parsed = parse_date(raw)
        return (parsed.strftime(settings.date_format) if parsed else raw), False
    return raw, False


def project_detail(store: CatalogStore, product_id: int) -> ProductDetail:
    """
    Details view: every schema attribute with its raw and display value.
    Raises MalformedRecord when the product does not exist.
    """
    record = store.record(product_id)
    present = store.attributes_of(product_id, [s.name.value for s in ATTRIBUTE_SCHEMA])

    fields = []
    for spec in ATTRIBUTE_SCHEMA:
        raw = present.get(spec.name.value)
        display, is_link = (None, False)
        if raw is not None and raw != "":
            display, is_link = _format_field(store, spec.kind, raw)
        elif raw is not None:
            display = raw
        fields.append(FieldValue(
            name=spec.name.value,
            label=spec.label,
            kind=spec.kind.value,
            raw=raw,
            display=display,
            present=raw is not None,
            is_link=is_link,
        ))

    return ProductDetail(
        id=record.id,
        slug=record.slug,
        title=record.title,
        status=record.status,
        locator=store.locator(record),
        categories=_join_categories(store, product_id),
        fields=fields,
    )
