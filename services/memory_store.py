# services/memory_store.py
"""In-process catalog store, used for fixtures and adapter-agnostic checks."""

from __future__ import annotations

from dataclasses import replace
from threading import RLock
from typing import Dict, List, Optional, Sequence, Tuple

from config import settings
from errors import MalformedRecord
from services.filters import FilterExpression, ProductRecord
from services.store import CatalogStore, CategoryInfo


class MemoryCatalogStore(CatalogStore):

    def __init__(self) -> None:
        self._lock = RLock()
        self._products: Dict[int, ProductRecord] = {}
        self._categories: Dict[int, CategoryInfo] = {}
        self._users: Dict[int, str] = {}

    # --- loading ---

    def add_category(self, category_id: int, name: str, slug: Optional[str] = None) -> CategoryInfo:
        info = CategoryInfo(id=category_id, name=name, slug=slug or name.lower().replace(" ", "-"))
        with self._lock:
            self._categories[category_id] = info
        return info

    def add_user(self, user_id: int, display_name: str) -> None:
        with self._lock:
            self._users[user_id] = display_name

    def add_product(
        self,
        product_id: int,
        title: Optional[str] = None,
        attributes: Optional[Dict[str, str]] = None,
        categories: Sequence[int] = (),
        status: str = "published",
        slug: Optional[str] = None,
    ) -> ProductRecord:
        with self._lock:
            slugs = tuple(self._categories[c].slug for c in categories)
            record = ProductRecord(
                id=product_id,
                title=title,
                slug=slug or f"product-{product_id}",
                status=status,
                attributes=dict(attributes or {}),
                category_ids=tuple(categories),
                category_slugs=slugs,
            )
            self._products[product_id] = record
        return record

    def set_attribute(self, product_id: int, name: str, value: Optional[str]) -> None:
        with self._lock:
            record = self._products[product_id]
            attributes = dict(record.attributes)
            if value is None:
                attributes.pop(name, None)
            else:
                attributes[name] = value
            self._products[product_id] = replace(record, attributes=attributes)

    def remove_product(self, product_id: int) -> None:
        with self._lock:
            self._products.pop(product_id, None)

    # --- AttributeStore ---

    def get(self, product_id: int, name: str) -> Optional[str]:
        record = self._products.get(product_id)
        return record.attributes.get(name) if record else None

    def attributes_of(self, product_id: int, names: Sequence[str]) -> Dict[str, str]:
        record = self._products.get(product_id)
        if record is None:
            return {}
        return {n: record.attributes[n] for n in names if n in record.attributes}

    def record(self, product_id: int) -> ProductRecord:
        record = self._products.get(product_id)
        if record is None:
            raise MalformedRecord(product_id)
        return record

    def locator(self, record: ProductRecord) -> Optional[str]:
        if not record.slug:
            return None
        return settings.permalink_template.format(slug=record.slug, id=record.id)

    def query(self, expr: FilterExpression, offset: int, limit: int) -> Tuple[List[int], int]:
        with self._lock:
            records = list(self._products.values())
        matched = sorted(
            (r for r in records if expr.evaluate(r)),
            key=lambda r: ((r.title or "").lower(), r.id),
        )
        return [r.id for r in matched[offset:offset + limit]], len(matched)

    # --- IdentityResolver ---

    def resolve_user(self, user_id: int) -> Optional[str]:
        return self._users.get(user_id)

    # --- CategoryLookup ---

    def list_categories(self) -> List[CategoryInfo]:
        with self._lock:
            return sorted(self._categories.values(), key=lambda c: c.name.lower())

    def categories_of(self, product_id: int) -> List[str]:
        record = self._products.get(product_id)
        if record is None:
            return []
        return [self._categories[c].name for c in record.category_ids if c in self._categories]
